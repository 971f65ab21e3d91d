"""Front-end dump loader.

Reads a YAML or JSON file holding `functions` (the declaration graph) and
`types` (the type model) and validates both.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from routespec.errors import SourceError
from routespec.graph.declarations import DeclarationGraph
from routespec.graph.types import TypeDecl, TypeModel


def load_source(file_path: Path) -> tuple[DeclarationGraph, TypeModel]:
    """Parse a front-end dump into a DeclarationGraph and a TypeModel."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise SourceError(f"Cannot read {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise SourceError(f"{file_path}: expected a mapping with 'functions' and 'types'")
    return parse_source(data, origin=str(file_path))


def parse_source(data: dict, origin: str = "<source>") -> tuple[DeclarationGraph, TypeModel]:
    try:
        graph = DeclarationGraph.model_validate({"functions": data.get("functions", [])})
        decls = [TypeDecl.model_validate(t) for t in data.get("types", [])]
    except ValidationError as e:
        raise SourceError(f"{origin}: invalid declaration dump\n{e}") from e
    return graph, TypeModel(decls)
