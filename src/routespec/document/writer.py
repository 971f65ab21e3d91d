"""Document writer: canonical key order, JSON/YAML rendering and partial-spec I/O."""

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from routespec.document.model import Document, PartialDocument
from routespec.errors import SourceError


def canonical(document: Document) -> dict:
    """Plain dict of `document` with schema names and their properties sorted."""
    data = document.model_dump(by_alias=True, exclude_none=True)
    components = data.get("components", {})
    schemas = components.get("schemas", {})
    components["schemas"] = {name: _sort_properties(schemas[name]) for name in sorted(schemas)}
    return data


def _sort_properties(schema: dict) -> dict:
    properties = schema.get("properties")
    if properties:
        schema["properties"] = {name: properties[name] for name in sorted(properties)}
    return schema


def render(document: Document, fmt: str = "yaml") -> str:
    data = canonical(document)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def write_document(document: Document, output: Path, fmt: str = "yaml") -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render(document, fmt), encoding="utf-8")
    return output


def load_document(file_path: Path) -> Document:
    """Read a JSON or YAML document back in (the local side of a merge)."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        return Document.model_validate(data or {})
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise SourceError(f"Cannot read document {file_path}: {e}") from e


def dump_partial(partial: PartialDocument, output: Path) -> Path:
    """Write a contributor's partial spec as JSON."""
    output.parent.mkdir(parents=True, exist_ok=True)
    data = partial.model_dump(by_alias=True, exclude_none=True)
    output.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return output


def load_partial(file_path: Path) -> PartialDocument:
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        return PartialDocument.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise SourceError(f"Cannot read partial spec {file_path}: {e}") from e
