"""One documentation-generation pass.

A pass owns a single schema registry and the route roots collected from its
entry points; nothing is shared between passes.
"""

import logging

from routespec.config import DocsConfig
from routespec.document.assembler import assemble
from routespec.document.model import Document
from routespec.graph.declarations import CallNode, DeclarationGraph, FunctionDecl
from routespec.graph.types import TypeModel
from routespec.routes.builder import RouteTreeBuilder
from routespec.routes.reducer import OperationRecord, reduce
from routespec.routes.tree import Group
from routespec.schema.engine import SchemaSynthesizer
from routespec.schema.node import SchemaRegistry

logger = logging.getLogger(__name__)


class DocumentationPass:
    def __init__(self, config: DocsConfig, graph: DeclarationGraph, types: TypeModel):
        self.config = config
        self.graph = graph
        self.registry = SchemaRegistry()
        self.synthesizer = SchemaSynthesizer(config, types, self.registry)
        self.builder = RouteTreeBuilder(config, graph, self.synthesizer)
        self.roots: list[Group] = []

    @property
    def warnings(self) -> list[str]:
        return [*self.builder.warnings, *self.synthesizer.warnings]

    def add(self, entry: FunctionDecl | CallNode) -> list[Group]:
        """Walk one entry point and keep the route roots it declares."""
        logger.debug("Walking entry point %s", entry.name)
        roots = self.builder.build(entry)
        self.roots.extend(roots)
        return roots

    def run(self) -> "DocumentationPass":
        for fn in self.graph.entry_points():
            self.add(fn)
        return self

    def records(self) -> list[OperationRecord]:
        records = []
        for root in self.roots:
            records.extend(reduce(root))
        return records

    def document(self) -> Document:
        return assemble(self.records(), self.registry, self.config)
