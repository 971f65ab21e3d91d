"""Document assembler: operation records + schema registry + config -> Document."""

import logging

from routespec.config import DocsConfig
from routespec.document.model import JSON, TEXT, Components, Document, MediaType, Operation, RequestBody, Server
from routespec.routes.reducer import OperationRecord, merge_operations
from routespec.schema.node import SchemaNode, SchemaRegistry

logger = logging.getLogger(__name__)


def assemble(records: list[OperationRecord], registry: SchemaRegistry, config: DocsConfig) -> Document:
    paths: dict[str, dict] = {}
    for record in merge_operations(records):
        paths.setdefault(record.path, {})[record.method] = to_operation(record)

    schemas = registry.definitions()
    logger.debug("Assembled %d paths and %d schemas", len(paths), len(schemas))
    return Document(
        info=config.info,
        servers=[Server(url=url) for url in config.servers] or None,
        paths=paths,
        components=Components(schemas=schemas, security_schemes=config.security_schemes or None),
        security=config.security or None,
    )


def to_operation(record: OperationRecord) -> Operation:
    return Operation(
        summary=record.summary,
        description=record.description,
        operation_id=record.operation_id,
        tags=sorted(record.tags) if record.tags else None,
        parameters=record.parameters or None,
        request_body=request_body(record.method, record.body),
        responses=record.responses,
        deprecated=record.deprecated,
    )


def request_body(method: str, body: SchemaNode | None) -> RequestBody | None:
    """JSON body for schemas, plain text for bare primitives, never on GET."""
    if body is None or method.lower() == "get":
        return None
    if body.is_primitive:
        schema = SchemaNode(type=body.type, format=body.format, description=body.description)
        return RequestBody(content={TEXT: MediaType(schema_=schema)})
    return RequestBody(content={JSON: MediaType(schema_=body)})
