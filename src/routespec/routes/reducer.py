"""Path/parameter reducer: flattens route trees into per-operation records."""

import re

from pydantic import BaseModel

from routespec.document.model import Parameter, Response
from routespec.routes.tree import (
    Endpoint,
    HeaderParam,
    PathParam,
    QueryParam,
    RouteNode,
    and_optional,
    merge_tags,
    template_names,
)
from routespec.schema.node import SchemaNode

OPTIONAL_PLACEHOLDER = re.compile(r"\{([^}?]+)\?}")
PARAM_ORDER = {"path": 0, "query": 1, "header": 2}


class OperationRecord(BaseModel):
    """One (path, method) operation with everything inherited from its ancestors."""

    path: str
    method: str
    body: SchemaNode | None = None
    parameters: list[Parameter] = []
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    tags: set[str] | None = None
    deprecated: bool | None = None
    responses: dict[str, Response] | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.path, self.method

    def fold(self, other: "OperationRecord") -> "OperationRecord":
        """Merge a later record for the same operation into this one."""
        responses = None
        if self.responses is not None or other.responses is not None:
            responses = {**(other.responses or {}), **(self.responses or {})}
        return self.model_copy(
            update={
                "body": _first(self.body, other.body),
                "parameters": merge_parameters(self.parameters, other.parameters),
                "summary": _first(self.summary, other.summary),
                "description": _first(self.description, other.description),
                "operation_id": _first(self.operation_id, other.operation_id),
                "tags": merge_tags(self.tags, other.tags),
                "deprecated": _first(self.deprecated, other.deprecated),
                "responses": responses,
            }
        )


def join_paths(*segments: str | None) -> str:
    """Join path segments with single slashes; empty segments collapse."""
    parts = [s.strip("/") for s in segments if s]
    joined = "/".join(p for p in parts if p)
    return "/" + re.sub(r"/{2,}", "/", joined)


def reduce(root: RouteNode) -> list[OperationRecord]:
    """Flatten a route tree into operation records, in declaration order."""
    records: list[OperationRecord] = []
    _flatten(root, None, None, None, records)
    return records


def _flatten(
    node: RouteNode,
    prefix: str | None,
    tags: set[str] | None,
    deprecated: bool | None,
    out: list[OperationRecord],
) -> None:
    path = join_paths(prefix, node.path)
    tags = merge_tags(tags, node.tags)
    deprecated = and_optional(deprecated, node.deprecated)
    if isinstance(node, Endpoint):
        out.append(_record(node, path, tags, deprecated))
        return
    for child in node.children:
        _flatten(child, path, tags, deprecated, out)


def _record(endpoint: Endpoint, path: str, tags: set[str] | None, deprecated: bool | None) -> OperationRecord:
    return OperationRecord(
        path=OPTIONAL_PLACEHOLDER.sub(r"{\1}", path),
        method=endpoint.method.lower(),
        body=endpoint.body,
        parameters=operation_parameters(endpoint, path),
        summary=endpoint.summary,
        description=endpoint.description,
        operation_id=endpoint.operation_id,
        tags=tags,
        deprecated=deprecated,
        responses=endpoint.responses,
    )


def operation_parameters(endpoint: Endpoint, path: str) -> list[Parameter]:
    """Parameters of an endpoint at `path`: path, then query, then header.

    Every `{name}` placeholder yields a path parameter, taken from the
    declared PathParam of that name or defaulted to a required string.
    `{name?}` placeholders are optional. Declared path parameters with no
    placeholder in the path are dropped.
    """
    declared = {p.name: p for p in endpoint.parameters if isinstance(p, PathParam)}
    parameters = []
    for placeholder in template_names(path):
        name = placeholder.rstrip("?")
        param = declared.get(name)
        parameters.append(
            Parameter(
                name=name,
                in_="path",
                required=not placeholder.endswith("?"),
                description=param.description if param is not None else None,
            )
        )

    for param in endpoint.parameters:
        if isinstance(param, (QueryParam, HeaderParam)):
            parameters.append(
                Parameter(name=param.name, in_=param.kind, required=param.required, description=param.description)
            )
    return merge_parameters(parameters, [])


def merge_parameters(first: list[Parameter], second: list[Parameter]) -> list[Parameter]:
    """Union keyed by (location, name), first occurrence wins, ordered path/query/header."""
    seen = set()
    merged = []
    for param in [*first, *second]:
        key = (param.in_, param.name)
        if key not in seen:
            seen.add(key)
            merged.append(param)
    return sorted(merged, key=lambda p: PARAM_ORDER.get(p.in_, len(PARAM_ORDER)))


def merge_operations(records: list[OperationRecord]) -> list[OperationRecord]:
    """Fold records sharing (path, method) left to right, keeping first-seen order."""
    merged: dict[tuple[str, str], OperationRecord] = {}
    for record in records:
        existing = merged.get(record.key)
        merged[record.key] = record if existing is None else existing.fold(record)
    return list(merged.values())


def _first(a, b):
    return a if a is not None else b
