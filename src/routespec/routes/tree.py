"""Route tree produced by the builder: groups of routes and their endpoints."""

import re
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from routespec.document.model import Response
from routespec.schema.node import SchemaNode


class PathParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    name: str
    description: str | None = None


class QueryParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["query"] = "query"
    name: str
    description: str | None = None
    required: bool = False


class HeaderParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["header"] = "header"
    name: str
    description: str | None = None
    required: bool = False


Param = Union[PathParam, QueryParam, HeaderParam]


def merge_params(first: list[Param], second: list[Param]) -> list[Param]:
    """Union keyed by (kind, name); the first occurrence wins."""
    seen = set()
    merged = []
    for param in [*first, *second]:
        key = (param.kind, param.name)
        if key not in seen:
            seen.add(key)
            merged.append(param)
    return merged


def merge_tags(first: set[str] | None, second: set[str] | None) -> set[str] | None:
    if first is None:
        return set(second) if second is not None else None
    return first | (second or set())


def and_optional(first: bool | None, second: bool | None) -> bool | None:
    """AND two optional flags; an absent flag defers to the other."""
    if first is not None and second is not None:
        return first and second
    return first if first is not None else second


class Endpoint(BaseModel):
    path: str | None = None
    method: str
    body: SchemaNode | None = None
    parameters: list[Param] = []
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    tags: set[str] | None = None
    deprecated: bool | None = None
    responses: dict[str, Response] | None = None

    def add_parameters(self, params: list[Param]) -> None:
        self.parameters = merge_params(self.parameters, params)

    def add_responses(self, responses: dict[str, Response]) -> None:
        if not responses:
            return
        self.responses = {**(self.responses or {}), **responses}


class Group(BaseModel):
    path: str | None = "/"
    children: list[Union["Group", Endpoint]] = []
    tags: set[str] | None = None
    deprecated: bool | None = None

    def first_endpoint(self) -> Endpoint | None:
        for child in self.children:
            if isinstance(child, Endpoint):
                return child
            found = child.first_endpoint()
            if found is not None:
                return found
        return None


RouteNode = Union[Group, Endpoint]


TEMPLATE_PARAM = re.compile(r"\{([^}]*)}")


def template_names(path: str | None) -> list[str]:
    """Placeholder names in a path template, including any trailing `?`."""
    return TEMPLATE_PARAM.findall(path or "")
