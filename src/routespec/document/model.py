"""OpenAPI document model.

The assembled Document is the only value handed to the writer. Field names
are snake_case; dumping with `by_alias=True` yields the OpenAPI keys.
"""

from pydantic import BaseModel, ConfigDict, Field

from routespec.config import Info, SecurityScheme
from routespec.schema.node import REF_PREFIX, SchemaNode

OPENAPI_VERSION = "3.1.0"

JSON = "application/json"
TEXT = "text/plain"


class Server(BaseModel):
    url: str


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: SchemaNode = Field(alias="schema")


class Parameter(BaseModel):
    """An operation parameter (path, query or header)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    in_: str = Field(alias="in")  # path / query / header
    required: bool = True
    description: str | None = None
    schema_: SchemaNode = Field(default_factory=lambda: SchemaNode(type="string"), alias="schema")


class RequestBody(BaseModel):
    required: bool = True
    content: dict[str, MediaType]


class Response(BaseModel):
    description: str = ""
    content: dict[str, MediaType] | None = None


class Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(None, alias="operationId")
    tags: list[str] | None = None
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(None, alias="requestBody")
    responses: dict[str, Response] | None = None
    deprecated: bool | None = None
    security: list[dict[str, list[str]]] | None = None


class Components(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schemas: dict[str, SchemaNode] = {}
    security_schemes: dict[str, SecurityScheme] | None = Field(None, alias="securitySchemes")


class Document(BaseModel):
    openapi: str = OPENAPI_VERSION
    info: Info | None = None
    servers: list[Server] | None = None
    paths: dict[str, dict[str, Operation]] = {}
    components: Components = Field(default_factory=Components)
    security: list[dict[str, list[str]]] | None = None

    def operation(self, path: str, method: str) -> Operation | None:
        return self.paths.get(path, {}).get(method)

    def refs(self) -> set[str]:
        """Every `$ref` target name used by paths or component schemas."""
        found: set[str] = set()
        for methods in self.paths.values():
            for op in methods.values():
                _collect_refs(op.model_dump(by_alias=True, exclude_none=True), found)
        for schema in self.components.schemas.values():
            _collect_refs(schema.to_dict(), found)
        return found


class PartialDocument(BaseModel):
    """A contributor module's share of an aggregated document."""

    model_config = ConfigDict(populate_by_name=True)

    module_id: str = Field(alias="moduleId")
    openapi: str = OPENAPI_VERSION
    paths: dict[str, dict[str, Operation]] = {}
    schemas: dict[str, SchemaNode] = {}
    security_schemes: dict[str, SecurityScheme] = Field({}, alias="securitySchemes")


def _collect_refs(value, found: set[str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str):
                found.add(item.removeprefix(REF_PREFIX))
            else:
                _collect_refs(item, found)
    elif isinstance(value, list):
        for item in value:
            _collect_refs(item, found)
