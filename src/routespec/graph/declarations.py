"""Declaration graph handed over by the front-end.

A graph is a set of function declarations whose bodies are ordered lists of
call nodes. A call node may carry a lambda body (more call nodes) and
argument expressions that are themselves calls.
"""

from pydantic import BaseModel, ConfigDict, Field

from routespec.graph.types import TypeRef


class Description(BaseModel):
    """Endpoint documentation annotation."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(None, alias="operationId")
    tags: list[str] = []


class ResponseEntry(BaseModel):
    """One entry of an explicit response mapping annotation."""

    status: str
    type: TypeRef | None = None
    is_collection: bool = False
    description: str = ""


class CallNode(BaseModel):
    """A resolved call expression."""

    model_config = ConfigDict(populate_by_name=True)

    callee: str  # resolved identity, e.g. server.routing.get
    path: str | None = None
    type_args: list[TypeRef] = []
    args: dict[str, str] = {}  # resolved literal arguments: status, description, name
    tags: list[str] = []
    deprecated: bool | None = None
    description: Description | None = None
    responds: list[ResponseEntry] = []
    comment: str | None = None  # line comment directly above the call
    arguments: list["CallNode"] = []
    body: list["CallNode"] | None = Field(None, alias="lambda")
    declaration: str | None = None  # helper function the callee resolves to

    @property
    def name(self) -> str:
        return self.callee.rsplit(".", 1)[-1]

    def all_tags(self) -> set[str]:
        tags = set(self.tags)
        if self.description is not None:
            tags.update(self.description.tags)
        return tags


class FunctionDecl(BaseModel):
    """A function whose body declares routes."""

    name: str
    tags: list[str] = []
    deprecated: bool | None = None
    generate_openapi: bool = False  # documentation entry point
    body: list[CallNode] = []


class DeclarationGraph(BaseModel):
    functions: list[FunctionDecl] = []

    def function(self, name: str | None) -> FunctionDecl | None:
        if name is None:
            return None
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None

    def entry_points(self) -> list[FunctionDecl]:
        """Functions marked for documentation, or all of them if none is."""
        marked = [fn for fn in self.functions if fn.generate_openapi]
        return marked or list(self.functions)
