"""Route-tree builder.

Walks the declaration graph depth-first, turning route calls into Groups and
HTTP-method calls into Endpoints. Calls it does not recognize are inert, but
their lambdas are still walked and a helper function they resolve to is
expanded in place, so routes declared through helpers land where the helper
was called.
"""

import logging

from routespec.config import DocsConfig
from routespec.document.model import JSON, MediaType, Response
from routespec.graph.declarations import CallNode, DeclarationGraph, Description, FunctionDecl, ResponseEntry
from routespec.graph.types import Member, TypeDecl, TypeKind, TypeRef
from routespec.routes.status import resolve_status
from routespec.routes.tree import (
    Endpoint,
    Group,
    HeaderParam,
    Param,
    PathParam,
    QueryParam,
    RouteNode,
    and_optional,
    merge_params,
    merge_tags,
    template_names,
)
from routespec.schema.engine import SchemaSynthesizer
from routespec.schema.node import SchemaNode

logger = logging.getLogger(__name__)

ROUTE_CALLS = {"route"}
METHOD_CALLS = {"get", "post", "put", "patch", "delete"}
RECEIVE_CALLS = {"receive", "receiveNullable"}
RESPONDS_CALLS = {"responds"}
RESPONDS_NOTHING_CALLS = {"respondsNothing"}
QUERY_ACCESSORS = {"queryParameters", "rawQueryParameters"}
HEADER_ACCESSORS = {"headers", "header"}


class RouteTreeBuilder:
    """Builds RouteNode trees for the entry points of one documentation pass."""

    def __init__(self, config: DocsConfig, graph: DeclarationGraph, synthesizer: SchemaSynthesizer):
        self.config = config
        self.graph = graph
        self.synthesizer = synthesizer
        self.warnings: list[str] = []
        self._expanding: list[str] = []

    def build(self, entry: FunctionDecl | CallNode) -> list[Group]:
        """Route roots declared by a function or by a single call node."""
        if isinstance(entry, FunctionDecl):
            nodes = self._visit_function(entry, None)
        else:
            nodes = self._visit_call(entry, None)
        return [node if isinstance(node, Group) else Group(path="/", children=[node]) for node in nodes]

    def _visit_function(self, fn: FunctionDecl, parent: RouteNode | None) -> list[RouteNode]:
        if fn.name in self._expanding:
            self._warn(f"Recursive route helper {fn.name} is not expanded again")
            return []

        self._expanding.append(fn.name)
        try:
            node = parent
            if node is None:
                node = Group(path="/", tags=set(fn.tags) or None, deprecated=fn.deprecated)
            if isinstance(node, Endpoint):
                self._collect_details(node, fn.body)
            for call in fn.body:
                self._visit_call(call, node)
        finally:
            self._expanding.pop()
        return [node]

    def _visit_call(self, call: CallNode, parent: RouteNode | None) -> list[RouteNode]:
        tags = set(call.tags) or None
        element, scope = self._route_element(call, parent, tags, call.deprecated)
        if scope is None:
            scope = parent

        if call.body is not None:
            if isinstance(scope, Endpoint) and scope is not parent:
                self._collect_details(scope, call.body)
            for inner in call.body:
                self._visit_call(inner, scope)
        else:
            helper = self.graph.function(call.declaration)
            if helper is not None:
                if isinstance(scope, Group):
                    for node in self._visit_function(helper, None):
                        node.tags = merge_tags(merge_tags(node.tags, tags), set(helper.tags) or None)
                        node.deprecated = and_optional(
                            and_optional(node.deprecated, helper.deprecated), call.deprecated
                        )
                        scope.children.append(node)
                elif scope is None:
                    return self._visit_function(helper, None)
                else:
                    self._visit_function(helper, scope)

        result = element if element is not None else parent
        return [result] if result is not None else []

    def _route_element(
        self, call: CallNode, parent: RouteNode | None, tags: set[str] | None, deprecated: bool | None
    ) -> tuple[RouteNode | None, RouteNode | None]:
        """The node a call contributes and the node its lambda body belongs to."""
        name = call.name
        if name in ROUTE_CALLS:
            path = call.path or "/"
            if parent is None:
                group = Group(path=path, tags=tags, deprecated=deprecated)
                return group, group
            if isinstance(parent, Group):
                group = Group(
                    path=path,
                    tags=merge_tags(parent.tags, tags),
                    deprecated=and_optional(parent.deprecated, deprecated),
                )
                parent.children.append(group)
                return group, group
            self._warn(f"Route {path} declared under endpoint {parent.method.upper()} {parent.path or ''}; ignored")
            return None, None

        if name in METHOD_CALLS:
            return self._method(call, parent, deprecated)
        return None, None

    def _method(
        self, call: CallNode, parent: RouteNode | None, deprecated: bool | None
    ) -> tuple[RouteNode | None, RouteNode | None]:
        if isinstance(parent, Endpoint):
            self._warn(f"Endpoint {call.name.upper()} {call.path or ''} declared under another endpoint; ignored")
            return None, None

        doc = call.description or Description()
        endpoint = Endpoint(
            method=call.name,
            summary=doc.summary,
            description=doc.description,
            operation_id=doc.operation_id,
            tags=call.all_tags() or None,
            deprecated=deprecated,
        )
        endpoint.add_responses(self._annotated_responses(call.responds))

        element = self._resource(call, endpoint)
        if element is None:
            endpoint.path = call.path
            endpoint.body = self._body(call.type_args[0] if call.type_args else None)
            element = endpoint
        scope = element if isinstance(element, Endpoint) else element.first_endpoint()

        if parent is None:
            if isinstance(element, Endpoint):
                element = Group(path="/", children=[element], deprecated=deprecated)
            return element, scope
        parent.children.append(element)
        return scope, scope

    def _body(self, type_ref: TypeRef | None) -> SchemaNode | None:
        if type_ref is None:
            return None
        if not self.synthesizer.is_primitive(type_ref) and not self.config.generate_request_schemas:
            return None
        return self.synthesizer.synthesize(type_ref)

    def _collect_details(self, endpoint: Endpoint, statements: list[CallNode]) -> None:
        """Body, responses and accessor parameters declared in an endpoint's lambda."""
        params: list[Param] = []
        for call in _iter_calls(statements):
            name = call.name
            if name in QUERY_ACCESSORS and call.args.get("name"):
                params.append(QueryParam(name=call.args["name"]))
            elif name in HEADER_ACCESSORS and call.args.get("name"):
                params.append(HeaderParam(name=call.args["name"]))
            elif name in RECEIVE_CALLS and endpoint.body is None:
                endpoint.body = self._body(call.type_args[0] if call.type_args else None)
            elif name in RESPONDS_CALLS or name in RESPONDS_NOTHING_CALLS:
                code, response = self._response(
                    status=call.args.get("status"),
                    type_ref=call.type_args[0] if call.type_args else None,
                    description=call.args.get("description") or call.comment or "",
                    nothing=name in RESPONDS_NOTHING_CALLS,
                )
                endpoint.add_responses({code: response})
        if params:
            endpoint.add_parameters(params)

    def _annotated_responses(self, entries: list[ResponseEntry]) -> dict[str, Response]:
        responses = {}
        for entry in entries:
            code, response = self._response(
                status=entry.status,
                type_ref=entry.type,
                description=entry.description,
                is_collection=entry.is_collection,
            )
            responses[code] = response
        return responses

    def _response(
        self,
        status: str | None,
        type_ref: TypeRef | None,
        description: str,
        is_collection: bool = False,
        nothing: bool = False,
    ) -> tuple[str, Response]:
        code, recognized = resolve_status(status)
        if not recognized and status is not None:
            self._warn(f"Unrecognized status {status!r}, used as-is")

        if nothing or type_ref is None or self._is_nothing(type_ref):
            return code, Response(description=description)

        schema = self.synthesizer.synthesize(type_ref) or SchemaNode(type="object")
        if is_collection:
            schema = SchemaNode(type="array", items=schema)
        return code, Response(description=description, content={JSON: MediaType(schema_=schema)})

    def _is_nothing(self, type_ref: TypeRef) -> bool:
        decl = self.synthesizer.types.resolve(type_ref.name)
        return decl is not None and decl.kind == TypeKind.NOTHING

    def _resource(self, call: CallNode, endpoint: Endpoint) -> RouteNode | None:
        if not call.type_args:
            return None
        decl = self.synthesizer.types.resolve(call.type_args[0].name)
        if decl is None or not decl.is_resource:
            return None
        if len(call.type_args) > 1:
            endpoint.body = self._body(call.type_args[1])
        return self._resource_route(decl, endpoint, None, set())

    def _resource_route(
        self, decl: TypeDecl, endpoint: Endpoint, below: Group | None, visiting: set[str]
    ) -> RouteNode:
        """Route for a resource type, built from its outermost parent resource inward."""
        path = decl.resource_path
        parents: list[TypeDecl] = []
        members: list[Member] = []
        for member in decl.members:
            if not self.synthesizer.is_eligible(member):
                continue
            member_decl = self.synthesizer.types.resolve(member.type.name)
            if member_decl is not None and member_decl.is_resource:
                parents.append(member_decl)
            else:
                members.append(member)

        own = [_resource_param(member, path) for member in members]
        if below is None:
            endpoint.parameters = merge_params(own, [])
        else:
            # ancestors contribute their path parameters only
            endpoint.parameters = merge_params([p for p in own if isinstance(p, PathParam)], endpoint.parameters)

        parent = None
        if parents:
            if parents[0].name in visiting:
                self._warn(f"Resource {decl.name} has a cyclic parent {parents[0].name}; parent ignored")
            else:
                parent = self._resource_route(parents[0], endpoint, below or Group(path="/"), visiting | {decl.name})

        leaf = endpoint.model_copy(update={"path": path})
        if parent is None:
            return leaf
        if isinstance(parent, Endpoint):
            return Group(path=parent.path, children=[leaf])
        return _splice_leaf(parent, leaf)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _iter_calls(statements: list[CallNode]):
    for call in statements:
        yield call
        yield from _iter_calls(call.arguments)
        if call.body:
            yield from _iter_calls(call.body)


def _resource_param(member: Member, resource_path: str | None) -> Param:
    annotation = member.schema_
    description = annotation.text if annotation is not None else None
    names = [name.rstrip("?") for name in template_names(resource_path)]
    if member.name in names:
        return PathParam(name=member.name, description=description)
    if annotation is not None and annotation.required is not None:
        required = annotation.required
    else:
        required = annotation is not None and not member.type.nullable
    return QueryParam(name=member.name, description=description, required=required)


def _splice_leaf(group: Group, leaf: Endpoint) -> RouteNode:
    """Hang `leaf` under the first leaf endpoint of `group`, turning that endpoint into a sub-group."""
    if not group.children:
        return leaf
    current: RouteNode = group
    while isinstance(current, Group) and current.children:
        first = current.children[0]
        if isinstance(first, Endpoint):
            current.children = [Group(path=first.path, children=[leaf]), *current.children[1:]]
        current = first
    return group
