from pathlib import Path

import pytest

from routespec.errors import ResolutionError, SourceError
from routespec.graph.declarations import CallNode, DeclarationGraph, FunctionDecl
from routespec.graph.loader import load_source, parse_source
from routespec.graph.types import TypeDecl, TypeKind, TypeModel, TypeRef
from routespec.routes.tree import (
    Endpoint,
    Group,
    HeaderParam,
    PathParam,
    QueryParam,
    and_optional,
    merge_params,
    merge_tags,
    template_names,
)
from routespec.schema.node import SchemaKind, SchemaNode, SchemaRegistry, ref_to

FIXTURES = Path(__file__).parent / "fixtures"


class TestTypeModel:
    def test_declared_type_resolves(self):
        model = TypeModel([TypeDecl(name="shop.Order")])
        assert model.resolve("shop.Order").kind == TypeKind.RECORD
        assert "shop.Order" in model
        assert len(model) == 1

    def test_builtin_falls_back_by_short_name(self):
        model = TypeModel()
        assert model.resolve("kotlin.String").kind == TypeKind.PRIMITIVE
        assert model.resolve("kotlin.collections.List").kind == TypeKind.COLLECTION
        assert model.resolve("kotlin.collections.Map").kind == TypeKind.MAP
        assert model.resolve("kotlin.Nothing").kind == TypeKind.NOTHING

    def test_unknown_type_is_none(self):
        assert TypeModel().resolve("shop.Missing") is None

    def test_require_raises_resolution_error(self):
        with pytest.raises(ResolutionError, match="shop.Missing"):
            TypeModel().require("shop.Missing")

    def test_is_primitive(self):
        model = TypeModel()
        assert model.is_primitive(TypeRef(name="kotlin.Int")) is True
        assert model.is_primitive(TypeRef(name="kotlin.collections.List")) is False
        assert model.is_primitive(TypeRef(name="T", is_type_param=True)) is False
        assert model.is_primitive(None) is False

    def test_render_generic_ref(self):
        ref = TypeRef(
            name="shop.Pair",
            args=[TypeRef(name="kotlin.String"), TypeRef(name="shop.Box", args=[TypeRef(name="kotlin.Int")])],
        )
        assert ref.render() == "shop.Pair<kotlin.String, shop.Box<kotlin.Int>>"
        assert ref.short_name == "Pair"


class TestDeclarations:
    def test_call_name_is_last_segment(self):
        assert CallNode(callee="server.routing.get").name == "get"

    def test_lambda_alias(self):
        call = CallNode.model_validate({"callee": "route", "lambda": [{"callee": "get"}]})
        assert call.body[0].name == "get"

    def test_all_tags_include_description_tags(self):
        call = CallNode.model_validate(
            {"callee": "get", "tags": ["a"], "description": {"summary": "s", "tags": ["b"]}}
        )
        assert call.all_tags() == {"a", "b"}

    def test_entry_points_prefer_marked_functions(self):
        graph = DeclarationGraph(
            functions=[FunctionDecl(name="helper"), FunctionDecl(name="module", generate_openapi=True)]
        )
        assert [fn.name for fn in graph.entry_points()] == ["module"]

    def test_entry_points_default_to_all(self):
        graph = DeclarationGraph(functions=[FunctionDecl(name="a"), FunctionDecl(name="b")])
        assert [fn.name for fn in graph.entry_points()] == ["a", "b"]
        assert graph.function("b").name == "b"
        assert graph.function(None) is None


class TestLoader:
    def test_load_fixture(self):
        graph, types = load_source(FIXTURES / "shop.yaml")
        assert graph.function("shop.module").generate_openapi is True
        assert types.resolve("shop.Shape").kind == TypeKind.SEALED
        assert types.resolve("shop.ItemResource").is_resource

    def test_member_schema_alias(self):
        _, types = load_source(FIXTURES / "shop.yaml")
        expand = types.resolve("shop.ItemResource").members[2]
        assert expand.schema_.description == "Include stock levels"

    def test_non_mapping_is_rejected(self, tmp_path):
        f = tmp_path / "dump.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(SourceError):
            load_source(f)

    def test_invalid_dump_is_rejected(self):
        with pytest.raises(SourceError, match="invalid declaration dump"):
            parse_source({"types": [{"kind": "record"}]})


class TestParams:
    def test_merge_params_keys_on_kind_and_name(self):
        merged = merge_params(
            [PathParam(name="id", description="first")],
            [PathParam(name="id", description="second"), QueryParam(name="id"), HeaderParam(name="id")],
        )
        assert [(p.kind, p.name) for p in merged] == [("path", "id"), ("query", "id"), ("header", "id")]
        assert merged[0].description == "first"

    def test_template_names(self):
        assert template_names("/users/{id}/posts/{post?}") == ["id", "post?"]
        assert template_names(None) == []


class TestInheritance:
    def test_merge_tags(self):
        assert merge_tags(None, None) is None
        assert merge_tags(None, {"a"}) == {"a"}
        assert merge_tags({"a"}, {"b"}) == {"a", "b"}
        assert merge_tags({"a"}, None) == {"a"}

    def test_and_optional_defers_to_present_value(self):
        assert and_optional(None, None) is None
        assert and_optional(True, None) is True
        assert and_optional(None, False) is False
        assert and_optional(True, False) is False
        assert and_optional(True, True) is True


class TestRouteTree:
    def test_first_endpoint_is_depth_first(self):
        inner = Endpoint(method="get", path="/b")
        tree = Group(children=[Group(path="/a", children=[inner]), Endpoint(method="post")])
        assert tree.first_endpoint() is inner

    def test_empty_responses_and_duplicate_params(self):
        ep = Endpoint(method="get")
        ep.add_responses({})
        assert ep.responses is None
        ep.add_parameters([QueryParam(name="q")])
        ep.add_parameters([QueryParam(name="q", required=True)])
        assert len(ep.parameters) == 1


class TestSchemaNode:
    def test_ref_dump_uses_dollar_key(self):
        node = SchemaNode(ref=ref_to("shop.Order"))
        assert node.to_dict() == {"$ref": "#/components/schemas/shop.Order"}
        assert node.ref_name == "shop.Order"

    def test_canonical_name_is_not_serialized(self):
        node = SchemaNode(type="object", canonical_name="shop.Order")
        assert node.to_dict() == {"type": "object"}

    def test_kinds(self):
        assert SchemaNode(type="string").kind == SchemaKind.PRIMITIVE
        assert SchemaNode(type="string", enum=["A"]).kind == SchemaKind.ENUM
        assert SchemaNode(type="array", items=SchemaNode(type="string")).kind == SchemaKind.ARRAY
        assert SchemaNode(type="object", additional_properties=SchemaNode(type="string")).kind == SchemaKind.MAP
        assert SchemaNode(type="object").kind == SchemaKind.OBJECT
        assert SchemaNode(ref=ref_to("X")).kind is None

    def test_mark_required_is_unique(self):
        node = SchemaNode(type="object")
        node.mark_required("a")
        node.mark_required("a")
        assert node.required == ["a"]


class TestSchemaRegistry:
    def test_first_registration_wins(self):
        registry = SchemaRegistry()
        assert registry.register("A", SchemaNode(type="object", description="first")) is True
        assert registry.register("A", SchemaNode(type="object", description="second")) is False
        assert registry.get("A").description == "first"
        assert len(registry) == 1

    def test_reserved_names_are_not_definitions(self):
        registry = SchemaRegistry()
        registry.reserve("kotlin.Nothing")
        registry.register("kotlin.Nothing", SchemaNode(type="object"))
        registry.register("A", SchemaNode(type="object"))
        assert "kotlin.Nothing" in registry
        assert list(registry.definitions()) == ["A"]
        assert registry.names() == ["kotlin.Nothing", "A"]
