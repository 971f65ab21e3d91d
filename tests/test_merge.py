import logging

from routespec.config import Info, SecurityScheme
from routespec.document.merge import from_partial, merge, to_partial
from routespec.document.model import Components, Document, Operation, PartialDocument, Server
from routespec.schema.node import SchemaNode


def _partial(module_id: str, summary: str = "A", schemas: dict | None = None, **kwargs) -> PartialDocument:
    return PartialDocument(
        module_id=module_id,
        paths={"/x": {"get": Operation(summary=summary)}},
        schemas=schemas or {},
        **kwargs,
    )


class TestMerge:
    def test_local_document_wins(self):
        local = Document(paths={"/x": {"get": Operation(summary="B")}})
        merged = merge([_partial("billing")], local)
        assert merged.operation("/x", "get").summary == "B"

    def test_later_partial_wins_with_warning(self, caplog):
        conflicts = []
        with caplog.at_level(logging.WARNING):
            merged = merge([_partial("a", "first"), _partial("b", "second")], conflicts=conflicts)
        assert merged.operation("/x", "get").summary == "second"
        assert conflicts == ["GET /x redefined by module b; last definition wins"]
        assert "redefined by module b" in caplog.text

    def test_methods_on_same_path_combine(self):
        other = PartialDocument(module_id="b", paths={"/x": {"post": Operation(summary="P")}})
        merged = merge([_partial("a"), other])
        assert list(merged.paths["/x"]) == ["get", "post"]

    def test_schema_conflicts(self):
        conflicts = []
        merged = merge(
            [
                _partial("a", schemas={"Item": SchemaNode(type="object", description="a")}),
                _partial("b", schemas={"Item": SchemaNode(type="object", description="b")}),
            ],
            conflicts=conflicts,
        )
        assert merged.components.schemas["Item"].description == "b"
        assert "schema Item redefined by module b; last definition wins" in conflicts

    def test_identical_shared_schema_is_not_a_conflict(self, caplog):
        shared = {"Money": SchemaNode(type="integer")}
        conflicts = []
        with caplog.at_level(logging.DEBUG, logger="routespec.document.merge"):
            merge([PartialDocument(module_id="a", schemas=shared), PartialDocument(module_id="b", schemas=shared)], conflicts=conflicts)
        assert conflicts == []
        assert "Schema Money redefined identically by module b" in caplog.text

    def test_security_schemes_merge(self):
        scheme = SecurityScheme(type="http", scheme="bearer")
        merged = merge([PartialDocument(module_id="a", security_schemes={"jwt": scheme})])
        assert merged.components.security_schemes == {"jwt": scheme}

    def test_info_servers_and_security_come_from_local(self):
        local = Document(
            info=Info(title="Local", version="1"),
            servers=[Server(url="https://local.test")],
            security=[{"jwt": []}],
            components=Components(schemas={"Local": SchemaNode(type="object")}),
        )
        merged = merge([_partial("a", schemas={"Remote": SchemaNode(type="object")})], local)
        assert merged.info.title == "Local"
        assert merged.servers[0].url == "https://local.test"
        assert merged.security == [{"jwt": []}]
        assert set(merged.components.schemas) == {"Remote", "Local"}

    def test_without_local(self):
        merged = merge([_partial("a")])
        assert merged.info is None
        assert merged.servers is None


class TestPartialConversion:
    def test_to_partial(self):
        doc = Document(
            paths={"/x": {"get": Operation(summary="A")}},
            components=Components(schemas={"Item": SchemaNode(type="object")}),
        )
        partial = to_partial(doc, "billing")
        assert partial.module_id == "billing"
        assert partial.paths == doc.paths
        assert list(partial.schemas) == ["Item"]
        assert partial.security_schemes == {}

    def test_from_partial(self):
        doc = from_partial(_partial("a", schemas={"Item": SchemaNode(type="object")}))
        assert doc.operation("/x", "get").summary == "A"
        assert list(doc.components.schemas) == ["Item"]
