"""Schema nodes and the per-pass schema registry."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

REF_PREFIX = "#/components/schemas/"


class SchemaKind(str, Enum):
    PRIMITIVE = "primitive"
    OBJECT = "object"
    ARRAY = "array"
    MAP = "map"
    ENUM = "enum"
    ONE_OF = "oneOf"


class Discriminator(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    property_name: str = Field(alias="propertyName")
    mapping: dict[str, str] = {}


class SchemaNode(BaseModel):
    """A schema, either inline or a `$ref` into the registry.

    Registry identity is the canonical name alone; it is never serialized.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    format: str | None = None
    description: str | None = None
    properties: dict[str, "SchemaNode"] | None = None
    items: "SchemaNode | None" = None
    additional_properties: "SchemaNode | None" = Field(None, alias="additionalProperties")
    enum: list[str] | None = None
    required: list[str] | None = None
    discriminator: Discriminator | None = None
    one_of: list["SchemaNode"] | None = Field(None, alias="oneOf")
    ref: str | None = Field(None, alias="$ref")
    canonical_name: str | None = Field(None, exclude=True)

    @property
    def kind(self) -> SchemaKind | None:
        if self.ref is not None:
            return None
        if self.enum is not None:
            return SchemaKind.ENUM
        if self.one_of is not None and self.type is None:
            return SchemaKind.ONE_OF
        if self.type == "array":
            return SchemaKind.ARRAY
        if self.additional_properties is not None:
            return SchemaKind.MAP
        if self.type == "object":
            return SchemaKind.OBJECT
        return SchemaKind.PRIMITIVE

    @property
    def is_primitive(self) -> bool:
        return self.ref is None and self.enum is None and self.type in ("string", "number", "integer", "boolean")

    @property
    def ref_name(self) -> str | None:
        if self.ref is None or not self.ref.startswith(REF_PREFIX):
            return None
        return self.ref[len(REF_PREFIX):]

    def add_property(self, name: str, node: "SchemaNode") -> None:
        if self.properties is None:
            self.properties = {}
        self.properties[name] = node

    def mark_required(self, name: str) -> None:
        if self.required is None:
            self.required = []
        if name not in self.required:
            self.required.append(name)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def ref_to(canonical_name: str) -> str:
    return f"{REF_PREFIX}{canonical_name}"


class SchemaRegistry:
    """Canonical name -> SchemaNode, written once per name.

    Owned by a single documentation pass. Names marked reserved (the absent
    type sentinel) are kept for cycle-breaking but left out of definitions().
    """

    def __init__(self):
        self._entries: dict[str, SchemaNode] = {}
        self._reserved: set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> SchemaNode | None:
        return self._entries.get(name)

    def register(self, name: str, node: SchemaNode) -> bool:
        """Insert `node` unless `name` is already taken; first one wins."""
        if name in self._entries:
            return False
        self._entries[name] = node
        return True

    def reserve(self, name: str) -> None:
        self._reserved.add(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def definitions(self) -> dict[str, SchemaNode]:
        return {name: node for name, node in self._entries.items() if name not in self._reserved}
