"""Type model handed over by the front-end.

Every type reference names a declaration by its canonical (fully qualified)
name. Declarations carry the structural kind the synthesis engine dispatches
on; the front-end has already done all semantic resolution.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from routespec.errors import ResolutionError


class TypeKind(str, Enum):
    PRIMITIVE = "primitive"
    COLLECTION = "collection"
    MAP = "map"
    ENUM = "enum"
    SEALED = "sealed"
    VALUE = "value"  # single-field wrapper
    RECORD = "record"
    ANY = "any"
    NOTHING = "nothing"  # absent-type sentinel


class SchemaAnnotation(BaseModel):
    """Schema metadata attached to a type, a type use, or a field."""

    description: str | None = None
    summary: str | None = None
    type: str | None = None  # explicit serialized type, skips synthesis
    format: str | None = None
    required: bool | None = None
    serialized_as: "TypeRef | None" = None

    @property
    def text(self) -> str | None:
        return self.description or self.summary


class TypeRef(BaseModel):
    """A (possibly generic, possibly nullable) use of a type."""

    name: str
    args: list["TypeRef"] = []
    nullable: bool = False
    is_type_param: bool = False  # refers to an enclosing generic parameter
    annotation: SchemaAnnotation | None = None

    @property
    def short_name(self) -> str:
        return short_name(self.name)

    def render(self) -> str:
        """Render as `Name<Arg, Arg>` using canonical names."""
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(a.render() for a in self.args)}>"


SchemaAnnotation.model_rebuild()


class CtorParam(BaseModel):
    name: str
    has_default: bool = False
    json_name: str | None = None


class Member(BaseModel):
    """A property of a record, resource, or polymorphic base."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: TypeRef
    public: bool = True
    computed: bool = False  # getter-only, no backing value
    abstract: bool = False
    has_initializer: bool = False
    transient_on: list[str] = []  # property / field / getter / setter / delegate
    json_name: str | None = None
    schema_: SchemaAnnotation | None = Field(None, alias="schema")
    doc: str | None = None

    @property
    def is_transient(self) -> bool:
        return bool(self.transient_on)


class TypeDecl(BaseModel):
    """A declared type."""

    name: str
    kind: TypeKind = TypeKind.RECORD
    type_params: list[str] = []
    members: list[Member] = []
    ctor_params: list[CtorParam] = []
    enum_entries: list[str] = []
    subtypes: list[str] = []  # sealed, in declaration order
    discriminator: str | None = None  # on a sealed base
    serial_name: str | None = None  # discriminator value on a subtype
    annotation: SchemaAnnotation | None = None
    resource_path: str | None = None  # set on resource-annotated types
    doc: str | None = None

    @property
    def is_resource(self) -> bool:
        return self.resource_path is not None

    def ctor_param(self, name: str) -> CtorParam | None:
        for param in self.ctor_params:
            if param.name == name:
                return param
        return None


BUILTIN_KINDS = {
    "int": TypeKind.PRIMITIVE,
    "long": TypeKind.PRIMITIVE,
    "short": TypeKind.PRIMITIVE,
    "byte": TypeKind.PRIMITIVE,
    "double": TypeKind.PRIMITIVE,
    "float": TypeKind.PRIMITIVE,
    "boolean": TypeKind.PRIMITIVE,
    "char": TypeKind.PRIMITIVE,
    "string": TypeKind.PRIMITIVE,
    "list": TypeKind.COLLECTION,
    "mutablelist": TypeKind.COLLECTION,
    "set": TypeKind.COLLECTION,
    "mutableset": TypeKind.COLLECTION,
    "collection": TypeKind.COLLECTION,
    "iterable": TypeKind.COLLECTION,
    "array": TypeKind.COLLECTION,
    "map": TypeKind.MAP,
    "mutablemap": TypeKind.MAP,
    "any": TypeKind.ANY,
    "nothing": TypeKind.NOTHING,
}


def short_name(name: str) -> str:
    return name.replace("/", ".").rsplit(".", 1)[-1]


class TypeModel:
    """Lookup of type declarations by canonical name."""

    def __init__(self, decls: list[TypeDecl] | None = None):
        self._decls: dict[str, TypeDecl] = {}
        for decl in decls or []:
            self._decls[decl.name] = decl

    def __contains__(self, name: str) -> bool:
        return name in self._decls

    def __len__(self) -> int:
        return len(self._decls)

    def resolve(self, name: str) -> TypeDecl | None:
        """Find a declaration, falling back to built-in kinds by short name."""
        decl = self._decls.get(name)
        if decl is not None:
            return decl
        kind = BUILTIN_KINDS.get(short_name(name).lower())
        if kind is None:
            return None
        return TypeDecl(name=name, kind=kind)

    def require(self, name: str) -> TypeDecl:
        decl = self.resolve(name)
        if decl is None:
            raise ResolutionError(name)
        return decl

    def sealed_parents(self, name: str) -> list[TypeDecl]:
        """Sealed declarations listing `name` among their subtypes."""
        return [d for d in self._decls.values() if d.kind == TypeKind.SEALED and name in d.subtypes]

    def is_primitive(self, ref: TypeRef | None) -> bool:
        if ref is None or ref.is_type_param:
            return False
        decl = self.resolve(ref.name)
        return decl is not None and decl.kind == TypeKind.PRIMITIVE
