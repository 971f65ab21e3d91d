"""Schema synthesis engine.

Turns a type reference into a SchemaNode, registering every named object
type in the pass's SchemaRegistry exactly once. Object types are always
emitted as `$ref`s; the registry entry is inserted before its members are
visited, which is what lets self- and mutually-recursive types terminate.
"""

import logging

from routespec.config import DocsConfig
from routespec.errors import ResolutionError
from routespec.graph.types import Member, SchemaAnnotation, TypeDecl, TypeKind, TypeModel, TypeRef
from routespec.schema.naming import generic_suffix, primitive_type
from routespec.schema.node import Discriminator, SchemaNode, SchemaRegistry, ref_to

logger = logging.getLogger(__name__)

# Synthetic members every enum exposes that are not enum constants.
ENUM_EXCLUDED = {"entries", "values", "valueOf", "$ENTRIES", "$VALUES"}

Generics = dict[str, TypeRef]


class SchemaSynthesizer:
    """Synthesizes schemas against one registry for the length of one pass."""

    def __init__(self, config: DocsConfig, types: TypeModel, registry: SchemaRegistry | None = None):
        self.config = config
        self.types = types
        self.registry = registry if registry is not None else SchemaRegistry()
        self.warnings: list[str] = []

    def synthesize(self, ref: TypeRef | None, generics: Generics | None = None) -> SchemaNode | None:
        """Schema for `ref`, or None when it is absent or cannot be resolved."""
        try:
            return self._synthesize(ref, generics or {})
        except ResolutionError as e:
            self._warn(f"{e}; schema omitted")
            return None

    def is_primitive(self, ref: TypeRef | None) -> bool:
        return self.types.is_primitive(ref)

    def _synthesize(self, ref: TypeRef | None, generics: Generics) -> SchemaNode | None:
        if ref is None:
            return None
        if ref.is_type_param and ref.name not in generics:
            # unbound generic parameter, nothing more is known about it
            return SchemaNode(type="object")
        ref = _bind(ref, generics)
        name = ref.name

        override = self.config.override_for(name)
        if override is not None:
            return SchemaNode(
                type=override.serialized_as or "string",
                format=override.format,
                description=override.description,
                canonical_name=name,
            )

        decl = self.types.require(name)
        annotation = ref.annotation or decl.annotation
        if annotation is not None and annotation.type:
            return SchemaNode(
                type=annotation.type,
                format=annotation.format,
                description=annotation.text,
                canonical_name=name,
            )
        if annotation is not None and annotation.serialized_as is not None:
            return self._synthesize(annotation.serialized_as, generics)

        description = self._type_description(decl, annotation)
        kind = decl.kind

        if kind == TypeKind.PRIMITIVE:
            return SchemaNode(type=primitive_type(name), description=description, canonical_name=name)

        if kind == TypeKind.MAP:
            # keys are always strings, only the value type matters
            value = ref.args[-1] if ref.args else None
            return SchemaNode(
                type="object",
                description=description,
                additional_properties=self._synthesize(value, generics),
                canonical_name=name,
            )

        if kind == TypeKind.COLLECTION:
            item = ref.args[0] if ref.args else None
            return SchemaNode(
                type="array",
                description=description,
                items=self._synthesize(item, generics),
                canonical_name=name,
            )

        if kind == TypeKind.ENUM:
            return SchemaNode(
                type="string",
                description=description,
                enum=[e for e in decl.enum_entries if e not in ENUM_EXCLUDED],
                canonical_name=name,
            )

        if kind == TypeKind.SEALED:
            return self._polymorphic(decl, description)

        if kind == TypeKind.ANY:
            return SchemaNode(type="object", description=description, canonical_name=name)

        if kind == TypeKind.NOTHING:
            # the sentinel entry never reaches definitions(), so it is never referenced
            self.registry.reserve(name)
            self.registry.register(name, SchemaNode(type="object", canonical_name=name))
            return SchemaNode(type="object", description=description)

        if kind == TypeKind.VALUE:
            wrapped = decl.members[0].type.name if decl.members else "object"
            return SchemaNode(type=primitive_type(wrapped), description=description, canonical_name=name)

        return self._record(decl, ref, description)

    def _record(self, decl: TypeDecl, ref: TypeRef, description: str | None) -> SchemaNode:
        name = decl.name
        substitution: Generics = {}
        if ref.args:
            name += generic_suffix(f"<{', '.join(a.render() for a in ref.args)}>")
            substitution = dict(zip(decl.type_params, ref.args))

        node = SchemaNode(type="object", description=description, canonical_name=name)
        if self.registry.register(name, node):
            logger.debug("Registered schema %s", name)
            self._populate(node, decl, self._members(decl), substitution)
        return SchemaNode(ref=ref_to(name), description=description)

    def _members(self, decl: TypeDecl) -> list[Member]:
        """Own members of `decl` plus those inherited from sealed parents."""
        members = decl.members
        for parent in self.types.sealed_parents(decl.name):
            members = _inherit(parent.members, members)
        return members

    def _polymorphic(self, decl: TypeDecl, description: str | None) -> SchemaNode:
        name = decl.name
        reference = SchemaNode(ref=ref_to(name), description=description)
        if name in self.registry:
            return reference

        base = SchemaNode(type="object", description=description, canonical_name=name)
        self.registry.register(name, base)
        logger.debug("Registered polymorphic schema %s", name)

        subtypes = []
        for sub_name in decl.subtypes:
            sub = self.types.resolve(sub_name)
            if sub is None:
                self._warn(f"Unresolved subtype {sub_name} of {name}; left out of the discriminator")
                continue
            subtypes.append(sub)

        mapping = {}
        for sub in subtypes:
            mapping[sub.serial_name or sub.name] = ref_to(sub.name)
        base.discriminator = Discriminator(
            property_name=decl.discriminator or self.config.discriminator,
            mapping=mapping,
        )
        base.one_of = [SchemaNode(ref=ref_to(sub.name)) for sub in subtypes]
        self._populate(base, decl, decl.members, {})

        for sub in subtypes:
            if sub.kind == TypeKind.SEALED:
                self._polymorphic(sub, self._type_description(sub, sub.annotation))
                continue
            self._record(sub, TypeRef(name=sub.name), self._type_description(sub, sub.annotation))
        return reference

    def _populate(self, node: SchemaNode, decl: TypeDecl, members: list[Member], generics: Generics) -> None:
        for member in members:
            if self.is_eligible(member):
                self._add_member(node, decl, member, generics)

    def is_eligible(self, member: Member) -> bool:
        if member.computed:
            return False
        if self.config.hide_private_fields and not member.public:
            return False
        if self.config.hide_transient_fields and member.is_transient:
            return False
        return True

    def _add_member(self, node: SchemaNode, decl: TypeDecl, member: Member, generics: Generics) -> None:
        annotation = member.schema_
        name = _serialized_name(decl, member)
        try:
            if annotation is not None and annotation.type:
                prop = SchemaNode(type=annotation.type, format=annotation.format)
            elif annotation is not None and annotation.serialized_as is not None:
                prop = self._synthesize(annotation.serialized_as, generics)
            else:
                prop = self._synthesize(member.type, generics)
        except ResolutionError as e:
            self._warn(f"{decl.name}.{member.name}: {e}; property omitted")
            return

        field_text = annotation.text if annotation is not None else None
        prop.description = field_text or prop.description or self._doc(member.doc)
        node.add_property(name, prop)
        if self._is_required(decl, member, annotation):
            node.mark_required(name)

    def _is_required(self, decl: TypeDecl, member: Member, annotation: SchemaAnnotation | None) -> bool:
        if annotation is not None:
            # an annotated field is required unless nullable, whatever its default
            return annotation.required if annotation.required is not None else not member.type.nullable
        if not self.config.derive_required_from_nullability or member.type.nullable:
            return False
        ctor_param = decl.ctor_param(member.name)
        if ctor_param is not None:
            return not ctor_param.has_default
        return member.abstract and not member.has_initializer

    def _type_description(self, decl: TypeDecl, annotation: SchemaAnnotation | None) -> str | None:
        return self._doc(decl.doc) or (annotation.text if annotation is not None else None)

    def _doc(self, doc: str | None) -> str | None:
        return doc if self.config.use_doc_comments else None

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _bind(ref: TypeRef, generics: Generics) -> TypeRef:
    """Replace generic parameters in `ref` with the caller's concrete types."""
    if ref.is_type_param and ref.name in generics:
        bound = generics[ref.name]
        if ref.nullable and not bound.nullable:
            bound = bound.model_copy(update={"nullable": True})
        return bound
    if not ref.args:
        return ref
    return ref.model_copy(update={"args": [_bind(a, generics) for a in ref.args]})


def _inherit(base: list[Member], own: list[Member]) -> list[Member]:
    declared = {m.name for m in own}
    return [m for m in base if m.name not in declared] + list(own)


def _serialized_name(decl: TypeDecl, member: Member) -> str:
    if member.json_name:
        return member.json_name
    ctor_param = decl.ctor_param(member.name)
    if ctor_param is not None and ctor_param.json_name:
        return ctor_param.json_name
    return member.name
