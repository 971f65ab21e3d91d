"""Partial-spec merge for multi-module builds.

Contributor modules each emit a PartialDocument; the aggregator folds them
together with its own locally generated Document. Collisions are resolved
last-writer-wins and reported as warnings, never raised.
"""

import logging

from routespec.document.model import Components, Document, Operation, PartialDocument

logger = logging.getLogger(__name__)


def merge(
    partials: list[PartialDocument], local: Document | None = None, conflicts: list[str] | None = None
) -> Document:
    """Merge partials in list order, then the local document on top.

    Info, servers and global security come only from the local document.
    Conflict messages are logged and, when given, appended to `conflicts`.
    """
    paths: dict[str, dict[str, Operation]] = {}
    schemas = {}
    security_schemes = {}

    def conflict(message: str) -> None:
        logger.warning(message)
        if conflicts is not None:
            conflicts.append(message)

    for partial in partials:
        origin = f"module {partial.module_id}"
        _merge_paths(paths, partial.paths, origin, conflict)
        _merge_named(schemas, partial.schemas, "schema", origin, conflict)
        _merge_named(security_schemes, partial.security_schemes, "security scheme", origin, conflict)

    document = Document()
    if local is not None:
        # local wins silently over every partial
        for path, methods in local.paths.items():
            paths.setdefault(path, {}).update(methods)
        schemas.update(local.components.schemas)
        security_schemes.update(local.components.security_schemes or {})
        document = local

    return document.model_copy(
        update={
            "paths": paths,
            "components": Components(schemas=schemas, security_schemes=security_schemes or None),
        }
    )


def _merge_paths(target: dict, paths: dict[str, dict[str, Operation]], origin: str, conflict) -> None:
    for path, methods in paths.items():
        existing = target.setdefault(path, {})
        for method, operation in methods.items():
            if method in existing:
                conflict(f"{method.upper()} {path} redefined by {origin}; last definition wins")
            existing[method] = operation


def _merge_named(target: dict, items: dict, what: str, origin: str, conflict) -> None:
    for name, item in items.items():
        if name in target:
            if target[name] != item:
                conflict(f"{what} {name} redefined by {origin}; last definition wins")
            else:
                logger.debug("%s %s redefined identically by %s", what.capitalize(), name, origin)
        target[name] = item


def to_partial(document: Document, module_id: str) -> PartialDocument:
    """The share of `document` a contributor module hands to the aggregator."""
    return PartialDocument(
        module_id=module_id,
        openapi=document.openapi,
        paths=document.paths,
        schemas=document.components.schemas,
        security_schemes=document.components.security_schemes or {},
    )


def from_partial(partial: PartialDocument) -> Document:
    return Document(
        openapi=partial.openapi,
        paths=partial.paths,
        components=Components(schemas=partial.schemas, security_schemes=partial.security_schemes or None),
    )
