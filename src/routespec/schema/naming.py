"""Schema naming helpers: primitive type names and generic instantiation suffixes."""

from routespec.graph.types import short_name

PRIMITIVE_TYPES = {
    "int": "integer",
    "long": "integer",
    "short": "integer",
    "byte": "integer",
    "double": "number",
    "float": "number",
    "string": "string",
    "char": "string",
    "boolean": "boolean",
}


def primitive_type(name: str) -> str:
    """Map a primitive type name to its schema type; unknown names pass through lower-cased."""
    lowered = short_name(name).lower().removesuffix("?")
    return PRIMITIVE_TYPES.get(lowered, lowered)


def generic_suffix(rendered_args: str) -> str:
    """Turn `<A, B<C>>` into `_Of_A_and_B_Of_C`.

    Nested generics are flattened with `_Of_`; top-level arguments are joined
    with `_and_`.
    """
    content = rendered_args.strip()
    if content.startswith("<") and content.endswith(">"):
        content = content[1:-1]
    return "_Of_" + _flatten(content)


def _flatten(content: str) -> str:
    parts = []
    depth = 0
    start = 0
    for i, ch in enumerate(content):
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(content[start:i].strip())
            start = i + 1
    parts.append(content[start:].strip())

    processed = []
    for part in parts:
        open_at = part.find("<")
        if open_at != -1 and part.endswith(">"):
            processed.append(f"{part[:open_at]}_Of_{_flatten(part[open_at + 1:-1])}")
        else:
            processed.append(part)
    return "_and_".join(processed)
