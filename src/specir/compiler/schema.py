"""Small predicates over raw schema dicts shared by the compiler stages."""

from __future__ import annotations

from typing import Any, Optional

from specir.parser.resolver import is_ref

UNION_KEYS = ("oneOf", "anyOf")


def coerce_types(schema: dict[str, Any]) -> list[str]:
    """Return the declared ``type`` of *schema* as a list (3.1 allows arrays)."""
    declared = schema.get("type")
    if isinstance(declared, list):
        return [t for t in declared if isinstance(t, str)]
    if isinstance(declared, str):
        return [declared]
    return []


def kind_of(schema: Any) -> Optional[str]:
    """Best-effort kind of *schema*: its first declared type, else an inferred one.

    ``properties`` implies ``object``, ``items`` implies ``array``, and an
    ``enum`` or ``const`` implies the JSON type of its value.
    """
    if not isinstance(schema, dict):
        return None
    types = coerce_types(schema)
    if types:
        return types[0]
    if schema.get("properties"):
        return "object"
    if schema.get("items"):
        return "array"
    if "const" in schema:
        return json_type(schema["const"])
    if schema.get("enum"):
        return json_type(schema["enum"][0])
    return None


def json_type(value: Any) -> str:
    """JSON Schema type name of a literal Python value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def union_key(schema: dict[str, Any]) -> Optional[str]:
    """Return ``"oneOf"`` or ``"anyOf"`` if *schema* is a non-empty union."""
    for key in UNION_KEYS:
        if isinstance(schema.get(key), list) and schema[key]:
            return key
    return None


def is_object_like(schema: dict[str, Any]) -> bool:
    """True for schemas typed ``object`` or carrying properties."""
    return "object" in coerce_types(schema) or bool(schema.get("properties"))


def is_null_schema(schema: Any) -> bool:
    """True for the ``{type: null}`` member of a nullable union."""
    return isinstance(schema, dict) and coerce_types(schema) == ["null"]


def is_composite(schema: Any) -> bool:
    """True for inline (non-ref) objects with properties and inline unions.

    These are the shapes the expander promotes to named components.
    """
    if not isinstance(schema, dict) or is_ref(schema):
        return False
    return bool(schema.get("properties")) or union_key(schema) is not None
