"""Canonicalize every schema in an OpenAPI document, in place.

Real-world documents express the same shape in many ways: ``allOf`` chains
instead of plain objects, one-value enums instead of ``const``, ``anyOf``
with a ``null`` member instead of a nullable schema, objects that are really
``additionalProperties`` wrappers. Later stages assume a single canonical
form, which this module produces.

The walk is depth-first and guarded by a set of visited node identities, so
self-referential schemas (including ``allOf`` cycles between components)
terminate. Each node is processed by the rules below, in this order:

1. Non-empty ``properties``: the node is an object; union keywords are dropped.
2. Non-empty ``items``: the node is an array; items are normalized and an
   array-typed ``default`` on them moves up to the container.
3. ``anyOf`` next to ``oneOf``: ``anyOf`` is dropped.
4. One-value ``enum`` becomes ``const``; longer enums are deduplicated by
   their formatted identifier.
5. ``const`` is mirrored into ``default``.
6. ``allOf`` members are normalized and merged into the node.
7. An object whose only shape is in ``additionalProperties`` takes that shape.
8. ``oneOf``/``anyOf`` members are normalized, string enums merged, trivial
   ``T | null`` unions collapsed, and the rest named with
   :func:`~specir.compiler.variants.find_polymorphic_variants`.

Only rule 6 can fail: an ``allOf`` that mixes object and non-object members
raises :class:`~specir.exceptions.SchemaConflictError`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from specir.compiler.naming import format_name
from specir.compiler.schema import UNION_KEYS, coerce_types, is_null_schema, is_object_like
from specir.compiler.variants import find_polymorphic_variants
from specir.exceptions import SchemaConflictError
from specir.models import HTTPMethod, NamingConfig
from specir.parser.resolver import resolve_ref

logger = logging.getLogger(__name__)

_MERGE_SKIP = frozenset({"allOf", "$ref"})


def normalize_spec(spec: dict[str, Any], naming: Optional[NamingConfig] = None) -> None:
    """Normalize every schema reachable from components and operations.

    Args:
        spec: The document to normalize. Mutated in place.
        naming: Reserved-word tables for enum identity; defaults apply when
            omitted.

    Raises:
        SchemaConflictError: If an ``allOf`` mixes object and non-object
            members.
        CyclicReferenceError: If a pure ``$ref`` chain loops.
    """
    naming = naming or NamingConfig()
    visited: set[int] = set()

    schemas = spec.get("components", {}).get("schemas", {}) or {}
    for name, schema in schemas.items():
        normalize_schema(spec, schema, visited, f"#/components/schemas/{name}", naming)

    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for index, parameter in enumerate(path_item.get("parameters") or []):
            _normalize_parameter(spec, parameter, visited, f"#/paths/{path}/parameters/{index}", naming)
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            _normalize_operation(spec, operation, visited, f"#/paths/{path}/{method.value}", naming)


def _normalize_operation(
    spec: dict[str, Any],
    operation: dict[str, Any],
    visited: set[int],
    location: str,
    naming: NamingConfig,
) -> None:
    for index, parameter in enumerate(operation.get("parameters") or []):
        _normalize_parameter(spec, parameter, visited, f"{location}/parameters/{index}", naming)

    body = resolve_ref(spec, operation.get("requestBody"))
    if isinstance(body, dict):
        for media_type, media in (body.get("content") or {}).items():
            if isinstance(media, dict) and "schema" in media:
                normalize_schema(
                    spec, media["schema"], visited,
                    f"{location}/requestBody/content/{media_type}/schema", naming,
                )

    for status, response in (operation.get("responses") or {}).items():
        response = resolve_ref(spec, response)
        if not isinstance(response, dict):
            continue
        for media_type, media in (response.get("content") or {}).items():
            if isinstance(media, dict) and "schema" in media:
                normalize_schema(
                    spec, media["schema"], visited,
                    f"{location}/responses/{status}/content/{media_type}/schema", naming,
                )


def _normalize_parameter(
    spec: dict[str, Any],
    parameter: Any,
    visited: set[int],
    location: str,
    naming: NamingConfig,
) -> None:
    parameter = resolve_ref(spec, parameter)
    if isinstance(parameter, dict) and "schema" in parameter:
        normalize_schema(spec, parameter["schema"], visited, f"{location}/schema", naming)


def normalize_schema(
    spec: dict[str, Any],
    node: Any,
    visited: set[int],
    location: str,
    naming: Optional[NamingConfig] = None,
) -> None:
    """Normalize one schema node and everything below it, in place.

    Args:
        spec: The root document, for dereferencing.
        node: The schema or ``$ref`` to normalize. References are followed
            and the target is normalized.
        visited: Identities of nodes already processed in this run.
        location: Pointer-like location used in error messages.
        naming: Reserved-word tables for enum identity.

    Raises:
        SchemaConflictError: If an ``allOf`` mixes object and non-object
            members.
    """
    naming = naming or NamingConfig()
    schema = resolve_ref(spec, node)
    if not isinstance(schema, dict) or id(schema) in visited:
        return
    visited.add(id(schema))

    # 1. properties make an object
    if schema.get("properties"):
        _force_type(schema, "object")
        for key in UNION_KEYS:
            schema.pop(key, None)

    # 2. items make an array
    if isinstance(schema.get("items"), dict) and schema["items"]:
        _force_type(schema, "array")
        for key in UNION_KEYS:
            schema.pop(key, None)
        normalize_schema(spec, schema["items"], visited, f"{location}/items", naming)
        items = resolve_ref(spec, schema["items"])
        if isinstance(items, dict) and isinstance(items.get("default"), list):
            schema.setdefault("default", items["default"])
            del items["default"]

    # 3. oneOf wins over anyOf
    if "oneOf" in schema and "anyOf" in schema:
        del schema["anyOf"]

    # 4. enums
    if isinstance(schema.get("enum"), list):
        _normalize_enum(schema, naming)

    # 5. const is the default
    if "const" in schema:
        schema["default"] = schema["const"]

    # 6. allOf
    if isinstance(schema.get("allOf"), list):
        _merge_all_of(spec, schema, visited, location, naming)

    # 7. additionalProperties wrapper
    _hoist_additional_properties(spec, schema)

    # 8. unions
    for key in UNION_KEYS:
        if key in schema:
            _normalize_union(spec, schema, key, visited, f"{location}/{key}", naming)

    for prop_name, prop in (schema.get("properties") or {}).items():
        normalize_schema(spec, prop, visited, f"{location}/properties/{prop_name}", naming)
    if isinstance(schema.get("additionalProperties"), dict):
        normalize_schema(
            spec, schema["additionalProperties"], visited,
            f"{location}/additionalProperties", naming,
        )


def _force_type(schema: dict[str, Any], kind: str) -> None:
    """Set ``type`` to *kind*, turning a ``[kind, "null"]`` list into ``nullable``."""
    if "null" in coerce_types(schema):
        schema["nullable"] = True
    schema["type"] = kind


def _normalize_enum(schema: dict[str, Any], naming: NamingConfig) -> None:
    values = schema["enum"]
    if len(values) == 1:
        schema["const"] = values[0]
        del schema["enum"]
        return
    seen: set[str] = set()
    unique = []
    for value in values:
        identity = format_name(value, naming.enum_reserved)
        if identity not in seen:
            seen.add(identity)
            unique.append(value)
    schema["enum"] = unique


def _merge_all_of(
    spec: dict[str, Any],
    schema: dict[str, Any],
    visited: set[int],
    location: str,
    naming: NamingConfig,
) -> None:
    members = []
    for index, member in enumerate(schema["allOf"]):
        normalize_schema(spec, member, visited, f"{location}/allOf/{index}", naming)
        resolved = resolve_ref(spec, member)
        if isinstance(resolved, dict):
            members.append(resolved)

    object_members = [m for m in members if is_object_like(m)]
    other_members = [
        m for m in members
        if coerce_types(m) and not is_object_like(m) and not is_null_schema(m)
    ]
    if object_members and other_members:
        kinds = sorted({t for m in other_members for t in coerce_types(m)})
        raise SchemaConflictError(
            location,
            "allOf mixes object members with non-object members "
            f"({', '.join(kinds)})",
        )

    del schema["allOf"]
    for member in members:
        for key, value in member.items():
            if key in _MERGE_SKIP:
                continue
            value = copy.deepcopy(value)
            if key == "properties" and isinstance(schema.get("properties"), dict):
                schema["properties"] = {**schema["properties"], **value}
            elif key == "required" and isinstance(schema.get("required"), list):
                schema["required"] = schema["required"] + [
                    name for name in value if name not in schema["required"]
                ]
            else:
                schema[key] = value

    if schema.get("properties"):
        _force_type(schema, "object")


def _hoist_additional_properties(spec: dict[str, Any], schema: dict[str, Any]) -> None:
    if schema.get("properties"):
        return
    if "object" not in coerce_types(schema) and "additionalProperties" not in schema:
        return
    nested = resolve_ref(spec, schema.get("additionalProperties"))
    if not isinstance(nested, dict) or not nested.get("properties"):
        return
    del schema["additionalProperties"]
    for key, value in nested.items():
        if key not in schema or key in ("properties", "required", "type"):
            schema[key] = copy.deepcopy(value)
    schema["type"] = "object"


def _normalize_union(
    spec: dict[str, Any],
    schema: dict[str, Any],
    key: str,
    visited: set[int],
    location: str,
    naming: NamingConfig,
) -> None:
    members = schema.get(key)
    if not isinstance(members, list):
        del schema[key]
        return

    for index, member in enumerate(members):
        normalize_schema(spec, member, visited, f"{location}/{index}", naming)
    members = [m for m in members if resolve_ref(spec, m)]
    if not members:
        del schema[key]
        return

    members = _merge_string_enums(spec, members, naming)
    schema[key] = members

    non_null = [m for m in members if not is_null_schema(resolve_ref(spec, m))]
    if len(non_null) == 1:
        inlined = copy.deepcopy(resolve_ref(spec, non_null[0]))
        del schema[key]
        for inner_key, value in inlined.items():
            schema.setdefault(inner_key, value)
        if len(members) > 1:
            schema["nullable"] = True
        return

    variants = find_polymorphic_variants(spec, members)
    if not variants:
        logger.warning("Union at %s has no resolvable variants", location)
    schema["x-variants"] = [
        variant.model_dump(exclude_none=True) for variant in variants
    ]


def _merge_string_enums(
    spec: dict[str, Any],
    members: list[Any],
    naming: NamingConfig,
) -> list[Any]:
    """Fold every string-enum member into the first one."""
    first: Optional[int] = None
    merged: list[Any] = []
    result: list[Any] = []
    for member in members:
        resolved = resolve_ref(spec, member)
        is_string_enum = (
            isinstance(resolved, dict)
            and coerce_types(resolved) == ["string"]
            and isinstance(resolved.get("enum"), list)
            and resolved["enum"]
        )
        if not is_string_enum:
            result.append(member)
            continue
        merged.extend(resolved["enum"])
        if first is None:
            first = len(result)
            result.append(copy.deepcopy(resolved))

    if first is not None:
        target = result[first]
        target["enum"] = merged
        _normalize_enum(target, naming)
    return result
