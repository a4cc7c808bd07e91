"""Derive stable names for the members of a ``oneOf``/``anyOf`` union.

Emitters turn every union into a discriminated type whose cases need
readable, stable names: ``dateTime`` and ``text`` rather than ``Option0`` and
``Option1``. :func:`find_variants` derives those names from what the members
themselves say -- ``const`` values, ``format`` hints, item types, or the
properties that tell object members apart -- and orders them so that the most
specific signal comes first.

Members are grouped by kind and named per group:

* **string** -- ``const`` value (``"empty"`` for ``""``), else the camel-cased
  ``format``, else ``text``.
* **number/integer** -- ``int64`` becomes ``integer``, ``float``/``double``
  keep their name, anything else is ``number``.
* **boolean** -- ``boolean``.
* **array** -- by item kind: ``textList``, ``numList``, ``intList``,
  ``boolList``; object items reuse the item's own variant name, nested arrays
  append ``Matrix``; anything else is ``list`` (``any`` without items).
* **object** -- the first property name that no other object member has,
  preferring properties with a ``const``/``enum`` value (whose value is then
  used as the name).

References are followed and nested unions are flattened; either way the
resulting variant keeps the position of the member in the list it was given.
"""

from __future__ import annotations

import enum
import logging
from collections import defaultdict
from typing import Any, Optional

from specir.compiler.naming import camelcase
from specir.compiler.schema import kind_of, union_key
from specir.models import Variant
from specir.parser.resolver import is_ref, resolve_ref

logger = logging.getLogger(__name__)


class Specificity(enum.IntEnum):
    """Priority tiers for named variants; higher tiers sort first.

    A variant's priority is its tier minus the number of variants named
    before it, so members within a tier keep their relative order.
    """

    CONST = 100
    FORMAT = 90


_NUMBER_FORMATS = {"int64": "integer", "float": "float", "double": "double"}
_LIST_NAMES = {
    "string": "textList",
    "number": "numList",
    "integer": "intList",
    "boolean": "boolList",
}

_Entry = tuple[dict[str, Any], int]


def find_variants(
    spec: dict[str, Any],
    members: list[Any],
    _active: Optional[frozenset[int]] = None,
) -> list[Variant]:
    """Name every member of a union.

    Args:
        spec: The root document, used to dereference ``$ref`` members.
        members: The ``oneOf``/``anyOf`` member list.

    Returns:
        Variants ordered by descending priority (ties by ascending
        position), followed by unprioritized variants in insertion order.
        No two variants share a name; a position may appear more than once
        when a nested union contributes several names.
    """
    active = (_active or frozenset()) | {id(members)}
    groups = _group_by_kind(spec, members, active)

    variants: list[Variant] = []
    _name_strings(groups["string"], variants)
    variants[:] = _unique_names(variants)
    _name_numbers(groups["number"] + groups["integer"], variants)
    for _schema, position in groups["boolean"]:
        variants.append(Variant(name="boolean", type="boolean", position=position))
    _name_arrays(spec, groups["array"], variants, active)
    _name_nested_unions(spec, groups["union"], variants, active)
    _name_objects(spec, groups["object"], variants)

    return _unique_names(_order(variants))


def find_polymorphic_variants(spec: dict[str, Any], members: list[Any]) -> list[Variant]:
    """Like :func:`find_variants`, but keep only the best variant per position."""
    seen: set[int] = set()
    result: list[Variant] = []
    for variant in find_variants(spec, members):
        if variant.position not in seen:
            seen.add(variant.position)
            result.append(variant)
    return result


def _group_by_kind(
    spec: dict[str, Any],
    members: list[Any],
    active: frozenset[int],
) -> dict[str, list[_Entry]]:
    groups: dict[str, list[_Entry]] = defaultdict(list)
    for position, member in enumerate(members):
        schema = resolve_ref(spec, member)
        if not isinstance(schema, dict):
            logger.warning("Skipping non-schema union member at position %d", position)
            continue
        if is_ref(schema.get("items")):
            schema = {**schema, "items": resolve_ref(spec, schema["items"])}

        key = union_key(schema)
        if key is not None:
            if id(schema[key]) in active:
                logger.warning("Skipping self-referencing union member at position %d", position)
                continue
            groups["union"].append((schema, position))
            continue

        kind = kind_of(schema)
        if kind is None or kind == "null":
            continue
        groups[kind].append((schema, position))
    return groups


def _name_strings(entries: list[_Entry], variants: list[Variant]) -> None:
    for schema, position in entries:
        if "const" in schema:
            value = schema["const"]
            variants.append(
                Variant(
                    name="empty" if value == "" else str(value),
                    type="string",
                    position=position,
                    priority=Specificity.CONST - len(variants),
                )
            )
        elif schema.get("format") and camelcase(str(schema["format"])):
            variants.append(
                Variant(
                    name=camelcase(str(schema["format"])),
                    type="string",
                    position=position,
                    priority=Specificity.FORMAT - len(variants),
                )
            )
        else:
            variants.append(Variant(name="text", type="string", position=position))


def _name_numbers(entries: list[_Entry], variants: list[Variant]) -> None:
    for schema, position in entries:
        name = _NUMBER_FORMATS.get(schema.get("format", ""))
        if name is None:
            variants.append(Variant(name="number", type="number", position=position))
            continue
        variants.append(
            Variant(
                name=name,
                type="number",
                position=position,
                priority=Specificity.FORMAT - len(variants),
            )
        )


def _name_arrays(
    spec: dict[str, Any],
    entries: list[_Entry],
    variants: list[Variant],
    active: frozenset[int],
) -> None:
    for schema, position in entries:
        items = schema.get("items")
        if not isinstance(items, dict) or not items:
            variants.append(Variant(name="any", type="array", position=position))
            continue

        items = resolve_ref(spec, items)
        kind = kind_of(items)
        if kind in _LIST_NAMES:
            variants.append(
                Variant(name=_LIST_NAMES[kind], type="array", subtype=kind, position=position)
            )
            continue

        if kind in ("object", "array") and id(items) not in active:
            subs = find_variants(spec, [items], active | {id(items)})
            suffix = "Matrix" if kind == "array" else ""
            for sub in subs:
                variants.append(
                    sub.model_copy(
                        update={"name": sub.name + suffix, "type": "array", "position": position}
                    )
                )
            if subs:
                continue

        variants.append(Variant(name="list", type="array", position=position))


def _name_nested_unions(
    spec: dict[str, Any],
    entries: list[_Entry],
    variants: list[Variant],
    active: frozenset[int],
) -> None:
    for schema, position in entries:
        nested = schema[union_key(schema)]
        for sub in find_variants(spec, nested, active):
            variants.append(sub.model_copy(update={"position": position}))


def _name_objects(
    spec: dict[str, Any],
    entries: list[_Entry],
    variants: list[Variant],
) -> None:
    rows: list[list[Variant]] = []
    for schema, position in entries:
        additional = schema.get("additionalProperties")
        if additional is not None and additional is not False:
            continue
        if not schema.get("properties") and not schema.get("x-properties"):
            continue
        rows.append(_discriminator_row(spec, schema, position, len(rows)))

    for row in rows:
        taken = {variant.name for other in rows if other is not row for variant in other}
        pick = next((variant for variant in row if variant.name not in taken), None)
        if pick is None:
            position = row[0].position if row else -1
            logger.warning(
                "No unique discriminating property for union member at position %d",
                position,
            )
            continue
        variants.append(pick)


def _discriminator_row(
    spec: dict[str, Any],
    schema: dict[str, Any],
    position: int,
    row_index: int,
) -> list[Variant]:
    """Candidate names for one object member, static (const/enum) ones first."""
    row: list[Variant] = []
    names: set[str] = set()
    for key in ("properties", "x-properties"):
        for prop_name, prop_schema in (schema.get(key) or {}).items():
            resolved = resolve_ref(spec, prop_schema)
            if not isinstance(resolved, dict):
                resolved = {}
            static = "const" in resolved or bool(resolved.get("enum"))
            if "const" in resolved:
                name = str(resolved["const"])
            elif resolved.get("enum"):
                name = str(resolved["enum"][0])
            else:
                name = prop_name
            if name in names:
                continue
            names.add(name)
            subtype = kind_of(resolved)
            row.append(
                Variant(
                    name=name,
                    type="object",
                    position=position,
                    priority=(
                        Specificity.CONST - row_index
                        if static and subtype == "string"
                        else None
                    ),
                    subtype=subtype,
                    source=prop_name,
                    static=True if static else None,
                )
            )
    row.sort(key=lambda variant: not variant.static)
    return row


def _order(variants: list[Variant]) -> list[Variant]:
    return sorted(
        variants,
        key=lambda v: (0, -v.priority, v.position) if v.priority is not None else (1, 0, 0),
    )


def _unique_names(variants: list[Variant]) -> list[Variant]:
    seen: set[str] = set()
    result: list[Variant] = []
    for variant in variants:
        if variant.name not in seen:
            seen.add(variant.name)
            result.append(variant)
    return result
