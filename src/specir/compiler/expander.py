"""Hoist inline composite schemas into named top-level components.

Emitters generate one named type per component schema. An inline object
nested three levels deep inside a response would otherwise need an invented
name in every target language, and each emitter would invent a different one.
The expander makes that decision once: every inline object with properties
and every inline union is moved to ``components.schemas`` under a
deterministic PascalCase name and replaced with a ``$ref``.

Names are built from the parent name plus the property name, the union
variant name, or a fixed suffix::

    Pet.properties.owner               -> PetOwner
    Pet.properties.tags.items          -> PetTagsEntry
    Pet.additionalProperties           -> PetValue
    ListPetsInput.x-properties.filter  -> ListPetsInputFilter
    Shape.oneOf[<variant circle>]      -> ShapeCircle
    Shape.oneOf[2] (no variant)        -> Shape2

Names are stable across runs for the same input, because generated SDK code
is diffed across regenerations.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any, Optional

from specir.compiler.naming import join_skip_digits, schema_identifier
from specir.compiler.schema import is_composite, union_key
from specir.compiler.variants import find_polymorphic_variants
from specir.parser.resolver import is_ref, schema_ref

logger = logging.getLogger(__name__)


def compose_name(parent: str, part: str) -> str:
    """Build the component name for *part* nested under *parent*.

    Digit-only parts are glued on without a separator, and a leading digit
    is prefixed with ``_`` so the result is always a valid identifier.
    """
    return schema_identifier(join_skip_digits([parent, part], " "))


def expand_spec(
    spec: dict[str, Any],
    schemas: Optional[dict[str, Any]] = None,
    reserved: Iterable[str] = (),
) -> list[str]:
    """Hoist nested composites out of *schemas* (default: every component).

    Args:
        spec: The root document. ``components.schemas`` receives the hoisted
            schemas.
        schemas: The name -> schema mapping to expand. Pass a one-entry dict
            to expand a single freshly registered component.
        reserved: Names that generated components must not use.

    Returns:
        Names of the components created, in creation order.
    """
    components = spec.setdefault("components", {}).setdefault("schemas", {})
    expander = _Expander(spec, components, frozenset(reserved))
    targets = components if schemas is None else schemas
    for name, schema in list(targets.items()):
        if isinstance(schema, dict) and not is_ref(schema):
            expander.expand(name, schema)
    return expander.hoisted


class _Expander:
    """One expansion pass; remembers visited nodes and hoisted names."""

    def __init__(self, spec: dict[str, Any], components: dict[str, Any], reserved: frozenset[str]):
        self.spec = spec
        self.components = components
        self.reserved = reserved
        self.visited: set[int] = set()
        self.hoisted: list[str] = []

    def expand(self, name: str, schema: dict[str, Any]) -> None:
        if id(schema) in self.visited:
            return
        self.visited.add(id(schema))

        if schema.get("properties") and isinstance(schema.get("oneOf"), list):
            _collapse_required_one_of(schema)

        if schema.get("properties"):
            self._expand_properties(name, schema)

        if schema.get("x-properties"):
            self._expand_input_properties(name, schema)

        self._expand_inline(name, schema)

        key = union_key(schema)
        if key is not None:
            self._expand_union(name, schema, key)

    def _expand_properties(self, name: str, schema: dict[str, Any]) -> None:
        properties = schema["properties"]
        for prop_name, prop in list(properties.items()):
            if not isinstance(prop, dict) or is_ref(prop):
                continue
            child = compose_name(name, prop_name.replace("[]", ""))
            if is_composite(prop):
                properties[prop_name] = self._hoist(child, prop)
            else:
                self._expand_inline(child, prop)

    def _expand_input_properties(self, name: str, schema: dict[str, Any]) -> None:
        """Hoist composite parameter schemas; the ``x-in`` location stays on the entry."""
        properties = schema["x-properties"]
        for prop_name, prop in list(properties.items()):
            if not isinstance(prop, dict) or is_ref(prop):
                continue
            child = compose_name(name, prop_name.replace("[]", ""))
            body = {key: value for key, value in prop.items() if key != "x-in"}
            if is_composite(body):
                location = {"x-in": prop["x-in"]} if "x-in" in prop else {}
                properties[prop_name] = {**location, **self._hoist(child, body)}
            else:
                self._expand_inline(child, prop)

    def _expand_inline(self, name: str, node: dict[str, Any]) -> None:
        """Expand arrays and maps that stay inline themselves."""
        if isinstance(node.get("items"), dict):
            self._expand_array(name, node)

        additional = node.get("additionalProperties")
        if isinstance(additional, dict) and not is_ref(additional):
            child = compose_name(name, "Value")
            if is_composite(additional):
                node["additionalProperties"] = self._hoist(child, additional)
            else:
                self._expand_inline(child, additional)

    def _expand_array(self, name: str, node: dict[str, Any]) -> None:
        items = node["items"]
        if is_ref(items):
            return
        if is_composite(items):
            node["items"] = self._hoist(compose_name(name, "Entry"), items)
        elif isinstance(items.get("items"), dict):
            # nested arrays keep the outer name
            self._expand_array(name, items)
        else:
            self._expand_inline(name, items)

    def _expand_union(self, name: str, schema: dict[str, Any], key: str) -> None:
        members = schema[key]
        variants = schema.get("x-variants")
        if variants is None:
            variants = [
                variant.model_dump(exclude_none=True)
                for variant in find_polymorphic_variants(self.spec, members)
            ]
        names = {variant["position"]: variant["name"] for variant in variants}

        for position, member in enumerate(members):
            if not isinstance(member, dict) or is_ref(member):
                continue
            child = compose_name(name, names.get(position, str(position)))
            if is_composite(member):
                members[position] = self._hoist(child, member)
            else:
                self._expand_inline(child, member)

    def _hoist(self, name: str, schema: dict[str, Any]) -> dict[str, str]:
        final = self._register(name, schema)
        self.expand(final, schema)
        return schema_ref(final)

    def _register(self, name: str, schema: dict[str, Any]) -> str:
        candidate = name
        counter = 1
        while candidate in self.reserved or (
            candidate in self.components and self.components[candidate] is not schema
        ):
            counter += 1
            candidate = f"{name}{counter}"
        if candidate not in self.components:
            self.components[candidate] = schema
            self.hoisted.append(candidate)
            logger.debug("Hoisted inline schema as %s", candidate)
        return candidate


def _collapse_required_one_of(schema: dict[str, Any]) -> None:
    """Turn ``oneOf: [{required: [a]}, {required: [b]}]`` into ``oneOf: [props.a, props.b]``.

    The pattern says "exactly one of these properties is present", which is a
    union of the property schemas themselves. Left untouched unless every
    member is inline and names exactly one existing property.
    """
    properties = schema["properties"]
    collapsed = []
    for member in schema["oneOf"]:
        if not isinstance(member, dict) or is_ref(member):
            return
        required = member.get("required") or []
        if len(required) != 1 or required[0] not in properties:
            return
        collapsed.append(copy.deepcopy(properties[required[0]]))

    schema["oneOf"] = collapsed
    for key in ("properties", "required", "type", "x-variants"):
        schema.pop(key, None)
