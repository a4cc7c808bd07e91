"""Identifier casing and naming helpers used by every compiler stage.

Generated names end up as class, property, and function names in emitted
SDKs, so every helper here is deterministic: the same input always yields
the same identifier. Words are split on non-alphanumeric characters and on
lower-to-upper case transitions; separators directly in front of digits are
removed first so that ``iso-8601`` becomes ``iso8601`` rather than
``iso 8601``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any

_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_SEPARATOR_BEFORE_DIGIT = re.compile(r"[^A-Za-z0-9]+(?=\d)")
_DIGITS_ONLY = re.compile(r"^\d+$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_STARTS_WITH_NUMBER = re.compile(r"^-?\d")
_ENUM_SPECIAL = re.compile(r"(^\$)|(\+)|(-)|[^A-Za-z0-9]+")


def split_words(value: str) -> list[str]:
    """Split *value* into words on separators and case transitions.

    Example::

        split_words("getUser2FAStatus")  # ['get', 'User2', 'FA', 'Status']
    """
    value = _SEPARATOR_BEFORE_DIGIT.sub("", value)
    value = _CASE_BOUNDARY.sub(r"\1 \2", value)
    value = _ACRONYM_BOUNDARY.sub(r"\1 \2", value)
    return [word for word in _NON_ALNUM.split(value) if word]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def camelcase(value: str) -> str:
    """Convert *value* to ``camelCase`` (``date-time`` -> ``dateTime``)."""
    words = split_words(value)
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(word) for word in words[1:])


def pascalcase(value: str) -> str:
    """Convert *value* to ``PascalCase`` (``pet entry`` -> ``PetEntry``)."""
    return "".join(_capitalize(word) for word in split_words(value))


def snakecase(value: str) -> str:
    """Convert *value* to ``snake_case`` (``userProfiles`` -> ``user_profiles``)."""
    return "_".join(word.lower() for word in split_words(value))


def join_skip_digits(parts: Iterable[str], separator: str) -> str:
    """Join *parts* with *separator*, gluing digit-only parts on directly.

    Example::

        join_skip_digits(["Pet", "2", "owner"], " ")  # 'Pet2 owner'
    """
    result = ""
    for index, part in enumerate(parts):
        if index == 0 or _DIGITS_ONLY.match(part):
            result += part
        else:
            result += separator + part
    return result


def prefix_leading_digit(name: str) -> str:
    """Prefix *name* with ``_`` when it starts with a digit."""
    return f"_{name}" if name[:1].isdigit() else name


def schema_identifier(value: str) -> str:
    """PascalCase *value* into a component name (``2fa verify`` -> ``_2faVerify``)."""
    return prefix_leading_digit(pascalcase(value))


def clean_operation_id(operation_id: str) -> str:
    """Normalise an explicit ``operationId`` into a camelCase function name.

    Only the part after the last ``#`` is kept and dashes in front of digits
    are dropped before camel-casing. A leading digit gets a ``_`` prefix.

    Example::

        clean_operation_id("pets#list-v2")  # 'listV2'
        clean_operation_id("2fa-verify")  # '_2faVerify'
    """
    tail = operation_id.split("#")[-1]
    return prefix_leading_digit(camelcase(re.sub(r"-(?=\d)", "", tail)))


def is_valid_identifier(name: str, reserved: Iterable[str] = ()) -> bool:
    """Return True if *name* is an ASCII identifier not present in *reserved*."""
    return bool(_IDENTIFIER.match(name)) and name not in set(reserved)


def format_name(value: Any, reserved: Iterable[str] = ()) -> str:
    """Return the identifier form an emitter would use for an enum value.

    Two values with the same formatted name would collide as enum members,
    which is why the normalizer deduplicates enums by this identity rather
    than by raw equality.

    Args:
        value: The enum value (string, number, or anything JSON-serialisable).
        reserved: Words that must be escaped with a ``$`` prefix.

    Returns:
        The formatted identifier.

    Example::

        format_name("foo-bar") == format_name("foo_bar")  # True
        format_name(-3)  # '$_3'
    """
    if isinstance(value, str) and value in set(reserved):
        return f"${value}"
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return f"$_{abs(value)}" if value < 0 else f"${value}"
    if not isinstance(value, str):
        return json.dumps(value, sort_keys=True)

    if _STARTS_WITH_NUMBER.match(value):
        leading = re.match(r"^-?\d+", value)
        if leading and int(leading.group(0)) < 0:
            return f"$_{abs(int(leading.group(0)))}"
        return f"${value}"

    def _replace(match: re.Match[str]) -> str:
        text = match.group(0)
        if text == "-" and match.start() == 0:
            return "desc_"
        if text == "+":
            return "_plus_"
        if text == "$" and match.start() == 0:
            return "$"
        return "_"

    return _ENUM_SPECIAL.sub(_replace, value).removeprefix("_").removesuffix("_")


def find_unique_schema_name(
    spec: dict[str, Any],
    initial: str,
    suffixes: Iterable[str],
    reserved: Iterable[str] = (),
) -> str:
    """Pick a component schema name that is neither taken nor reserved.

    The PascalCase form of *initial* is tried first, with a ``_`` prefix when
    it would start with a digit. Each collision appends the next suffix
    (``ListPets`` -> ``ListPetsOutput`` -> ``ListPetsOutputPayload``). Once
    the suffixes run out a counter is appended instead.

    Args:
        spec: The document whose ``components.schemas`` is checked.
        initial: Base name, in any casing.
        suffixes: Words to append on collision, in order.
        reserved: Names that may never be returned.

    Returns:
        A valid identifier not present in ``components.schemas``.
    """
    schemas = spec.setdefault("components", {}).setdefault("schemas", {})
    blocked = set(reserved)
    pending = list(suffixes)
    name = schema_identifier(initial) or "Schema"
    base = name
    counter = 1
    while name in schemas or name in blocked:
        if pending:
            name = schema_identifier(join_skip_digits([name, pending.pop(0)], " "))
            base = name
        else:
            counter += 1
            name = f"{base}{counter}"
    return name
