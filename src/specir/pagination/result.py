"""Find the items key and the has-more key of a paginated response.

A paginated response is an object with one array property holding the page
(``data``, ``items``, ``results``, ...) and one boolean property telling the
client whether to fetch another page (``has_more``, ``isLast``, ...). Both
are found by ranking property names against the keyword families in
:mod:`specir.pagination.keywords`; lower ranks win and ties keep property
order.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import inflect

from specir.compiler.schema import coerce_types
from specir.pagination.keywords import (
    HAS_MORE_INVERTED_PATTERNS,
    HAS_MORE_POSITIVE_PATTERNS,
    HAS_MORE_PRIMARY_INVERTED_EXACT,
    HAS_MORE_PRIMARY_POSITIVE_EXACT,
    HAS_MORE_SECONDARY_POSITIVE_EXACT,
    ITEMS_OTHER_KEYWORDS,
    ITEMS_SECONDARY_KEYWORDS,
    ITEMS_TOP_TIER_KEYWORDS,
    PLURAL_DEPRIORITIZED,
)


Resolver = Callable[[Any], Any]

_inflect = inflect.engine()


def passthrough(value: Any) -> Any:
    return value


def is_plural(word: str) -> bool:
    """Return True if *word* reads as an English plural noun."""
    return bool(word) and _inflect.singular_noun(word) is not False


def _items_rank(name: str) -> Optional[int]:
    lowered = name.lower()
    if lowered in ITEMS_TOP_TIER_KEYWORDS:
        return 2
    if lowered in ITEMS_OTHER_KEYWORDS:
        return 3
    if lowered in ITEMS_SECONDARY_KEYWORDS:
        return 4
    if is_plural(name):
        return 6 if lowered in PLURAL_DEPRIORITIZED else 5
    return None


def get_items_name(
    properties: dict[str, Any],
    resolve: Resolver = passthrough,
) -> Optional[str]:
    """Pick the array property most likely to hold the page items.

    Args:
        properties: The response object's ``properties``.
        resolve: Dereferences property schemas that are ``$ref`` objects.

    Returns:
        The property name, or ``None`` when there is no array property. With
        several arrays and no keyword or plural match, the first array wins.
    """
    arrays = [
        name for name, schema in properties.items()
        if "array" in coerce_types(resolve(schema) or {})
    ]
    if not arrays:
        return None
    if len(arrays) == 1:
        return arrays[0]

    best: Optional[str] = None
    best_rank: Optional[int] = None
    for name in arrays:
        rank = _items_rank(name)
        if rank is not None and (best_rank is None or rank < best_rank):
            best, best_rank = name, rank
    return best or arrays[0]


def _has_more_rank(name: str) -> Optional[int]:
    normalized = name.lower().replace("-", "").replace("_", "")
    if normalized in HAS_MORE_PRIMARY_POSITIVE_EXACT:
        return 1
    if normalized in HAS_MORE_SECONDARY_POSITIVE_EXACT:
        return 2
    if any(pattern.search(name) for pattern in HAS_MORE_POSITIVE_PATTERNS):
        return 3
    if normalized in HAS_MORE_PRIMARY_INVERTED_EXACT:
        return 4
    if any(pattern.search(name) for pattern in HAS_MORE_INVERTED_PATTERNS):
        return 5
    return None


def _guess_has_more(properties: dict[str, Any], resolve: Resolver) -> Optional[str]:
    booleans = [
        name for name, schema in properties.items()
        if "boolean" in coerce_types(resolve(schema) or {})
    ]
    if len(booleans) == 1:
        return booleans[0]

    best: Optional[str] = None
    best_rank: Optional[int] = None
    for name in booleans:
        rank = _has_more_rank(name)
        if rank is not None and (best_rank is None or rank < best_rank):
            best, best_rank = name, rank
    return best


def get_has_more_name(
    properties: dict[str, Any],
    resolve: Resolver = passthrough,
    _visited: Optional[set[int]] = None,
) -> Optional[str]:
    """Pick the boolean property signalling that another page exists.

    Top-level booleans are ranked first. If none qualifies, nested object
    properties are searched depth-first and the result is returned as a
    dotted path (``meta.has_more``).

    Args:
        properties: The response object's ``properties`` (without the items
            key).
        resolve: Dereferences property schemas that are ``$ref`` objects.

    Returns:
        The property name or dotted path, or ``None``.
    """
    visited = _visited if _visited is not None else set()
    if id(properties) in visited:
        return None
    visited.add(id(properties))

    found = _guess_has_more(properties, resolve)
    if found:
        return found

    for name, schema in properties.items():
        resolved = resolve(schema)
        if not isinstance(resolved, dict) or "object" not in coerce_types(resolved):
            continue
        nested = resolved.get("properties")
        if not isinstance(nested, dict) or not nested:
            continue
        inner = get_has_more_name(nested, resolve, visited)
        if inner:
            return f"{name}.{inner}"
    return None
