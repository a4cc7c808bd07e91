"""Pagination detection for tuned operations.

See :mod:`specir.pagination.guess` for the classification rules and
:mod:`specir.pagination.result` for how the items and has-more keys are
found in a response.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Optional

from specir.models import NoPagination
from specir.pagination.guess import (
    DEFAULT_RULES,
    CursorRule,
    OffsetRule,
    PageRule,
    PaginationRule,
    guess_pagination,
)
from specir.pagination.result import get_has_more_name, get_items_name
from specir.parser.resolver import resolve_ref

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_RULES",
    "CursorRule",
    "OffsetRule",
    "PageRule",
    "PaginationRule",
    "get_has_more_name",
    "get_items_name",
    "guess_pagination",
    "to_pagination",
]


def _content_schema(
    spec: dict[str, Any],
    holder: Any,
    content_type: str,
) -> Optional[dict[str, Any]]:
    """The resolved schema of *content_type* in a response or request body."""
    holder = resolve_ref(spec, holder)
    if not isinstance(holder, dict):
        return None
    for media_type, media in (holder.get("content") or {}).items():
        if media_type.lower() == content_type and isinstance(media, dict):
            schema = resolve_ref(spec, media.get("schema"))
            return schema if isinstance(schema, dict) else None
    return None


def to_pagination(spec: dict[str, Any], operation: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Return the ``x-pagination`` value for a tuned operation.

    A pagination block already present on the operation is kept as is.
    Otherwise the strategy is guessed from the operation's parameters, its
    ``application/json`` request body and its ``200`` JSON response.

    Returns:
        The guess serialized with camelCase keys, or ``None`` when the
        operation is not paginated.
    """
    existing = operation.get("x-pagination")
    if existing:
        return existing

    response = _content_schema(spec, (operation.get("responses") or {}).get("200"), "application/json")
    body = _content_schema(spec, operation.get("requestBody"), "application/json")
    guess = guess_pagination(
        operation.get("parameters") or [],
        response,
        body,
        resolve=functools.partial(resolve_ref, spec),
    )
    if isinstance(guess, NoPagination):
        logger.debug("%s is not paginated: %s", operation.get("operationId"), guess.reason)
        return None
    return guess.model_dump(by_alias=True, exclude_none=True)
