"""Classify an operation's pagination strategy.

:func:`guess_pagination` is a pure function of the operation's parameters,
its JSON request body and its JSON success response. It first checks that
the response looks like a page (an items array and a has-more flag), then
runs the pagination rules in order; the first rule that matches wins:

1. :class:`OffsetRule` -- an offset parameter plus a different limit parameter.
2. :class:`PageRule` -- a page-number parameter plus a page-size parameter.
3. :class:`CursorRule` -- a cursor parameter plus a limit parameter.

Because the offset rule needs an offset parameter before it looks for a
limit, ``?page=&limit=`` is always classified as page pagination.

When nothing matches the result is a :class:`~specir.models.NoPagination`
whose ``reason`` says where detection stopped.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, NamedTuple, Optional

from specir.compiler.schema import coerce_types
from specir.models import (
    CursorPagination,
    NoPagination,
    OffsetPagination,
    PagePagination,
    PaginationGuess,
)
from specir.pagination.keywords import (
    CURSOR_LIMIT_PATTERNS,
    CURSOR_PATTERNS,
    GENERIC_LIMIT_PARAM_PATTERNS,
    OFFSET_PARAM_PATTERNS,
    PAGE_NUMBER_PATTERNS,
    PAGE_SIZE_PATTERNS,
)
from specir.pagination.result import Resolver, get_has_more_name, get_items_name, passthrough


class Candidate(NamedTuple):
    """A request input that might carry pagination state."""

    name: str
    types: list[str]

    @property
    def numeric(self) -> bool:
        """True for integer/number inputs and for inputs without a type."""
        return not self.types or "integer" in self.types or "number" in self.types


def find_param_and_keyword(
    candidates: Sequence[Candidate],
    patterns: Sequence[re.Pattern[str]],
    exclude: Optional[str] = None,
) -> Optional[tuple[Candidate, str]]:
    """Return the first candidate matching any pattern, with the matched text.

    Candidates are tried in order, and for each candidate the patterns in
    order. The candidate named *exclude* is skipped.
    """
    for candidate in candidates:
        if candidate.name == exclude:
            continue
        for pattern in patterns:
            match = pattern.search(candidate.name)
            if match:
                return candidate, match.group(0)
    return None


class PaginationRule(ABC):
    """One pagination strategy: a primary parameter plus a size parameter."""

    min_candidates: int = 0
    numeric_only: bool = False

    @abstractmethod
    def bind(
        self,
        primary: tuple[Candidate, str],
        size: tuple[Candidate, str],
        items: str,
        has_more: str,
    ) -> PaginationGuess:
        """Build the result model from the two matched parameters."""

    @property
    @abstractmethod
    def primary_patterns(self) -> Sequence[re.Pattern[str]]:
        """Patterns for the parameter that selects the page."""

    @property
    @abstractmethod
    def size_patterns(self) -> Sequence[re.Pattern[str]]:
        """Patterns for the parameter that sizes the page."""

    def match(
        self,
        candidates: Sequence[Candidate],
        items: str,
        has_more: str,
    ) -> Optional[PaginationGuess]:
        """Return the bound strategy if *candidates* fit this rule, else None."""
        if self.numeric_only:
            candidates = [candidate for candidate in candidates if candidate.numeric]
        if len(candidates) < self.min_candidates:
            return None
        primary = find_param_and_keyword(candidates, self.primary_patterns)
        if primary is None:
            return None
        size = find_param_and_keyword(candidates, self.size_patterns, exclude=primary[0].name)
        if size is None:
            return None
        return self.bind(primary, size, items, has_more)


class OffsetRule(PaginationRule):
    numeric_only = True
    primary_patterns = OFFSET_PARAM_PATTERNS
    size_patterns = GENERIC_LIMIT_PARAM_PATTERNS

    def bind(
        self,
        primary: tuple[Candidate, str],
        size: tuple[Candidate, str],
        items: str,
        has_more: str,
    ) -> PaginationGuess:
        return OffsetPagination(
            items=items,
            has_more=has_more,
            offset_param_name=primary[0].name,
            offset_keyword=primary[1],
            limit_param_name=size[0].name,
            limit_keyword=size[1],
        )


class PageRule(PaginationRule):
    min_candidates = 2
    numeric_only = True
    primary_patterns = PAGE_NUMBER_PATTERNS
    size_patterns = PAGE_SIZE_PATTERNS

    def bind(
        self,
        primary: tuple[Candidate, str],
        size: tuple[Candidate, str],
        items: str,
        has_more: str,
    ) -> PaginationGuess:
        return PagePagination(
            items=items,
            has_more=has_more,
            page_number_param_name=primary[0].name,
            page_number_keyword=primary[1],
            page_size_param_name=size[0].name,
            page_size_keyword=size[1],
        )


class CursorRule(PaginationRule):
    min_candidates = 2
    primary_patterns = CURSOR_PATTERNS
    size_patterns = CURSOR_LIMIT_PATTERNS

    def bind(
        self,
        primary: tuple[Candidate, str],
        size: tuple[Candidate, str],
        items: str,
        has_more: str,
    ) -> PaginationGuess:
        return CursorPagination(
            items=items,
            has_more=has_more,
            cursor_param_name=primary[0].name,
            cursor_keyword=primary[1],
            limit_param_name=size[0].name,
            limit_keyword=size[1],
        )


DEFAULT_RULES: tuple[PaginationRule, ...] = (OffsetRule(), PageRule(), CursorRule())


def _candidates(
    parameters: Sequence[dict[str, Any]],
    body: Optional[dict[str, Any]],
    resolve: Resolver,
) -> list[Candidate]:
    candidates = []
    for parameter in parameters:
        if parameter.get("in", "query") != "query" or not parameter.get("name"):
            continue
        schema = resolve(parameter.get("schema")) or {}
        candidates.append(Candidate(parameter["name"], coerce_types(schema)))
    for name, schema in ((body or {}).get("properties") or {}).items():
        candidates.append(Candidate(name, coerce_types(resolve(schema) or {})))
    return candidates


def guess_pagination(
    parameters: Sequence[dict[str, Any]],
    response: Optional[dict[str, Any]],
    body: Optional[dict[str, Any]] = None,
    rules: Sequence[PaginationRule] = DEFAULT_RULES,
    resolve: Resolver = passthrough,
) -> PaginationGuess:
    """Classify the pagination strategy of one operation.

    Args:
        parameters: The operation's resolved parameters. Only query
            parameters are pagination candidates.
        response: The JSON success response schema, or ``None``.
        body: The JSON request body schema; its property names are
            candidates too.
        rules: Pagination rules, tried in order.
        resolve: Dereferences ``$ref`` schemas found along the way.

    Returns:
        The first matching strategy, or a ``NoPagination`` with its reason.

    Example::

        guess_pagination(
            [{"name": "page", "in": "query"}, {"name": "limit", "in": "query"}],
            {"type": "object", "properties": {
                "items": {"type": "array"}, "hasMore": {"type": "boolean"}}},
        )
        # PagePagination(page_number_param_name='page', page_size_param_name='limit', ...)
    """
    body_properties = (body or {}).get("properties") or {}
    if not parameters and not body_properties:
        return NoPagination(reason="no parameters")
    if not response:
        return NoPagination(reason="no response")
    properties = response.get("properties")
    if not properties:
        return NoPagination(reason="empty response")

    items = get_items_name(properties, resolve)
    if items is None:
        return NoPagination(reason="no items key")
    rest = {name: schema for name, schema in properties.items() if name != items}
    has_more = get_has_more_name(rest, resolve)
    if has_more is None:
        return NoPagination(reason="no hasMore key")

    candidates = _candidates(parameters, body, resolve)
    for rule in rules:
        guess = rule.match(candidates, items, has_more)
        if guess is not None:
            return guess
    return NoPagination(reason="no pagination")
