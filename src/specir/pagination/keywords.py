"""Keyword families used to recognise pagination parameters and result keys.

Every family is an ordered list of case-insensitive patterns; the first
pattern that matches a name wins and the matched text is reported as the
parameter's *keyword*. Families are kept narrow so that one name does not
fall into two of them: the page-number family only accepts ``p``, ``page``
and compound forms such as ``page_number`` or ``currentPage``, never a bare
substring.
"""

from __future__ import annotations

import re


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


# ---------------------------------------------------------------------------
# Request parameters
# ---------------------------------------------------------------------------

OFFSET_PARAM_PATTERNS = _compile(
    r"\boffset\b",
    r"\bskip\b",
    r"\bstart(?:ing_at|_index)?\b",
    r"\bfrom\b",
)

GENERIC_LIMIT_PARAM_PATTERNS = _compile(
    r"\blimit\b",
    r"\bcount\b",
    r"\b(?:page_?)?size\b",
    r"\bmax_results\b",
    r"\bnum_results\b",
    r"\bshow\b",
    r"\bper_?page\b",
    r"\bper-page\b",
    r"\btake\b",
)

PAGE_NUMBER_PATTERNS = _compile(
    r"^p$",
    r"^(current)?_?page(_?)(?:number|no|num|idx|index)?\b",
)

PAGE_SIZE_PATTERNS = _compile(
    r"\bpage_?size\b",
    r"^size$",
    r"\blimit\b",
    r"\bcount\b",
    r"\bper_?page\b",
    r"\bper-page\b",
    r"\bnum_?(?:items|records|results)\b",
    r"\bresults_?per_?page\b",
)

CURSOR_PATTERNS = _compile(
    r"\bmarker\b",
    r"\bcursor\b",
    r"\bafter(?:_?cursor)?\b",
    r"\bbefore(?:_?cursor)?\b",
    r"\b(next|prev|previous)_?(?:page_?)?token\b",
    r"\b(next|prev|previous)_?cursor\b",
    r"\bcontinuation(?:_?token)?\b",
    r"\bpage(?:_?(token|id))?\b",
    r"\bstart_?(?:key|cursor|token|after)\b",
)

CURSOR_LIMIT_PATTERNS = _compile(
    r"\blimit\b",
    r"\bcount\b",
    r"\bsize\b",
    r"\bfirst\b",
    r"\blast\b",
    r"\bpage_?size\b",
    r"\bnum_?(?:items|records|results)\b",
    r"\bmax_?items\b",
    r"\btake\b",
)

# ---------------------------------------------------------------------------
# Response keys
# ---------------------------------------------------------------------------

ITEMS_TOP_TIER_KEYWORDS = frozenset({"data", "items", "results", "value"})

ITEMS_OTHER_KEYWORDS = frozenset({
    "articles",
    "bookings",
    "collection",
    "content",
    "documents",
    "entities",
    "events",
    "list",
    "orders",
    "payload",
    "posts",
    "products",
    "records",
    "users",
})

ITEMS_SECONDARY_KEYWORDS = frozenset({"elements", "entries", "rows"})

# Plural names that rarely hold the page items.
PLURAL_DEPRIORITIZED = frozenset({
    "actions",
    "address",
    "attributes",
    "categories",
    "cookies",
    "credentials",
    "details",
    "diagnostics",
    "errors",
    "features",
    "headers",
    "includes",
    "links",
    "meta",
    "metadata",
    "options",
    "params",
    "permissions",
    "properties",
    "series",
    "settings",
    "statistics",
    "status",
    "success",
    "tags",
    "warnings",
})

# Exact matches are tested against the lower-cased name without ``-``/``_``.
HAS_MORE_PRIMARY_POSITIVE_EXACT = frozenset({
    "additionalitems",
    "canloadmore",
    "fetchmore",
    "hasadditional",
    "hasadditionalresults",
    "hasmore",
    "hasnext",
    "hasnextpage",
    "moreitems",
    "moreitemsavailable",
    "moreresultsavailable",
    "nextpage",
    "nextpageavailable",
    "nextpageexists",
})

HAS_MORE_SECONDARY_POSITIVE_EXACT = frozenset({"more", "next"})

HAS_MORE_PRIMARY_INVERTED_EXACT = frozenset({
    "allitemsloaded",
    "completed",
    "endoflist",
    "endofresults",
    "iscomplete",
    "islast",
    "lastpage",
    "nomoredata",
    "nomoreitems",
})

HAS_MORE_POSITIVE_PATTERNS = _compile(
    r"\bhas_?more\b",
    r"\bhas_?next\b",
    r"\bmore_?items\b",
    r"\bnext_?page\b",
    r"\badditional\b",
    r"\bcontinuation\b",
    r"\bmore_?results\b",
    r"\bpage_?available\b",
    r"\bnext(?:_?(page|marker))?\b",
)

HAS_MORE_INVERTED_PATTERNS = _compile(
    r"\bis_?last\b",
    r"\blast_?page\b",
    r"\bend_?of_?(data|results|list|items|stream)\b",
    r"\bno_?more_?(items|data|results)?\b",
    r"\ball_?(items_?)?loaded\b",
    r"\bis_?complete\b",
)
