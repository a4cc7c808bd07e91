"""Resource tags for operations that declare none.

SDKs group operations into resource classes (``client.users.list()``) by tag.
When an operation has no ``tags`` entry a tag is derived from its path or
``operationId`` by an ordered list of rules; the first rule that produces a
name wins:

1. The last path segment that is not a parameter, a version (``v2``), or an
   ``@``-alias (``/users/@me/guilds`` -> ``guilds``).
2. The noun in the ``operationId`` after a common verb prefix
   (``getUserPreferences`` -> ``userPreferences``).
3. The first path segment with a leading ``@`` stripped.

If none applies the tag is ``unknown`` and a warning is logged.

Each rule is a plain function of :class:`TagContext`, so callers can pass
their own rule list to :func:`determine_generic_tag`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, NamedTuple, Optional, Sequence

from specir.compiler.naming import camelcase
from specir.models import NamingConfig

logger = logging.getLogger(__name__)

COMMON_VERBS = frozenset({
    "add",
    "check",
    "create",
    "delete",
    "do",
    "find",
    "get",
    "list",
    "make",
    "patch",
    "post",
    "put",
    "remove",
    "search",
    "send",
    "set",
    "update",
})
"""Verb prefixes stripped from an ``operationId`` to find its noun."""

_VERSION_SEGMENT = re.compile(r"^[vV]\d+$")
_LEADING_DIGIT = re.compile(r"^\d")


class TagContext(NamedTuple):
    """Inputs shared by every tag rule."""

    path: str
    operation_id: str
    candidates: list[str]
    """Path segments that are neither parameters nor versions."""


TagRule = Callable[[TagContext], Optional[str]]


def sanitize_tag(tag: str, naming: Optional[NamingConfig] = None) -> str:
    """Make *tag* safe to use as an identifier in generated code.

    A leading digit gets a ``_`` prefix; reserved words and runtime names get
    a ``_`` suffix. Otherwise parentheses and doubled dashes are removed and
    whitespace runs collapse to one space.

    Example::

        sanitize_tag("public")   # 'public_'
        sanitize_tag("2fa")      # '_2fa'
    """
    naming = naming or NamingConfig()
    if _LEADING_DIGIT.match(tag):
        return f"_{tag}"
    if tag in naming.keywords or tag in naming.sdk_names:
        return f"{tag}_"
    cleaned = tag.replace("(", "").replace(")", "").replace("--", "")
    return " ".join(cleaned.split())


def last_path_segment(context: TagContext) -> Optional[str]:
    for segment in reversed(context.candidates):
        if not segment.startswith("@"):
            return camelcase(segment) or None
    return None


def operation_id_noun(context: TagContext) -> Optional[str]:
    operation_id = context.operation_id
    if not operation_id:
        return None

    spaced = re.sub(r"([a-z])([A-Z])", r"\1_\2", operation_id)
    spaced = re.sub(r"([A-Z])([A-Z][a-z])", r"\1_\2", spaced)
    spaced = re.sub(r"([a-zA-Z])(\d)", r"\1_\2", spaced)
    spaced = re.sub(r"(\d)([a-zA-Z])", r"\1_\2", spaced)
    parts = [part for part in re.split(r"[_\-\s]+", spaced.lower()) if part]
    if not parts:
        return None

    can_fall_back = bool(context.candidates)
    first = parts[0]
    first_is_verb = first in COMMON_VERBS
    only_a_verb = first_is_verb and len(parts) == 1

    if only_a_verb and can_fall_back:
        return None

    if first_is_verb and len(parts) > 1:
        remainder = operation_id[len(first):].lstrip("_- ")
        noun = camelcase(remainder) or camelcase("_".join(parts[1:]))
        if noun:
            return noun

    return camelcase(operation_id) or None


def first_path_segment(context: TagContext) -> Optional[str]:
    if not context.candidates:
        return None
    return camelcase(context.candidates[0].removeprefix("@")) or None


DEFAULT_TAG_RULES: tuple[TagRule, ...] = (
    last_path_segment,
    operation_id_noun,
    first_path_segment,
)


def determine_generic_tag(
    path: str,
    operation: dict[str, Any],
    naming: Optional[NamingConfig] = None,
    rules: Sequence[TagRule] = DEFAULT_TAG_RULES,
) -> str:
    """Derive a tag for an operation without one.

    Args:
        path: The operation's path, in ``{param}`` form.
        operation: The operation object (only ``operationId`` is read).
        naming: Reserved-word tables for :func:`sanitize_tag`.
        rules: Ordered tag rules; the first non-empty result wins.

    Returns:
        A sanitized camelCase tag, or ``"unknown"``.
    """
    candidates = [
        segment
        for segment in path.split("/")
        if segment
        and not segment.startswith("{")
        and not segment.endswith("}")
        and not _VERSION_SEGMENT.match(segment)
    ]
    context = TagContext(
        path=path,
        operation_id=operation.get("operationId") or "",
        candidates=candidates,
    )
    for rule in rules:
        tag = rule(context)
        if tag:
            return sanitize_tag(tag, naming)

    logger.warning(
        "Could not determine a tag for path %r (operationId %r); using 'unknown'",
        path,
        context.operation_id,
    )
    return "unknown"


def default_tag(
    operation: dict[str, Any],
    path: str,
    naming: Optional[NamingConfig] = None,
) -> str:
    """The first declared tag (sanitized), else :func:`determine_generic_tag`."""
    tags = operation.get("tags") or []
    if tags and isinstance(tags[0], str) and tags[0].strip():
        return sanitize_tag(tags[0], naming)
    return determine_generic_tag(path, operation, naming)
