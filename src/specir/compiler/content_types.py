"""Classification helpers for media types and response status codes."""

from __future__ import annotations

from typing import Optional, Union


def _media_type(content_type: Optional[str]) -> str:
    """Lower-cased media type without parameters (``; charset=...``)."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def parse_json_content_type(content_type: Optional[str]) -> Optional[str]:
    """Return the JSON flavour of *content_type*, or ``None`` if it is not JSON.

    Example::

        parse_json_content_type("application/json; charset=utf-8")  # 'json'
        parse_json_content_type("application/problem+json")         # 'json'
        parse_json_content_type("text/html")                        # None
    """
    media = _media_type(content_type)
    if media.endswith("/json"):
        return media.split("/", 1)[1]
    if media.endswith("+json"):
        return media.rsplit("+", 1)[1]
    return None


def is_text_content_type(content_type: Optional[str]) -> bool:
    """Return True for ``text/*`` media types."""
    return _media_type(content_type).startswith("text/")


def is_sse_content_type(content_type: Optional[str]) -> bool:
    """Return True for server-sent event streams."""
    return _media_type(content_type) == "text/event-stream"


def is_success_status_code(status: Union[str, int]) -> bool:
    """Return True for 2xx status codes, including the ``2XX`` wildcard."""
    text = str(status).strip().upper()
    if text == "2XX":
        return True
    try:
        code = int(text)
    except ValueError:
        return False
    return 200 <= code < 300


def is_error_status_code(status: Union[str, int]) -> bool:
    """Return True for every status that is not a success (``default`` included)."""
    return not is_success_status_code(status)
