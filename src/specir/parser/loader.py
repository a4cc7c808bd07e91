"""Load OpenAPI documents from a URL, local file, or stdin.

The compiler itself only ever sees an already-materialized dict; this module
is the thin I/O layer in front of it. JSON and YAML are both accepted, with
the format picked from the file extension or ``Content-Type`` header and
content sniffing as the fallback.

The two public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version
  string, rejecting Swagger 2.x and non-3.x documents.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from specir.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


def load_spec(source: Union[str, Path]) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin (``'-'``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``'-'`` for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if isinstance(source, Path):
        return _load_from_file(source)
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(Path(source))


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin."""
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, source="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S).

    Args:
        url: The URL to fetch. Redirects are followed.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: On HTTP errors, network errors, or unparsable content.
    """
    logger.debug("Fetching OpenAPI document from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint, source=url)


def _load_from_file(path: Path) -> dict[str, Any]:
    """Load a document from a local file.

    Raises:
        SpecParseError: If the file is missing, unreadable, empty, or
            unparsable.
    """
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in _YAML_SUFFIXES else ""
    return _parse_content(content, hint=hint, source=str(path))


def _parse_content(content: str, hint: str = "", source: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    JSON is tried first unless the hint says YAML; every JSON document is
    also YAML, but the JSON parser is faster and gives sharper errors.

    Args:
        content: The raw document text.
        hint: Optional format hint (``'json'`` or ``'yaml'``).
        source: Where the content came from, for error messages.

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content is not a JSON/YAML mapping.
    """
    where = f" ({source})" if source else ""
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content), where)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON{where}: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content), where)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse spec as JSON or YAML{where}"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(result: Any, where: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object{where} (got {kind})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    OpenAPI 3.0.x and 3.1.x are supported. Later 3.x versions are accepted
    with a logged warning. Swagger 2.x and anything else is rejected.

    Args:
        spec: The parsed document.

    Returns:
        The OpenAPI version string (e.g. ``'3.0.3'``, ``'3.1.0'``).

    Raises:
        SpecParseError: If the version is missing, unsupported, or Swagger 2.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith(("3.0.", "3.1.")):
        return version_str
    if version_str.startswith("3."):
        logger.warning("OpenAPI %s is newer than 3.1; compiling anyway", version_str)
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )
