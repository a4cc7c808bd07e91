"""Turn security requirements into plain client input parameters."""

from __future__ import annotations

import logging
from typing import Any, Optional

from specir.parser.resolver import resolve_ref

logger = logging.getLogger(__name__)


def security_to_options(
    spec: dict[str, Any],
    security: list[dict[str, Any]],
    static_in: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Map security requirements to parameter objects.

    ``http`` schemes become an ``authorization`` header; ``apiKey`` schemes
    become a parameter named and located as the scheme declares. Other scheme
    types (``oauth2``, ``openIdConnect``) carry no static input and are
    ignored.

    Args:
        spec: The root document; schemes are read from
            ``components.securitySchemes``.
        security: Security requirement objects (``[{"bearerAuth": []}]``).
            An empty requirement ``{}`` marks security as optional and is
            skipped.
        static_in: Force every option into this location instead of the one
            the scheme declares.

    Returns:
        Parameter dicts with ``name``, ``in``, ``schema`` and ``example``.
    """
    schemes = (spec.get("components") or {}).get("securitySchemes") or {}
    options: list[dict[str, Any]] = []
    for requirement in security:
        if not isinstance(requirement, dict) or not requirement:
            continue
        scheme_name = next(iter(requirement))
        scheme = resolve_ref(spec, schemes.get(scheme_name))
        if not isinstance(scheme, dict):
            logger.warning("Security scheme %r is not defined; skipping", scheme_name)
            continue

        scheme_type = scheme.get("type")
        if scheme_type == "http":
            http_scheme = str(scheme.get("scheme") or "bearer")
            options.append({
                "name": "authorization",
                "in": static_in or "header",
                "schema": {"type": "string"},
                "example": (
                    '"<token>"' if http_scheme.lower() == "bearer"
                    else f"<{http_scheme}> <token>"
                ),
            })
        elif scheme_type == "apiKey":
            if not scheme.get("in") or not scheme.get("name"):
                logger.warning(
                    "apiKey security scheme %r must declare both 'in' and 'name'; skipping",
                    scheme_name,
                )
                continue
            options.append({
                "name": scheme["name"],
                "in": static_in or scheme["in"],
                "schema": {"type": "string"},
                "example": '"<api-key>"',
            })
    return options
