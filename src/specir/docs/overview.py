"""Render the overview pages of the documentation tree.

Each page is a :class:`~specir.models.NavItem` whose ``content`` is Markdown
rendered from a Jinja2 template in ``docs/templates/``:

* ``introduction`` -- title, description, version, license, servers and
  support contacts from ``info``.
* ``authorization`` -- every security scheme with its location, scheme,
  OAuth 2.0 flows and scopes, plus the global security requirements.
* ``errors`` -- every error status code returned by an operation, with the
  operations that return it and its JSON schema.
* ``pagination`` -- only when at least one operation is paginated: the
  detected strategy and parameters per operation.

The builders read the document but never modify it.
"""

from __future__ import annotations

import http
import json
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specir.compiler.content_types import is_error_status_code
from specir.compiler.operations import for_each_operation
from specir.models import CategoryItem, NavItem, OperationEntry
from specir.parser.resolver import resolve_ref

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``docs/templates/``)."""

_FLOW_TITLES = {
    "authorizationCode": "Authorization Code Flow",
    "implicit": "Implicit Flow",
    "password": "Resource Owner Password Flow",
    "clientCredentials": "Client Credentials Flow",
}

_FLOW_GRANTS = {
    "authorizationCode": "Authorization Code (for server-side applications)",
    "implicit": "Implicit (for browser-based applications)",
    "password": "Resource Owner Password Credentials",
    "clientCredentials": "Client Credentials (for machine-to-machine authentication)",
}

_LOCATIONS = {"header": "HTTP Header", "query": "Query Parameter", "cookie": "Cookie"}

_PAGINATION_PARAMS = {
    "offset": ("offsetParamName", "limitParamName"),
    "page": ("pageNumberParamName", "pageSizeParamName"),
    "cursor": ("cursorParamName", "limitParamName"),
}


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the overview templates.

    Autoescape is disabled for ``.md.j2`` templates since they produce
    Markdown, not HTML.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _render(env: Environment, template_name: str, context: dict) -> str:
    return env.get_template(template_name).render(**context)


# ---------------------------------------------------------------------------
# Introduction
# ---------------------------------------------------------------------------


def build_introduction(spec: dict[str, Any], env: Optional[Environment] = None) -> NavItem:
    """Render the introduction page from ``info`` and ``servers``."""
    env = env or _create_jinja_env()
    info = spec.get("info") or {}
    license_info = info.get("license") if isinstance(info.get("license"), dict) else None
    context = {
        "title": info.get("title") or "API Reference",
        "description": info.get("description"),
        "version": info.get("version"),
        "license": license_info if license_info and license_info.get("name") else None,
        "servers": [server for server in spec.get("servers") or [] if isinstance(server, dict)],
        "contact": info.get("contact") if isinstance(info.get("contact"), dict) else {},
    }
    return NavItem(
        id="generated-introduction",
        title="Introduction",
        url="/introduction",
        description="API overview and getting started guide",
        content=_render(env, "introduction.md.j2", context),
    )


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


def describe_security_scheme(scheme: dict[str, Any]) -> str:
    """One-paragraph description of a security scheme."""
    scheme_type = scheme.get("type")
    if scheme_type == "apiKey":
        location = {
            "header": "HTTP header",
            "query": "query parameter",
        }.get(scheme.get("in"), "cookie")
        return (
            "API Key authentication requires you to provide an API key in the "
            f"{location} named `{scheme.get('name')}`."
        )
    if scheme_type == "http":
        http_scheme = str(scheme.get("scheme") or "").lower()
        if http_scheme == "bearer":
            text = (
                "Bearer token authentication requires you to include a bearer token "
                "in the `Authorization` header of your requests."
            )
            if scheme.get("bearerFormat"):
                text += f" The expected token format is `{scheme['bearerFormat']}`."
            return text
        if http_scheme == "basic":
            return (
                "Basic authentication requires you to provide a username and password, "
                "encoded in base64 format in the `Authorization` header."
            )
        return f"HTTP {scheme.get('scheme')} authentication is required for accessing this API."
    if scheme_type == "oauth2":
        grants = [_FLOW_GRANTS.get(flow, flow) for flow in scheme.get("flows") or {}]
        return (
            "OAuth 2.0 authentication is supported with the following grant type(s): "
            f"{', '.join(grants)}."
        )
    if scheme_type == "openIdConnect":
        return (
            "OpenID Connect authentication is used for this API. You will need to "
            "authenticate through the OpenID provider to obtain access tokens."
        )
    return (
        "This API uses a custom authentication scheme. Please refer to the API "
        "documentation for specific details."
    )


def _scheme_context(name: str, scheme: dict[str, Any]) -> dict[str, Any]:
    details: list[tuple[str, str]] = []
    flows: list[dict[str, Any]] = []
    scheme_type = scheme.get("type")
    if scheme_type == "apiKey":
        details.append(("Parameter Name", f"`{scheme.get('name')}`"))
        details.append(("Location", _LOCATIONS.get(scheme.get("in"), "Cookie")))
    elif scheme_type == "http":
        details.append(("Scheme", f"`{scheme.get('scheme')}`"))
        if scheme.get("bearerFormat"):
            details.append(("Token Format", f"`{scheme['bearerFormat']}`"))
    elif scheme_type == "openIdConnect":
        details.append(("Discovery URL", f"`{scheme.get('openIdConnectUrl')}`"))
    elif scheme_type == "oauth2":
        for flow_type, flow in (scheme.get("flows") or {}).items():
            if not isinstance(flow, dict):
                continue
            flows.append({
                "title": _FLOW_TITLES.get(flow_type, flow_type),
                "authorization_url": flow.get("authorizationUrl"),
                "token_url": flow.get("tokenUrl"),
                "refresh_url": flow.get("refreshUrl"),
                "scopes": flow.get("scopes") or {},
            })
    return {
        "name": name,
        "description": scheme.get("description") or describe_security_scheme(scheme),
        "details": details,
        "flows": flows,
    }


def _describe_requirement(requirement: dict[str, Any]) -> str:
    if not requirement:
        return "No authentication required"
    parts = []
    for name, scopes in requirement.items():
        if scopes:
            parts.append(f"`{name}` with scopes: " + ", ".join(f"`{scope}`" for scope in scopes))
        else:
            parts.append(f"`{name}`")
    return "Requires: " + " AND ".join(parts)


def build_authorization(spec: dict[str, Any], env: Optional[Environment] = None) -> NavItem:
    """Render the authorization page from ``components.securitySchemes``."""
    env = env or _create_jinja_env()
    raw_schemes = (spec.get("components") or {}).get("securitySchemes") or {}
    schemes = []
    for name, scheme in raw_schemes.items():
        resolved = resolve_ref(spec, scheme)
        if isinstance(resolved, dict):
            schemes.append(_scheme_context(name, resolved))
    requirements = [
        _describe_requirement(requirement)
        for requirement in spec.get("security") or []
        if isinstance(requirement, dict)
    ]
    return NavItem(
        id="authorization",
        title="Authorization",
        url="/authorization",
        description="Authentication methods and security schemes",
        content=_render(env, "authorization.md.j2", {"schemes": schemes, "requirements": requirements}),
    )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def status_description(status: str) -> str:
    """Standard reason phrase and meaning of an HTTP status code."""
    try:
        code = http.HTTPStatus(int(status))
    except ValueError:
        return "An error occurred while processing the request."
    return f"{code.phrase} - {code.description}."


def _status_sort_key(status: str) -> tuple[int, str]:
    return (int(status), status) if status.isdigit() else (1000, status)


def build_errors(spec: dict[str, Any], env: Optional[Environment] = None) -> NavItem:
    """Render the errors page from the error responses of every operation."""
    env = env or _create_jinja_env()
    errors: dict[str, dict[str, Any]] = {}

    def collect(entry: OperationEntry, operation: dict[str, Any]) -> None:
        label = f"{entry.method.value.upper()} {entry.path}"
        for status, response in (operation.get("responses") or {}).items():
            status = str(status)
            response = resolve_ref(spec, response)
            if not is_error_status_code(status) or not isinstance(response, dict):
                continue
            media = (response.get("content") or {}).get("application/json")
            if not isinstance(media, dict) or not media.get("schema"):
                continue
            if status not in errors:
                errors[status] = {
                    "status": status,
                    "title": response.get("description") or f"{status} Error",
                    "description": response.get("description") or status_description(status),
                    "schema": json.dumps(resolve_ref(spec, media["schema"]), indent=2),
                    "operations": [],
                }
            if label not in errors[status]["operations"]:
                errors[status]["operations"].append(label)

    for_each_operation(spec, collect)
    ordered = [errors[status] for status in sorted(errors, key=_status_sort_key)]
    return NavItem(
        id="errors",
        title="Errors",
        url="/errors",
        description="Error handling and HTTP status codes",
        content=_render(env, "errors.md.j2", {"errors": ordered}),
    )


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def build_pagination(spec: dict[str, Any], env: Optional[Environment] = None) -> Optional[NavItem]:
    """Render the pagination page, or return ``None`` if nothing is paginated."""
    env = env or _create_jinja_env()

    def row(entry: OperationEntry, operation: dict[str, Any]) -> Optional[dict[str, Any]]:
        pagination = operation.get("x-pagination")
        if not isinstance(pagination, dict) or pagination.get("type") not in _PAGINATION_PARAMS:
            return None
        return {
            "operation": operation.get("operationId") or f"{entry.method.value} {entry.path}",
            "type": pagination["type"],
            "parameters": [
                pagination[key] for key in _PAGINATION_PARAMS[pagination["type"]] if pagination.get(key)
            ],
            "items": pagination.get("items"),
            "has_more": pagination.get("hasMore"),
        }

    rows = [item for item in for_each_operation(spec, row) if item is not None]
    if not rows:
        return None
    return NavItem(
        id="generated-pagination",
        title="Pagination",
        url="/pagination",
        description="Learn how to navigate through paginated API responses",
        content=_render(
            env,
            "pagination.md.j2",
            {"operations": rows, "strategies": sorted({item["type"] for item in rows})},
        ),
    )


def build_overview_docs(spec: dict[str, Any]) -> list[CategoryItem]:
    """Build the ``Overview`` category of the documentation tree.

    Args:
        spec: A document whose operations are already tuned.

    Returns:
        A one-element list holding the ``Overview`` category.
    """
    env = _create_jinja_env()
    items = [
        build_introduction(spec, env),
        build_authorization(spec, env),
        build_errors(spec, env),
    ]
    pagination = build_pagination(spec, env)
    if pagination is not None:
        items.append(pagination)
    return [CategoryItem(id="overview", category="Overview", items=items)]
