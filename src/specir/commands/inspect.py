"""Inspection commands -- tabular views of the compiled IR.

``specir operations``, ``specir schemas`` and ``specir pagination`` compile
the given document with the resolved build options and print one table each.
Every table honours ``--json`` and ``--plain``.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specir.commands.build import compile_source, fail
from specir.exceptions import SpecirError
from specir.output import get_output, info

_PAGINATION_BINDINGS = {
    "offset": ("offsetParamName", "limitParamName"),
    "page": ("pageNumberParamName", "pageSizeParamName"),
    "cursor": ("cursorParamName", "limitParamName"),
}

_SOURCE = typer.Argument(..., help="OpenAPI document: file path, URL, or '-' for stdin.")


def _compile(source: str) -> dict[str, Any]:
    from specir.config import resolve_config

    try:
        return compile_source(source, resolve_config())
    except SpecirError as exc:
        raise fail(exc) from None


def _operation_rows(document: dict[str, Any]) -> list[tuple[str, str, dict[str, Any]]]:
    from specir.compiler.operations import for_each_operation

    return for_each_operation(
        document, lambda entry, operation: (entry.method.value.upper(), entry.path, operation)
    )


def operations_command(source: str = _SOURCE) -> None:
    """List every operation with its ID, tag and pagination type.

    Example::

        specir operations openapi.yaml
        specir --json operations openapi.yaml | jq '.[].operationId'
    """
    document = _compile(source)
    rows: list[list[str]] = []
    for method, path, operation in _operation_rows(document):
        tags = operation.get("tags") or []
        pagination = operation.get("x-pagination") or {}
        rows.append([
            method,
            path,
            operation["operationId"],
            tags[0] if tags else "-",
            pagination.get("type", "-"),
        ])
    get_output().print_table(
        ["Method", "Path", "OperationId", "Tag", "Pagination"],
        rows,
        title=f"Operations ({len(rows)})",
    )


def _schema_type(schema: Any) -> str:
    if not isinstance(schema, dict):
        return "unknown"
    for key in ("oneOf", "anyOf"):
        if key in schema:
            return key
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return " | ".join(str(item) for item in schema_type)
    return str(schema_type or ("object" if "properties" in schema else "any"))


def schemas_command(source: str = _SOURCE) -> None:
    """List every component schema with its type and union variant names.

    Example::

        specir schemas openapi.yaml
    """
    document = _compile(source)
    schemas = document["components"]["schemas"]
    if not schemas:
        info("No schemas defined in this document.")
        return

    rows: list[list[str]] = []
    for name, schema in schemas.items():
        variants = schema.get("x-variants", []) if isinstance(schema, dict) else []
        rows.append([
            name,
            _schema_type(schema),
            ", ".join(variant["name"] for variant in variants) or "-",
        ])
    get_output().print_table(
        ["Schema", "Type", "Variants"], rows, title=f"Schemas ({len(rows)})"
    )


def pagination_command(source: str = _SOURCE) -> None:
    """List paginated operations and their parameter/response bindings.

    Example::

        specir pagination openapi.yaml
    """
    document = _compile(source)
    rows: list[list[str]] = []
    for method, path, operation in _operation_rows(document):
        pagination: Optional[dict[str, Any]] = operation.get("x-pagination")
        if not pagination or pagination.get("type") not in _PAGINATION_BINDINGS:
            continue
        params = [pagination.get(key, "-") for key in _PAGINATION_BINDINGS[pagination["type"]]]
        rows.append([
            operation["operationId"],
            f"{method} {path}",
            pagination["type"],
            ", ".join(params),
            pagination.get("items", "-"),
            pagination.get("hasMore", "-"),
        ])
    if not rows:
        info("No paginated operations detected.")
        return
    get_output().print_table(
        ["OperationId", "Endpoint", "Type", "Parameters", "Items", "HasMore"],
        rows,
        title=f"Paginated operations ({len(rows)})",
    )
