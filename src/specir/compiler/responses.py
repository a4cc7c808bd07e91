"""Give every success response a named output schema.

Each response body is moved to a component named after the operation
(``ListPets`` for ``200``, ``ListPets201`` for other statuses) and the
media type's schema is replaced with a ``$ref``. Bodies that already reference
a component keep it and only mark it with ``x-responsebody``.

Error responses are left alone unless ``ResponsesConfig.flatten_error_responses``
is set, since clients usually map them to a shared error type.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any, Optional

from specir.compiler.content_types import (
    is_success_status_code,
    is_sse_content_type,
    is_text_content_type,
    parse_json_content_type,
)
from specir.compiler.expander import expand_spec
from specir.compiler.naming import find_unique_schema_name, pascalcase
from specir.models import ResponsesConfig
from specir.parser.resolver import is_ref, parse_ref, resolve_ref, schema_ref

logger = logging.getLogger(__name__)

OUTPUT_SUFFIXES = ("output", "payload", "result")
STREAM_CONTENT_TYPE = "application/octet-stream"


def resolve_responses(
    spec: dict[str, Any],
    operation_id: str,
    operation: dict[str, Any],
    config: Optional[ResponsesConfig] = None,
    reserved: Iterable[str] = (),
) -> dict[str, Any]:
    """Build the tuned ``responses`` map of an operation.

    Args:
        spec: The document; output schemas are registered in
            ``components.schemas``.
        operation_id: The operation's final ID, used to name outputs.
        operation: The raw operation object. It is not modified.
        config: Response options; defaults keep only success bodies.
        reserved: Component names that must not be used.

    Returns:
        Deep copies of the operation's responses (``default`` dropped), with a
        synthetic ``200`` added when no success response is declared.
    """
    config = config or ResponsesConfig()
    responses: dict[str, Any] = {}
    for status, response in (operation.get("responses") or {}).items():
        status = str(status)
        if status == "default":
            continue
        resolved = resolve_ref(spec, response)
        responses[status] = copy.deepcopy(resolved) if isinstance(resolved, dict) else {}

    if not any(is_success_status_code(status) for status in responses):
        responses["200"] = {
            "description": "OK",
            "content": {"application/json": {"schema": {}}},
        }

    for status, response in responses.items():
        if not config.flatten_error_responses and not is_success_status_code(status):
            continue
        if status == "200":
            output_name = find_unique_schema_name(spec, operation_id, OUTPUT_SUFFIXES, reserved)
        else:
            output_name = find_unique_schema_name(
                spec, pascalcase(operation_id) + status, (), reserved
            )
        _tune_response(spec, operation_id, response, output_name, reserved)

    return responses


def _tune_response(
    spec: dict[str, Any],
    operation_id: str,
    response: dict[str, Any],
    output_name: str,
    reserved: Iterable[str],
) -> None:
    schemas = spec["components"]["schemas"]
    if not response.get("content"):
        response["content"] = {STREAM_CONTENT_TYPE: {}}
    response["x-response-name"] = output_name

    component: Optional[dict[str, Any]] = None
    for content_type, media in response["content"].items():
        if not isinstance(media, dict):
            media = response["content"][content_type] = {}
        media_schema = media.get("schema")

        if is_ref(media_schema):
            target = resolve_ref(spec, media_schema)
            if isinstance(target, dict):
                target["x-responsebody"] = True
            response["x-response-name"] = parse_ref(media_schema["$ref"]).model
            continue
        if is_sse_content_type(content_type):
            continue

        component = component if component is not None else {}
        if parse_json_content_type(content_type):
            if not media_schema:
                component = {"type": "object", "additionalProperties": True}
        else:
            component["x-stream"] = not is_text_content_type(content_type)
        component.update(media_schema or {})
        component["x-responsebody"] = True
        component["x-response-group"] = operation_id
        schemas[output_name] = component
        media["schema"] = schema_ref(output_name)

    if component is not None:
        logger.debug("Registered response schema %s for %s", output_name, operation_id)
        expand_spec(spec, {output_name: component}, reserved)
