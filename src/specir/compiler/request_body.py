"""Give every operation a named input schema.

Clients take one input object per call. Its shape is the request body plus
every parameter (path, query, header, cookie) and every security option of
the operation, so the body schema is copied into a component named after the
operation (``CreatePetInput``) and the parameters are attached to it as
``x-properties`` entries tagged with their location in ``x-in``. Operations
without a body still get an input component, under the synthetic
``application/empty`` content type.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

from specir.compiler.expander import expand_spec
from specir.compiler.naming import find_unique_schema_name
from specir.compiler.schema import is_composite
from specir.compiler.security import security_to_options
from specir.parser.resolver import is_ref, resolve_ref, schema_ref

logger = logging.getLogger(__name__)

EMPTY_CONTENT_TYPE = "application/empty"
INPUT_SUFFIXES = ("input", "payload", "request")


def patch_parameters(
    spec: dict[str, Any],
    schema: dict[str, Any],
    parameters: list[dict[str, Any]],
    security: list[dict[str, Any]],
) -> None:
    """Attach parameters and security options to *schema* as ``x-properties``.

    Parameter schemas are resolved and copied inline; references to named
    objects and unions stay references. Required parameters are listed in
    ``x-required`` together with the body's own ``required`` properties.
    Security options are never required; the client usually supplies them
    once at construction time.
    """
    required = [name for name in schema.get("required") or [] if isinstance(name, str)]
    x_properties = schema.setdefault("x-properties", {})

    for parameter in parameters:
        name = parameter.get("name")
        if not name:
            continue
        if parameter.get("required") and name not in required:
            required.append(name)
        raw_schema = parameter.get("schema")
        param_schema = resolve_ref(spec, raw_schema) or {"type": "string"}
        if is_ref(raw_schema) and is_composite(param_schema):
            param_schema = raw_schema
        x_properties[name] = {"x-in": parameter.get("in"), **copy.deepcopy(param_schema)}

    for option in security_to_options(spec, security):
        required = [name for name in required if name != option["name"]]
        x_properties[option["name"]] = {"x-in": option["in"], **option["schema"]}

    schema["x-required"] = required


def tune_request_body(
    spec: dict[str, Any],
    operation_id: str,
    operation: dict[str, Any],
    parameters: list[dict[str, Any]],
    security: list[dict[str, Any]],
    reserved: Iterable[str] = (),
) -> dict[str, Any]:
    """Build the tuned ``requestBody`` of an operation.

    The body is deep-copied, so a ``requestBody`` component shared by several
    operations is never modified. Every content type points at the same
    input component; when several content types carry a schema the first
    one defines it.

    Args:
        spec: The document; the input schema is registered in
            ``components.schemas``.
        operation_id: The operation's final ID, used to name the input.
        operation: The raw operation object.
        parameters: Resolved, merged parameters of the operation.
        security: The security requirements that apply to the operation.
        reserved: Component names that must not be used.

    Returns:
        The tuned request body whose content schemas are ``$ref`` objects.
    """
    schemas = spec.setdefault("components", {}).setdefault("schemas", {})
    input_name = find_unique_schema_name(spec, operation_id, INPUT_SUFFIXES, reserved)

    body = copy.deepcopy(resolve_ref(spec, operation.get("requestBody")))
    if not isinstance(body, dict):
        body = {"required": False, "content": {}}

    content = body.get("content") or {}
    if not content:
        schema: dict[str, Any] = {"x-inputname": input_name, "x-requestbody": True}
        patch_parameters(spec, schema, parameters, security)
        schemas[input_name] = schema
        body["content"] = {EMPTY_CONTENT_TYPE: {"schema": schema_ref(input_name)}}
        expand_spec(spec, {input_name: schema}, reserved)
        return body

    for content_type, media in content.items():
        if not isinstance(media, dict):
            media = content[content_type] = {}
        if input_name not in schemas:
            media_schema = media.get("schema")
            if media_schema:
                schema = copy.deepcopy(resolve_ref(spec, media_schema))
            else:
                logger.warning(
                    "Request body schema for content type %r of %s is empty",
                    content_type,
                    operation_id,
                )
                schema = {}
            patch_parameters(spec, schema, parameters, security)
            schema["x-requestbody"] = True
            schema["x-inputname"] = input_name
            schemas[input_name] = schema
        media["schema"] = schema_ref(input_name)

    expand_spec(spec, {input_name: schemas[input_name]}, reserved)
    return body
