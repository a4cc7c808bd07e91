"""Build the tuned operation table of the IR.

Every ``path x method`` pair becomes one tuned operation with:

* a document-unique ``operationId`` (``x-fn-name`` carries the short
  function name used inside its resource class),
* a resource tag (``x-fn-group``, and ``tags`` in snake_case),
* path-level and operation-level parameters merged and resolved,
* a named input schema (:mod:`specir.compiler.request_body`),
* named output schemas (:mod:`specir.compiler.responses`),
* ``x-pagination`` when a pagination strategy is detected.

Express-style paths (``/users/:id``) are rewritten to ``/users/{id}``.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Callable, NamedTuple, Optional, TypeVar

from specir.compiler.naming import camelcase, clean_operation_id, prefix_leading_digit, snakecase
from specir.compiler.request_body import tune_request_body
from specir.compiler.responses import resolve_responses
from specir.compiler.tags import default_tag
from specir.models import GenerateConfig, HTTPMethod, OperationEntry, OperationIdStrategy
from specir.pagination import to_pagination
from specir.parser.resolver import resolve_ref

logger = logging.getLogger(__name__)

T = TypeVar("T")

HTTP_METHOD_ACTIONS: dict[str, tuple[str, str]] = {
    "get": ("get", "list"),
    "post": ("create", "create"),
    "put": ("replace", "replaceAll"),
    "patch": ("update", "updateMany"),
    "delete": ("delete", "deleteMany"),
    "head": ("exists", "checkList"),
    "options": ("options", "optionsList"),
    "trace": ("trace", "traceList"),
}
"""``method -> (single-resource action, collection action)``."""

_EXPRESS_PARAM = re.compile(r":([^/]+)")


class Resource(NamedTuple):
    """Function name and resource group of an operation."""

    name: str
    group: str


def to_openapi_path(path: str) -> str:
    """Rewrite Express-style ``:param`` segments to ``{param}``."""
    return _EXPRESS_PARAM.sub(r"{\1}", path)


# ---------------------------------------------------------------------------
# Function names
# ---------------------------------------------------------------------------


def _resource_info(path: str) -> tuple[str, bool, str]:
    """Return ``(resource name, is single resource, hierarchical name)``."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "root", False, "root"

    last = segments[-1]
    single = last.startswith("{") and last.endswith("}")
    if single:
        name = segments[-2] if len(segments) > 1 else "item"
    else:
        name = last
    hierarchy = [segment.strip("{}") for segment in segments if not segment.startswith("{")]

    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", re.sub(r"[-_]", " ", name.strip("{}")))
    hierarchical = " ".join(hierarchy) if len(hierarchy) > 1 else cleaned
    return cleaned or "resource", single, hierarchical


def to_resource(operation: dict[str, Any], path: str, method: str) -> Resource:
    """Name the SDK function for an operation.

    In order of preference: ``x-oaiMeta.path``, the cleaned ``operationId``,
    then a CRUD verb chosen by method and by whether the path ends in a
    parameter (``GET /users`` -> ``list``, ``GET /users/{id}`` -> ``get``).

    Example::

        to_resource({}, "/users/{id}", "delete")
        # Resource(name='delete', group='users')
    """
    resource_name, single, hierarchical = _resource_info(path)
    meta = operation.get("x-oaiMeta")
    if isinstance(meta, dict) and meta.get("path"):
        return Resource(name=str(meta["path"]), group=camelcase(resource_name))
    if operation.get("operationId"):
        return Resource(
            name=clean_operation_id(operation["operationId"]),
            group=camelcase(resource_name),
        )

    method = method.lower()
    single_action, collection_action = HTTP_METHOD_ACTIONS.get(method, (method, f"{method}All"))
    action = single_action if single else collection_action
    return Resource(name=camelcase(action), group=camelcase(hierarchical))


# ---------------------------------------------------------------------------
# Operation IDs
# ---------------------------------------------------------------------------


def path_operation_id(operation: dict[str, Any], path: str, method: str) -> str:
    """``camelCase(method + path words)``: ``GET /users/{id}`` -> ``getUsersId``."""
    words = re.sub(r"[/{}]", " ", path).split()
    return camelcase(" ".join([method, *words]))


def default_operation_id(operation: dict[str, Any], path: str, method: str) -> str:
    """The cleaned ``operationId``, else ``x-oaiMeta.name``, else method + path."""
    if operation.get("operationId"):
        return clean_operation_id(str(operation["operationId"]))
    meta = operation.get("x-oaiMeta")
    if isinstance(meta, dict) and meta.get("name"):
        return prefix_leading_digit(camelcase(str(meta["name"])))
    return path_operation_id(operation, path, method)


def find_unique_operation_id(
    used: set[str],
    initial: str,
    choices: list[str],
    formatter: Callable[[str], str],
) -> str:
    """Resolve an operation ID collision deterministically.

    Each collision prefixes *initial* with the next choice (tag, then
    method); once the last choice is reached it is combined with a growing
    counter. Every proposal goes through *formatter*.

    Args:
        used: IDs already taken.
        initial: The preferred ID.
        choices: Prefixes to try, in order.
        formatter: Normalises a proposal into a valid ID.

    Returns:
        An ID not in *used*.

    Example::

        find_unique_operation_id({"list"}, "list", ["pets", "get", "pets"], camelcase)
        # 'petsList'
    """
    candidate = formatter(initial)
    tried = {candidate}
    attempt = 0
    while candidate in used:
        attempt += 1
        index = min(attempt - 1, len(choices) - 1)
        prefix = choices[index] if choices else ""
        base = f"{prefix}{initial[:1].upper()}{initial[1:]}"
        if index < len(choices) - 1:
            proposal = formatter(base)
        else:
            proposal = formatter(f"{base}{attempt - len(choices) + 1}")
        if proposal in tried:
            # the formatter folded two proposals together
            proposal = f"{proposal}{attempt}"
        tried.add(proposal)
        candidate = proposal
    return candidate


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def merge_parameters(
    spec: dict[str, Any],
    path_item: dict[str, Any],
    operation: dict[str, Any],
) -> list[dict[str, Any]]:
    """Resolve and merge path-level and operation-level parameters.

    Parameters are identified by ``(name, in)``; an operation-level parameter
    replaces the path-level one with the same identity.
    """
    merged: dict[tuple[Any, Any], dict[str, Any]] = {}
    for parameter in [*(path_item.get("parameters") or []), *(operation.get("parameters") or [])]:
        resolved = resolve_ref(spec, parameter)
        if not isinstance(resolved, dict):
            continue
        merged[(resolved.get("name"), resolved.get("in"))] = copy.deepcopy(resolved)
    return list(merged.values())


def _operation_id_strategy(config: GenerateConfig) -> Callable[[dict[str, Any], str, str], str]:
    if config.operation_id is not None:
        return config.operation_id
    if config.operation_id_strategy == OperationIdStrategy.PATH:
        return path_operation_id
    return default_operation_id


def _formatter(
    strategy: Callable[[dict[str, Any], str, str], str],
    operation: dict[str, Any],
    path: str,
    method: str,
) -> Callable[[str], str]:
    """Format collision proposals the way *strategy* formats explicit IDs."""
    if strategy is path_operation_id:
        return clean_operation_id
    return lambda candidate: strategy({**operation, "operationId": candidate}, path, method)


def build_operations(
    spec: dict[str, Any],
    config: Optional[GenerateConfig] = None,
) -> dict[str, Any]:
    """Replace ``spec["paths"]`` with tuned operations.

    Args:
        spec: The normalized, expanded document. Input and output schemas
            are registered in ``components.schemas``.
        config: Build options; defaults apply when omitted.

    Returns:
        The new ``paths`` mapping (also stored on *spec*).
    """
    config = config or GenerateConfig()
    naming = config.naming
    reserved = naming.schema_reserved
    strategy = _operation_id_strategy(config)

    used: set[str] = set()
    paths: dict[str, Any] = {}
    for raw_path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        path = to_openapi_path(raw_path)
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            resource = to_resource(operation, path, method.value)
            tag = config.tag(operation, path) if config.tag else default_tag(operation, path, naming)

            operation_id = find_unique_operation_id(
                used,
                strategy(operation, path, method.value),
                [tag, method.value, "".join(segment for segment in path.split("/") if segment)],
                _formatter(strategy, operation, path, method.value),
            )
            used.add(operation_id)

            parameters = merge_parameters(spec, path_item, operation)
            security = operation["security"] if "security" in operation else spec.get("security") or []
            tuned = dict(operation)
            tuned.update({
                "operationId": operation_id,
                "tags": [snakecase(tag)],
                "x-fn-name": resource.name,
                "x-fn-group": tag,
                "parameters": parameters,
                "responses": resolve_responses(
                    spec, operation_id, operation, config.responses, reserved
                ),
                "requestBody": tune_request_body(
                    spec, operation_id, operation, parameters, security, reserved
                ),
            })
            _apply_pagination(spec, tuned, config)

            paths.setdefault(path, {})[method.value] = tuned
            logger.debug("Tuned %s %s as %s", method.value.upper(), path, operation_id)

    spec["paths"] = paths
    return paths


def _apply_pagination(spec: dict[str, Any], tuned: dict[str, Any], config: GenerateConfig) -> None:
    if not config.pagination.enabled:
        tuned.pop("x-pagination", None)
        return
    if not config.pagination.guess:
        return
    pagination = to_pagination(spec, tuned)
    if pagination:
        tuned["x-pagination"] = pagination
    else:
        tuned.pop("x-pagination", None)


def for_each_operation(
    spec: dict[str, Any],
    callback: Callable[[OperationEntry, dict[str, Any]], T],
) -> list[T]:
    """Call *callback* for every operation of a built IR, in document order."""
    results: list[T] = []
    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            tags = operation.get("tags") or []
            entry = OperationEntry(method=method, path=path, tag=tags[0] if tags else None)
            results.append(callback(entry, operation))
    return results
