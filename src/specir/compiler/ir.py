"""Entry point of the compiler: OpenAPI document in, IR out.

:func:`build_ir` runs the stages in a fixed order on a private deep copy of
the input:

1. Component schema names are made valid identifiers (references rewritten).
2. :func:`~specir.compiler.normalizer.normalize_spec`
3. :func:`~specir.compiler.expander.expand_spec`
4. :func:`~specir.compiler.operations.build_operations` (request bodies,
   responses and pagination per operation).
5. The ``Overview`` docs tree (``x-docs``) and ``x-tagGroups``.

The result carries ``x-sdk-augmented: true``; passing it back in returns it
unchanged, so building is idempotent.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any, Optional

from specir.compiler.expander import expand_spec
from specir.compiler.naming import is_valid_identifier, schema_identifier
from specir.compiler.normalizer import normalize_spec
from specir.compiler.operations import build_operations, for_each_operation
from specir.docs import build_overview_docs
from specir.models import GenerateConfig
from specir.parser.resolver import parse_ref, schema_ref

logger = logging.getLogger(__name__)

AUGMENTED_MARKER = "x-sdk-augmented"
SCHEMA_REF_PREFIX = "#/components/schemas/"


def build_ir(spec: dict[str, Any], config: Optional[GenerateConfig] = None) -> dict[str, Any]:
    """Compile an OpenAPI document into the IR.

    Args:
        spec: A parsed OpenAPI 3.x document. It is never modified.
        config: Build options; defaults apply when omitted.

    Returns:
        The IR document. An input that already carries ``x-sdk-augmented``
        is returned as is.

    Raises:
        SchemaConflictError: If an ``allOf`` mixes object and non-object
            members.
        CyclicReferenceError: If a pure ``$ref`` chain loops.
        SpecParseError: If a reference cannot be resolved.
    """
    if spec.get(AUGMENTED_MARKER):
        logger.debug("Document is already augmented; returning it unchanged")
        return spec

    config = config or GenerateConfig()
    document = copy.deepcopy(spec)
    components = document.setdefault("components", {})
    components.setdefault("schemas", {})
    components.setdefault("securitySchemes", {})
    document.setdefault("paths", {})

    canonicalize_schema_names(document, config.naming.schema_reserved)
    normalize_spec(document, config.naming)
    expand_spec(document, reserved=config.naming.schema_reserved)
    build_operations(document, config)

    document["x-docs"] = [
        category.model_dump(exclude_none=True) for category in build_overview_docs(document)
    ]
    if "x-tagGroups" not in document:
        document["x-tagGroups"] = [{"name": "API", "tags": collect_tags(document)}]
    document[AUGMENTED_MARKER] = True
    return document


def collect_tags(spec: dict[str, Any]) -> list[str]:
    """Distinct operation tags in document order."""
    tags: list[str] = []
    for tag in for_each_operation(spec, lambda entry, _operation: entry.tag):
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _canonical_name(name: str, taken: set[str], reserved: frozenset[str]) -> str:
    base = schema_identifier(name) or "Schema"
    candidate = f"{base}Schema" if base in reserved else base
    counter = 1
    while candidate in taken or candidate in reserved:
        counter += 1
        candidate = f"{base}{counter}"
    return candidate


def canonicalize_schema_names(spec: dict[str, Any], reserved: Iterable[str] = ()) -> dict[str, str]:
    """Rename component schemas that are not valid identifiers.

    Names with characters outside ``[A-Za-z0-9_]``, a leading digit, or a
    reserved value are PascalCased (reserved names get a ``Schema`` suffix,
    leading digits a ``_`` prefix) and every ``$ref`` pointing at them is
    rewritten. Component order is preserved.

    Returns:
        The ``old name -> new name`` map of renamed schemas.
    """
    reserved = frozenset(reserved)
    schemas = spec.get("components", {}).get("schemas") or {}
    valid = {name for name in schemas if is_valid_identifier(name, reserved)}

    renames: dict[str, str] = {}
    taken = set(valid)
    for name in schemas:
        if name in valid:
            continue
        new_name = _canonical_name(name, taken, reserved)
        taken.add(new_name)
        renames[name] = new_name
    if not renames:
        return renames

    spec["components"]["schemas"] = {
        renames.get(name, name): schema for name, schema in schemas.items()
    }
    _rewrite_refs(spec, renames, set())
    for old, new in renames.items():
        logger.debug("Renamed component schema %r to %r", old, new)
    return renames


def _rewrite_refs(node: Any, renames: dict[str, str], visited: set[int]) -> None:
    if isinstance(node, dict):
        if id(node) in visited:
            return
        visited.add(id(node))
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
            parsed = parse_ref(ref)
            if len(parsed.path) == 3 and parsed.model in renames:
                node["$ref"] = schema_ref(renames[parsed.model])["$ref"]
        for value in node.values():
            _rewrite_refs(value, renames, visited)
    elif isinstance(node, list):
        for value in node:
            _rewrite_refs(value, renames, visited)
