"""Dereference ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to share schemas, parameters, and
responses. Unlike a whole-document inliner, the compiler keeps references in
place and dereferences them lazily, one pointer at a time, so that named
components survive into the IR.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specir.exceptions.SpecParseError`.

A reference can point at another reference. :func:`follow_ref` walks such
chains while tracking every pointer it has visited; a chain that comes back to
a pointer already seen never reaches a concrete value and raises
:class:`~specir.exceptions.CyclicReferenceError` instead of looping.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from specir.exceptions import CyclicReferenceError, SpecParseError


class ParsedRef(NamedTuple):
    """The pieces of an internal ``$ref`` string.

    For ``#/components/schemas/Pet`` the model is ``Pet``, the namespace is
    ``schemas`` and the path is ``["components", "schemas", "Pet"]``.
    """

    model: str
    namespace: str
    path: list[str]


def is_ref(obj: Any) -> bool:
    """Return True if *obj* is a JSON Reference object."""
    return isinstance(obj, dict) and "$ref" in obj


def parse_ref(ref: str) -> ParsedRef:
    """Split a ``$ref`` string into model name, namespace, and path segments.

    Args:
        ref: The ``$ref`` string (e.g. ``"#/components/schemas/Pet"``).

    Returns:
        A :class:`ParsedRef`. Segments are unescaped per RFC 6901.
    """
    segments = [
        segment.replace("~1", "/").replace("~0", "~")
        for segment in ref.lstrip("#").split("/")
        if segment
    ]
    model = segments[-1] if segments else ""
    namespace = segments[-2] if len(segments) > 1 else ""
    return ParsedRef(model=model, namespace=namespace, path=segments)


def schema_ref(name: str) -> dict[str, str]:
    """Build a ``$ref`` object pointing at ``components.schemas[name]``."""
    escaped = name.replace("~", "~0").replace("/", "~1")
    return {"$ref": f"#/components/schemas/{escaped}"}


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the root dict to locate the referenced value. Handles
    RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).
    The target is returned as-is, so it may itself be a reference.

    Args:
        ref: The ``$ref`` string.
        root: The root document to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def follow_ref(spec: dict[str, Any], ref: str) -> Any:
    """Resolve *ref* to a concrete (non-reference) value.

    Chains of references are followed until a value without ``$ref`` is
    reached. Every pointer on the chain is recorded; meeting one a second
    time means the chain can never terminate.

    Args:
        spec: The root OpenAPI document.
        ref: The ``$ref`` string to resolve.

    Returns:
        The first non-reference value at the end of the chain. The object
        is returned by identity, not copied.

    Raises:
        CyclicReferenceError: If the chain revisits a pointer.
        SpecParseError: If any pointer on the chain cannot be resolved.

    Example::

        follow_ref(spec, "#/components/schemas/PetAlias")
        # -> {"type": "object", "properties": {...}}  (the Pet schema)
    """
    chain: list[str] = []
    seen: set[str] = set()
    current = ref
    while True:
        if current in seen:
            raise CyclicReferenceError(chain + [current])
        seen.add(current)
        chain.append(current)
        target = resolve_pointer(current, spec)
        if not is_ref(target):
            return target
        current = target["$ref"]


def resolve_ref(spec: dict[str, Any], obj: Any) -> Any:
    """Return the concrete value behind *obj* if it is a reference, else *obj*."""
    if is_ref(obj):
        return follow_ref(spec, obj["$ref"])
    return obj
