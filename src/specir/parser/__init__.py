"""OpenAPI document input -- load raw documents and dereference ``$ref`` pointers.

This sub-package is the input side of the specir pipeline: it turns a JSON or
YAML document (local file, remote URL, or stdin) into a plain dict and offers
the pointer helpers every compiler stage uses to look through references.

Typical usage::

    from specir.parser import load_spec, validate_openapi_version

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_openapi_version(raw)

Sub-modules:

* :mod:`~specir.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specir.parser.resolver` -- Pointer resolution with cycle detection.
"""

from specir.parser.loader import load_spec, validate_openapi_version
from specir.parser.resolver import follow_ref, is_ref, parse_ref, resolve_ref

__all__ = [
    "follow_ref",
    "is_ref",
    "load_spec",
    "parse_ref",
    "resolve_ref",
    "validate_openapi_version",
]
