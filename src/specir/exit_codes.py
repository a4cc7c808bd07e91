"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specir.exceptions.SpecirError` subclass.
Build scripts and CI jobs can inspect the exit code to tell a broken input
document apart from a contradictory schema without parsing stderr.

Example::

    $ specir build openapi.yaml -o ir.json
    $ echo $?
    8   # EXIT_SCHEMA_CONFLICT -- an allOf mixes object and non-object members
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or dereferenced."""

EXIT_SCHEMA_CONFLICT = 8
"""The OpenAPI document contains a structurally contradictory schema."""
