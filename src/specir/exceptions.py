"""Exception hierarchy for specir.

All exceptions inherit from :class:`SpecirError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specir.exit_codes`.
The top-level error handler in :func:`specir.app.main` catches
``SpecirError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Only genuine contradictions are raised from inside the compiler. Documents
that are merely under-specified are handled with a logged warning and a
fallback so that partial output is still produced.

Subclass hierarchy::

    SpecirError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- SpecParseError          (exit 7)
    |   +-- CyclicReferenceError
    +-- SchemaConflictError     (exit 8)
    +-- ConfigError             (exit 1)
"""

from specir.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SCHEMA_CONFLICT,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecirError(Exception):
    """Base exception for all specir errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specir.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecirError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecirError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or dereferenced."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class CyclicReferenceError(SpecParseError):
    """Raised when a chain of ``$ref`` pointers loops back on itself.

    A schema whose whole value is ``$ref`` B, where B's whole value is
    ``$ref`` A, never reaches a concrete schema. The offending chain is
    kept on :attr:`chain` for diagnostics.

    Args:
        chain: The ``$ref`` strings in resolution order, ending with the
            reference that closed the cycle.
    """

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__("Cyclic $ref chain: " + " -> ".join(chain))


class SchemaConflictError(SpecirError):
    """Raised when a schema is structurally contradictory.

    The only such case today is an ``allOf`` that mixes object-typed members
    with non-object-typed members, which no merge can satisfy.

    Args:
        location: JSON-pointer-like location of the offending schema.
        message: Description of the conflict.
    """

    exit_code = EXIT_SCHEMA_CONFLICT

    def __init__(self, location: str, message: str):
        self.location = location
        super().__init__(f"{location}: {message}")


class ConfigError(SpecirError):
    """Raised for configuration problems (unreadable or invalid ``specir.json``, bad overrides)."""

    exit_code = EXIT_GENERIC_FAILURE
