"""The ``specir build`` command.

Loads an OpenAPI document, resolves the build options
(:func:`~specir.config.resolve_config`), compiles the IR and prints it to
stdout or writes it atomically to a file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from specir.exceptions import SpecirError
from specir.models import GenerateConfig
from specir.output import debug, dump_json, error, get_output, success


def compile_source(source: str, config: Optional[GenerateConfig] = None) -> dict[str, Any]:
    """Load, validate and compile *source* into the IR.

    Args:
        source: File path, ``http(s)://`` URL, or ``'-'`` for stdin.
        config: Build options; resolved from flags/env/project file by the
            caller.

    Raises:
        SpecirError: On any load, parse or compile failure.
    """
    from specir.compiler.ir import build_ir
    from specir.parser import load_spec, validate_openapi_version

    raw = load_spec(source)
    version = validate_openapi_version(raw)
    debug(f"Compiling OpenAPI {version} document from {source}")
    return build_ir(raw, config)


def fail(exc: SpecirError) -> typer.Exit:
    """Report *exc* on stderr and return the matching :class:`typer.Exit`."""
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def build_command(
    source: str = typer.Argument(..., help="OpenAPI document: file path, URL, or '-' for stdin."),
    output_path: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the IR to this file instead of stdout."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Build options file (default: ./specir.json)."
    ),
    flatten_errors: bool = typer.Option(
        False, "--flatten-errors", help="Name non-2xx response bodies too."
    ),
    no_pagination: bool = typer.Option(
        False, "--no-pagination", help="Skip pagination detection."
    ),
) -> None:
    """Compile an OpenAPI document into the IR.

    Example::

        specir build openapi.yaml -o ir.json
        curl -s https://example.com/openapi.json | specir build - | jq '.paths'
    """
    from specir.compiler.operations import for_each_operation
    from specir.config import atomic_write, resolve_config

    try:
        config = resolve_config(
            cli_config=config_path,
            cli_flatten_errors=True if flatten_errors else None,
            cli_no_pagination=True if no_pagination else None,
        )
        document = compile_source(source, config)
    except SpecirError as exc:
        raise fail(exc) from None

    if output_path is None:
        get_output().print_document(document)
        return

    atomic_write(output_path, dump_json(document) + "\n")
    operations = len(for_each_operation(document, lambda entry, operation: operation))
    success(
        f"Wrote {output_path} ({operations} operations, "
        f"{len(document['components']['schemas'])} schemas)"
    )
