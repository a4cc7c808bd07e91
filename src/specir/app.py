"""Typer application and CLI entry point for specir.

This module wires the top-level Typer application, registers the built-in
commands (``build``, ``operations``, ``schemas``, ``pagination``), and sets
up output and logging from the global flags.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~specir.exceptions.SpecirError` exits with its ``exit_code``;
anything else is written to a crash log under the data directory.

See Also:
    :mod:`specir.config`: Build option resolution.
    :mod:`specir.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from specir import __version__
from specir.commands.build import build_command
from specir.commands.inspect import operations_command, pagination_command, schemas_command
from specir.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="specir",
    help="Compile OpenAPI 3.0/3.1 documents into an SDK-ready IR.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("build")(build_command)
app.command("operations")(operations_command)
app.command("schemas")(schemas_command)
app.command("pagination")(pagination_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specir {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, quiet: bool, no_color: bool) -> None:
    """Route the ``specir`` loggers to stderr through Rich.

    WARNING by default, DEBUG with ``--verbose``, ERROR with ``--quiet``.
    Previously installed handlers are replaced so repeated invocations in
    one process do not duplicate records.
    """
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    handler = RichHandler(
        console=Console(file=sys.stderr, stderr=True, no_color=no_color),
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    logger = logging.getLogger("specir")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every command.

    Installs the global :class:`~specir.output.OutputManager` and the
    logging handler from the global flags.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational output and warnings.
        verbose: Enable debug-level diagnostic output.
    """
    from specir.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose=verbose, quiet=quiet, no_color=output.no_color)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from specir.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specir`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specir.exceptions import SpecirError
        from specir.output import error

        if isinstance(exc, SpecirError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
