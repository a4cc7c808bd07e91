"""Shared test fixtures for specir.

Provides the petstore document fixtures, an isolated config environment,
output managers, and global-state resets. These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from specir.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE_PATH = FIXTURES_DIR / "petstore_3.0.json"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams and the
    test finishes, the cached references become stale. Resetting forces a
    fresh manager on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Undo the Rich handler installed by the CLI callback.

    The callback stops ``specir`` records from propagating, which would hide
    them from ``caplog`` in every later test.
    """
    yield
    logger = logging.getLogger("specir")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    """Path of the petstore 3.0 fixture file."""
    return PETSTORE_PATH


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore 3.0 document."""
    with open(PETSTORE_PATH) as f:
        return json.load(f)


@pytest.fixture
def petstore_ir(petstore_raw: dict[str, Any]) -> dict[str, Any]:
    """The petstore document compiled with default options."""
    from specir.compiler.ir import build_ir

    return build_ir(petstore_raw)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears all SPECIR_* environment
    variables, and changes the working directory to tmp_path so that no
    ``specir.json`` from the developer's checkout is picked up.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["SPECIR_CONFIG", "SPECIR_FLATTEN_ERRORS", "SPECIR_NO_PAGINATION"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()
