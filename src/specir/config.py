"""Configuration discovery, atomic writes, and precedence resolution.

This module handles everything specir reads from or writes to disk besides
the OpenAPI document itself:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specir/`` on macOS and Windows. Only the data directory (crash logs)
  is used, see :func:`get_data_dir`.
* **Project config** -- An optional ``./specir.json`` holding a
  :class:`~specir.models.GenerateConfig` in JSON form.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project config, and defaults into the
  effective :class:`~specir.models.GenerateConfig`.

File writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written IR behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specir.exceptions import ConfigError
from specir.models import GenerateConfig

_APP_NAME = "specir"
_PROJECT_CONFIG_FILENAME = "specir.json"

ENV_CONFIG = "SPECIR_CONFIG"
ENV_FLATTEN_ERRORS = "SPECIR_FLATTEN_ERRORS"
ENV_NO_PAGINATION = "SPECIR_NO_PAGINATION"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specir/`` (default ``~/.local/share/specir/``).
    On macOS/Windows: ``~/.specir/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project config ---


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def load_project_config(path: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load build options from a JSON config file.

    Args:
        path: Explicit config file. When omitted, ``./specir.json`` is used
            if it exists.

    Returns:
        The parsed JSON as a dict, or ``None`` if no implicit project config
        exists.

    Raises:
        ConfigError: If an explicit *path* is missing, or the file contains
            invalid JSON or a non-object value.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return _read_config_file(path)

    implicit = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not implicit.is_file():
        return None
    return _read_config_file(implicit)


def _env_flag(name: str) -> Optional[bool]:
    """Parse a boolean environment variable; ``None`` when unset."""
    value = os.environ.get(name)
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigError(f"Invalid value for {name}: {value!r} (expected true or false)")


# --- Precedence resolution ---


def resolve_config(
    cli_config: Optional[Path] = None,
    cli_flatten_errors: Optional[bool] = None,
    cli_no_pagination: Optional[bool] = None,
) -> GenerateConfig:
    """Resolve build options with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_config``, ``cli_flatten_errors``, ``cli_no_pagination``)
        2. Environment variables (``SPECIR_CONFIG``, ``SPECIR_FLATTEN_ERRORS``,
           ``SPECIR_NO_PAGINATION``)
        3. Project config (``./specir.json``)
        4. Defaults

    Returns:
        The effective :class:`~specir.models.GenerateConfig`.

    Raises:
        ConfigError: If a config file is missing or invalid, or an
            environment flag is not a boolean.
    """
    # 3. Config file: CLI path > env path > ./specir.json
    config_path = cli_config
    if config_path is None and os.environ.get(ENV_CONFIG):
        config_path = Path(os.environ[ENV_CONFIG])
    data = load_project_config(config_path) or {}

    try:
        config = GenerateConfig.model_validate(data)
    except ValidationError as exc:
        where = config_path or Path.cwd() / _PROJECT_CONFIG_FILENAME
        raise ConfigError(f"Invalid config at {where}: {exc}") from exc

    # 2. Environment variables
    env_flatten = _env_flag(ENV_FLATTEN_ERRORS)
    if env_flatten is not None:
        config.responses.flatten_error_responses = env_flatten
    env_no_pagination = _env_flag(ENV_NO_PAGINATION)
    if env_no_pagination is not None:
        config.pagination.enabled = not env_no_pagination

    # 1. CLI flags (highest precedence)
    if cli_flatten_errors is not None:
        config.responses.flatten_error_responses = cli_flatten_errors
    if cli_no_pagination is not None:
        config.pagination.enabled = not cli_no_pagination

    return config
