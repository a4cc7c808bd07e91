"""Tests for specir.config -- XDG paths, atomic writes, project config, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specir.config import (
    atomic_write,
    get_data_dir,
    load_project_config,
    resolve_config,
)
from specir.exceptions import ConfigError
from specir.models import OperationIdStrategy


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestDataDir:
    """Crash-log directory on XDG and non-XDG platforms."""

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specir.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "specir"
        assert result.is_dir()

    def test_data_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("specir.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        result = get_data_dir()
        assert result == custom / "specir"
        assert result.is_dir()

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specir.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".specir" / "logs"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "ir.json"
        atomic_write(target, '{"openapi": "3.1.0"}')
        assert target.read_text(encoding="utf-8") == '{"openapi": "3.1.0"}'

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "ir.json"
        target.write_text("old content", encoding="utf-8")
        atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "build" / "out" / "ir.json"
        atomic_write(target, "deep write")
        assert target.read_text(encoding="utf-8") == "deep write"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "ir.json"
        atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "ir.json"
        with patch("specir.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []

    def test_unicode_content(self, tmp_path: Path) -> None:
        target = tmp_path / "unicode.json"
        content = "Hello 世界 \U0001f30d éàüñ"
        atomic_write(target, content)
        assert target.read_text(encoding="utf-8") == content


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loads_implicit_file(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specir.json", {"pagination": {"guess": False}})
        assert load_project_config() == {"pagination": {"guess": False}}

    def test_explicit_missing_path_raises(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_project_config(isolated_config / "nope.json")

    def test_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        path = isolated_config / "specir.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_project_config()

    def test_non_object_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specir.json", ["a", "b"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.pagination.enabled is True
        assert config.pagination.guess is True
        assert config.responses.flatten_error_responses is False
        assert config.operation_id_strategy == OperationIdStrategy.AUTO

    def test_project_file_applies(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "specir.json",
            {
                "operation_id_strategy": "path",
                "responses": {"flatten_error_responses": True},
                "naming": {"schema_reserved": ["Error", "Result"]},
            },
        )
        config = resolve_config()
        assert config.operation_id_strategy == OperationIdStrategy.PATH
        assert config.responses.flatten_error_responses is True
        assert config.naming.schema_reserved == frozenset({"Error", "Result"})

    def test_env_path_overrides_project_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "specir.json", {"pagination": {"guess": False}})
        _write_json(isolated_config / "other.json", {"pagination": {"guess": True, "enabled": False}})
        monkeypatch.setenv("SPECIR_CONFIG", str(isolated_config / "other.json"))
        config = resolve_config()
        assert config.pagination.guess is True
        assert config.pagination.enabled is False

    def test_cli_path_overrides_env_path(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "env.json", {"pagination": {"enabled": False}})
        _write_json(isolated_config / "cli.json", {"pagination": {"guess": False}})
        monkeypatch.setenv("SPECIR_CONFIG", str(isolated_config / "env.json"))
        config = resolve_config(cli_config=isolated_config / "cli.json")
        assert config.pagination.enabled is True
        assert config.pagination.guess is False

    def test_env_flags_override_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "specir.json", {"responses": {"flatten_error_responses": True}})
        monkeypatch.setenv("SPECIR_FLATTEN_ERRORS", "false")
        monkeypatch.setenv("SPECIR_NO_PAGINATION", "yes")
        config = resolve_config()
        assert config.responses.flatten_error_responses is False
        assert config.pagination.enabled is False

    def test_cli_flags_override_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECIR_FLATTEN_ERRORS", "0")
        monkeypatch.setenv("SPECIR_NO_PAGINATION", "1")
        config = resolve_config(cli_flatten_errors=True, cli_no_pagination=False)
        assert config.responses.flatten_error_responses is True
        assert config.pagination.enabled is True

    def test_invalid_env_flag_raises(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECIR_NO_PAGINATION", "maybe")
        with pytest.raises(ConfigError, match="SPECIR_NO_PAGINATION"):
            resolve_config()

    def test_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specir.json", {"pagination": {"enabled": "sometimes"}})
        with pytest.raises(ConfigError, match="Invalid config"):
            resolve_config()

    def test_missing_env_path_raises(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECIR_CONFIG", str(isolated_config / "missing.json"))
        with pytest.raises(ConfigError, match="Config file not found"):
            resolve_config()
