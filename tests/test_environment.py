"""Tests for envauth.environment -- .env discovery, loading and lookup precedence."""

from __future__ import annotations

import logging
import os
from collections import ChainMap
from pathlib import Path
from typing import Any, Callable

import pytest

import envauth.environment as environment_module
from envauth.environment import (
    EnvironmentSource,
    LoadStatus,
    find_environment_file,
    find_project_root,
    get_environment_source,
    reset_environment_source,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _counting_parser(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    """Wrap dotenv_values so every call is recorded."""
    calls: list[Path] = []
    real = environment_module.dotenv_values

    def _wrapped(path: Any, *args: Any, **kwargs: Any) -> dict[str, Any]:
        calls.append(Path(path))
        return real(path, *args, **kwargs)

    monkeypatch.setattr(environment_module, "dotenv_values", _wrapped)
    return calls


# ---------------------------------------------------------------------------
# Project root discovery
# ---------------------------------------------------------------------------


class TestFindProjectRoot:
    def test_start_directory_with_marker(self, tmp_path: Path) -> None:
        (tmp_path / "composer.json").write_text("{}")
        assert find_project_root(tmp_path) == tmp_path

    def test_nearest_ancestor_with_marker(self, tmp_path: Path) -> None:
        (tmp_path / "composer.json").write_text("{}")
        nested = tmp_path / "src" / "deep" / "er"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path

    def test_inner_marker_wins_over_outer(self, tmp_path: Path) -> None:
        (tmp_path / "composer.json").write_text("{}")
        inner = tmp_path / "packages" / "child"
        inner.mkdir(parents=True)
        (inner / "composer.json").write_text("{}")
        assert find_project_root(inner) == inner

    def test_falls_back_to_start(self, tmp_path: Path) -> None:
        nested = tmp_path / "no" / "marker"
        nested.mkdir(parents=True)
        assert find_project_root(nested, marker="no-such-marker.json") == nested

    def test_custom_marker(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{}")
        nested = tmp_path / "lib"
        nested.mkdir()
        assert find_project_root(nested, marker="package.json") == tmp_path


class TestFindEnvironmentFile:
    def test_returns_existing_file(self, tmp_path: Path) -> None:
        env = tmp_path / ".env"
        env.write_text("A=1\n")
        assert find_environment_file(tmp_path) == env

    def test_missing_file(self, tmp_path: Path) -> None:
        assert find_environment_file(tmp_path) is None

    def test_directory_named_env_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".env").mkdir()
        assert find_environment_file(tmp_path) is None

    def test_custom_filename(self, tmp_path: Path) -> None:
        env = tmp_path / ".env.auth"
        env.write_text("A=1\n")
        assert find_environment_file(tmp_path, ".env.auth") == env


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoading:
    def test_loads_env_from_project_root(
        self, tmp_path: Path, write_manifest: Callable[..., Path], write_env: Callable[..., Path]
    ) -> None:
        write_manifest([])
        env_path = write_env("FILE_TOKEN=from-file\nOTHER=x\n")
        nested = tmp_path / "sub" / "dir"
        nested.mkdir(parents=True)

        source = EnvironmentSource(system_env={}, cwd=nested)

        assert source.load_result.status is LoadStatus.LOADED
        assert source.load_result.path == env_path
        assert source.all_loaded_variables() == {"FILE_TOKEN": "from-file", "OTHER": "x"}

    def test_env_outside_project_root_is_not_loaded(
        self, tmp_path: Path, write_manifest: Callable[..., Path], write_env: Callable[..., Path]
    ) -> None:
        project = tmp_path / "project"
        write_manifest([], directory=project)
        write_env("FILE_TOKEN=outer\n")  # in tmp_path, above the project root

        source = EnvironmentSource(system_env={}, cwd=project)

        assert source.load_result.status is LoadStatus.ABSENT
        assert source.lookup("FILE_TOKEN") is None

    def test_no_env_file(self, tmp_path: Path) -> None:
        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        assert source.load_result.status is LoadStatus.ABSENT
        assert source.load_result.path is None
        assert source.all_loaded_variables() == {}

    def test_quoted_values_and_comments(
        self, tmp_path: Path, write_env: Callable[..., Path]
    ) -> None:
        write_env(
            "# credentials\n"
            'QUOTED="with spaces"\n'
            "SINGLE='single'\n"
            "export EXPORTED=yes\n"
            "EMPTY=\n"
        )
        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        assert source.all_loaded_variables() == {
            "QUOTED": "with spaces",
            "SINGLE": "single",
            "EXPORTED": "yes",
            "EMPTY": "",
        }

    def test_bare_keys_without_value_are_dropped(
        self, tmp_path: Path, write_env: Callable[..., Path]
    ) -> None:
        write_env("BARE\nSET=1\n")
        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        assert source.all_loaded_variables() == {"SET": "1"}

    def test_undecodable_file_is_an_error_result(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / ".env").write_bytes(b"TOKEN=\xff\xfe\xfa\n")
        with caplog.at_level(logging.WARNING, logger="envauth.environment"):
            source = EnvironmentSource(system_env={}, cwd=tmp_path)

        result = source.load_result
        assert result.status is LoadStatus.ERROR
        assert result.path == tmp_path / ".env"
        assert result.detail
        assert result.variables == {}
        assert source.lookup("TOKEN") is None
        assert "Ignoring environment file" in caplog.text

    def test_read_failure_is_swallowed(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_env("TOKEN=x\n")

        def _boom(*args: Any, **kwargs: Any) -> dict[str, str]:
            raise PermissionError("denied")

        monkeypatch.setattr(environment_module, "dotenv_values", _boom)
        source = EnvironmentSource(system_env={}, cwd=tmp_path)

        assert source.load_result.status is LoadStatus.ERROR
        assert "denied" in (source.load_result.detail or "")
        assert source.all_loaded_variables() == {}

    def test_does_not_modify_process_environment(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ENVAUTH_TEST_ONLY_IN_FILE", raising=False)
        write_env("ENVAUTH_TEST_ONLY_IN_FILE=secret\n")

        source = EnvironmentSource(cwd=tmp_path)

        assert source.lookup("ENVAUTH_TEST_ONLY_IN_FILE") == "secret"
        assert "ENVAUTH_TEST_ONLY_IN_FILE" not in os.environ

    def test_references_expand_against_process_environment(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVAUTH_TEST_REF", "from-process")
        write_env("ENVAUTH_TEST_COMPOSED=${ENVAUTH_TEST_REF}-suffix\n")

        source = EnvironmentSource(cwd=tmp_path)

        assert source.all_loaded_variables() == {"ENVAUTH_TEST_COMPOSED": "from-process-suffix"}

    def test_references_kept_with_injected_environment(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVAUTH_TEST_REF", "from-process")
        write_env("ENVAUTH_TEST_COMPOSED=${ENVAUTH_TEST_REF}-suffix\n")

        source = EnvironmentSource(system_env={"ENVAUTH_TEST_REF": "injected"}, cwd=tmp_path)

        assert source.lookup("ENVAUTH_TEST_COMPOSED") == "${ENVAUTH_TEST_REF}-suffix"

    def test_defaults_to_current_directory(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_env("FROM_CWD=1\n")
        monkeypatch.chdir(tmp_path)
        source = EnvironmentSource(system_env={})
        assert source.lookup("FROM_CWD") == "1"


class TestLoadsOnce:
    def test_file_read_happens_once(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = _counting_parser(monkeypatch)
        write_env("TOKEN=abc\n")

        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        for _ in range(5):
            source.ensure_loaded()
            source.lookup("TOKEN")
            source.lookup("MISSING")
            source.all_loaded_variables()

        assert len(calls) == 1

    def test_later_file_changes_are_not_seen(
        self, tmp_path: Path, write_env: Callable[..., Path]
    ) -> None:
        env = write_env("TOKEN=first\n")
        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        env.write_text("TOKEN=second\n")
        assert source.lookup("TOKEN") == "first"

    def test_failed_load_is_not_retried(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_env("TOKEN=x\n")
        attempts: list[int] = []

        def _boom(*args: Any, **kwargs: Any) -> dict[str, str]:
            attempts.append(1)
            raise OSError("disk on fire")

        monkeypatch.setattr(environment_module, "dotenv_values", _boom)
        source = EnvironmentSource(system_env={}, cwd=tmp_path)
        source.ensure_loaded()
        source.lookup("TOKEN")

        assert attempts == [1]

    def test_shared_source_is_created_once(
        self, tmp_path: Path, write_env: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = _counting_parser(monkeypatch)
        write_env("TOKEN=abc\n")
        monkeypatch.chdir(tmp_path)

        first = get_environment_source()
        second = get_environment_source(marker="other.json")

        assert first is second
        assert len(calls) == 1

    def test_reset_creates_a_new_shared_source(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        first = get_environment_source()
        reset_environment_source()
        assert get_environment_source() is not first


# ---------------------------------------------------------------------------
# Lookup precedence
# ---------------------------------------------------------------------------


class TestLookup:
    @pytest.fixture
    def source(self, tmp_path: Path, write_env: Callable[..., Path]) -> EnvironmentSource:
        write_env("SHARED=from-file\nFILE_ONLY=file-value\nFILE_EMPTY=\n")
        return EnvironmentSource(
            system_env={"SHARED": "from-system", "SYSTEM_ONLY": "sys-value", "SYS_EMPTY": ""},
            cwd=tmp_path,
        )

    def test_system_shadows_file(self, source: EnvironmentSource) -> None:
        assert source.lookup("SHARED") == "from-system"

    def test_file_only_value(self, source: EnvironmentSource) -> None:
        assert source.lookup("FILE_ONLY") == "file-value"

    def test_system_only_value(self, source: EnvironmentSource) -> None:
        assert source.lookup("SYSTEM_ONLY") == "sys-value"

    def test_missing_everywhere(self, source: EnvironmentSource) -> None:
        assert source.lookup("NOWHERE") is None

    def test_empty_values_are_returned_verbatim(self, source: EnvironmentSource) -> None:
        assert source.lookup("FILE_EMPTY") == ""
        assert source.lookup("SYS_EMPTY") == ""

    def test_empty_system_value_still_shadows_file(
        self, tmp_path: Path, write_env: Callable[..., Path]
    ) -> None:
        write_env("TOKEN=from-file\n")
        source = EnvironmentSource(system_env={"TOKEN": ""}, cwd=tmp_path)
        assert source.lookup("TOKEN") == ""

    def test_names_are_case_sensitive(self, source: EnvironmentSource) -> None:
        assert source.lookup("file_only") is None

    def test_loaded_variables_exclude_system_values(self, source: EnvironmentSource) -> None:
        loaded = source.all_loaded_variables()
        assert loaded["SHARED"] == "from-file"
        assert "SYSTEM_ONLY" not in loaded

    def test_loaded_variables_is_a_copy(self, source: EnvironmentSource) -> None:
        source.all_loaded_variables()["FILE_ONLY"] = "tampered"
        assert source.lookup("FILE_ONLY") == "file-value"

    def test_shadowed_by_system(self, source: EnvironmentSource) -> None:
        assert source.shadowed_by_system("SHARED") is True
        assert source.shadowed_by_system("FILE_ONLY") is False
        assert source.shadowed_by_system("SYSTEM_ONLY") is False

    def test_merged_system_namespaces(self, tmp_path: Path) -> None:
        first = {"A": "first"}
        second = {"A": "second", "B": "second"}
        source = EnvironmentSource(system_env=ChainMap(first, second), cwd=tmp_path)
        assert source.lookup("A") == "first"
        assert source.lookup("B") == "second"

    def test_defaults_to_os_environ(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVAUTH_TEST_SYSTEM_VAR", "live")
        source = EnvironmentSource(cwd=tmp_path)
        assert source.lookup("ENVAUTH_TEST_SYSTEM_VAR") == "live"
