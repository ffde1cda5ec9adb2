"""Shared test fixtures for envauth.

Provides reusable fixtures for writing manifests and ``.env`` files,
isolating configuration directories, and running CLI commands. These
fixtures are discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from envauth.environment import reset_environment_source
from envauth.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager and the process-wide EnvironmentSource.

    The OutputManager caches references to sys.stdout/sys.stderr, which
    CliRunner swaps out per invocation, and the shared EnvironmentSource
    would otherwise keep the first test's ``.env`` for the whole session.
    """
    reset_environment_source()
    yield
    reset_output()
    reset_environment_source()


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes ``composer.json`` into a directory.

    Call as ``write_manifest(repositories)`` or
    ``write_manifest(repositories, directory=some_dir)``.
    """

    def _write(repositories: Any, directory: Path | None = None) -> Path:
        target = (directory or tmp_path) / "composer.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"repositories": repositories}), encoding="utf-8")
        return target

    return _write


@pytest.fixture
def write_env(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a ``.env`` file into a directory."""

    def _write(content: str, directory: Path | None = None) -> Path:
        target = (directory or tmp_path) / ".env"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all ENVAUTH_* environment variables and changes the working
    directory to ``tmp_path / "project"``.

    Returns:
        The project directory (the new working directory).
    """
    monkeypatch.setattr("envauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["ENVAUTH_AUTH_FILE", "ENVAUTH_OPTIONS_KEY", "ENVAUTH_NATIVE_TOKENS"]:
        monkeypatch.delenv(var, raising=False)

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    ``result.output`` holds stdout and stderr together; pass ``--quiet``
    when a test needs to parse stdout alone.
    """
    from typer.testing import CliRunner

    return CliRunner()
