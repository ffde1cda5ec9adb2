"""Tests for envauth.files -- atomic writes."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from envauth.files import atomic_write


class TestAtomicWrite:
    def test_writes_and_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "auth.json"
        atomic_write(target, "{}\n")
        assert target.read_text() == "{}\n"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "auth.json"
        target.write_text("old")
        atomic_write(target, "new")
        assert target.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["auth.json"]

    def test_mode_applied(self, tmp_path: Path) -> None:
        target = tmp_path / "auth.json"
        atomic_write(target, "{}", mode=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_failure_leaves_original_and_no_temp(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = tmp_path / "auth.json"
        target.write_text("original")

        def _fail(src: str, dst: object) -> None:
            raise OSError("rename failed")

        monkeypatch.setattr("envauth.files.os.replace", _fail)
        with pytest.raises(OSError, match="rename failed"):
            atomic_write(target, "new")

        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["auth.json"]

    def test_parent_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(OSError):
            atomic_write(blocker / "auth.json", "{}")
