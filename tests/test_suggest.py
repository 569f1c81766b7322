from __future__ import annotations

import sys
from pathlib import Path

import pytest
from swift_format_plugin.suggest import suggest_executable

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="relies on POSIX executable bits")


def test_finds_executable_on_path(tmp_path: Path, monkeypatch, fake_executable) -> None:
    executable = fake_executable("exit 0\n")
    monkeypatch.setenv("PATH", str(executable.parent))
    assert suggest_executable() == executable


def test_skips_non_executable_files(tmp_path: Path, monkeypatch) -> None:
    bin_dir = tmp_path / "plain"
    bin_dir.mkdir()
    (bin_dir / "swift-format").write_text("not a program", encoding="utf-8")
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.setattr(sys, "platform", "linux")
    assert suggest_executable() is None


def test_missing_path_entries_are_ignored(tmp_path: Path, monkeypatch, fake_executable) -> None:
    executable = fake_executable("exit 0\n")
    monkeypatch.setenv("PATH", f"{tmp_path / 'missing'}:{executable.parent}")
    assert suggest_executable() == executable
