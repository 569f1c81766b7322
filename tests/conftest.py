from __future__ import annotations

import stat
from pathlib import Path

import pytest
from swift_format_plugin.project import Project
from swift_format_plugin.settings import EnabledState, SettingsState, SettingsStore

# Fake swift-format that records its arguments and the configuration it was
# handed, then echoes stdin.
RECORDING_SCRIPT = """\
cfg=""
prev=""
for arg in "$@"; do
  if [ "$prev" = "--configuration" ]; then cfg="$arg"; fi
  prev="$arg"
done
printf '%s\\n' "$@" > "{args_file}"
if [ -n "$cfg" ]; then cat "$cfg" > "{config_file}"; fi
cat
"""


def write_executable(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def project(tmp_path: Path) -> Project:
    root = tmp_path / "MyApp"
    (root / ".idea").mkdir(parents=True)
    (root / "Sources").mkdir()
    (root / "build").mkdir()
    return Project(root, excluded=("build/",))


@pytest.fixture()
def fake_executable(tmp_path: Path):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _factory(body: str, name: str = "swift-format") -> Path:
        return write_executable(bin_dir / name, body)

    return _factory


@pytest.fixture()
def recording_executable(tmp_path: Path, fake_executable):
    """Return ``(executable, args_file, config_file)`` for the recording script."""

    args_file = tmp_path / "args.txt"
    config_file = tmp_path / "config-seen.json"
    executable = fake_executable(RECORDING_SCRIPT.format(args_file=args_file, config_file=config_file))
    return executable, args_file, config_file


@pytest.fixture()
def enabled_store(project: Project):
    def _factory(executable: Path | str, **fields) -> SettingsStore:
        state = SettingsState(enabled=EnabledState.ENABLED, swift_format_path=str(executable), **fields)
        return SettingsStore(project, state)

    return _factory
