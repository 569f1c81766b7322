"""Guess where the ``swift-format`` executable is installed."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator, Optional

SWIFT_FORMAT_TOOL = "swift-format"

_MAC_BIN_DIRS = (Path("/usr/local/bin"), Path("/opt/homebrew/bin"))


def _path_bin_dirs() -> Iterator[Path]:
    for entry in os.environ.get("PATH", "").split(os.pathsep):
        entry = entry.strip()
        if entry and Path(entry).is_dir():
            yield Path(entry)


def _mac_bin_dirs() -> Iterator[Path]:
    if sys.platform == "darwin":
        yield from _MAC_BIN_DIRS


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def suggest_executable(program_name: str = SWIFT_FORMAT_TOOL) -> Optional[Path]:
    """Return the first executable ``program_name`` on PATH or in the usual macOS folders.

    This touches the filesystem to check that each candidate exists and is
    executable.
    """

    for bin_dir in (*_path_bin_dirs(), *_mac_bin_dirs()):
        candidate = bin_dir / program_name
        if _is_executable(candidate):
            return candidate
    return None


__all__ = ["SWIFT_FORMAT_TOOL", "suggest_executable"]
