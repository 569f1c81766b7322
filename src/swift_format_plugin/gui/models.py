"""Data models used by the GUI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class FormatRequest:
    """Snapshot of the document a reformat was requested for."""

    path: Path
    text: str
    revision: int


__all__ = ["FormatRequest"]
