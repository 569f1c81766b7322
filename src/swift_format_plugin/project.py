"""Minimal model of the host project: content roots, exclusions and metadata folder."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

METADATA_FOLDER_NAME = ".idea"


@dataclass
class Project:
    """A project opened in the host.

    ``content_roots`` default to ``root``. ``excluded`` holds gitignore-style
    patterns, relative to ``root``, naming folders that belong to a content
    root but are excluded from the project (build output and the like).
    ``is_default`` marks the template project new projects inherit from.
    """

    root: Path
    content_roots: List[Path] = field(default_factory=list)
    excluded: Sequence[str] = ()
    is_default: bool = False

    def __post_init__(self) -> None:
        self.root = Path(self.root).resolve()
        self.content_roots = [Path(path).resolve() for path in self.content_roots] or [self.root]
        self._exclusions = (
            PathSpec.from_lines(GitWildMatchPattern, self.excluded) if self.excluded else None
        )

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def metadata_path(self) -> Path:
        """Folder holding the project's host settings (``.idea``)."""

        return self.root / METADATA_FOLDER_NAME

    def is_metadata_path(self, path: Path | str) -> bool:
        return Path(path).resolve() == self.metadata_path.resolve()

    def is_excluded(self, path: Path) -> bool:
        if self._exclusions is None:
            return False
        resolved = path.resolve()
        if not resolved.is_relative_to(self.root):
            return False
        relative = resolved.relative_to(self.root).as_posix()
        if relative == ".":
            return False
        return self._exclusions.match_file(relative) or self._exclusions.match_file(relative + "/")

    def content_root_for(self, path: Path, *, honor_exclusions: bool = True) -> Optional[Path]:
        """Return the content root containing ``path``.

        With ``honor_exclusions`` an excluded folder (or anything below one) has
        no content root.
        """

        resolved = path.resolve()
        candidates = [root for root in self.content_roots if resolved.is_relative_to(root)]
        if not candidates:
            return None
        if honor_exclusions and any(
            self.is_excluded(ancestor)
            for ancestor in (resolved, *resolved.parents)
            if ancestor.is_relative_to(self.root)
        ):
            return None
        return max(candidates, key=lambda root: len(root.parts))

    def is_in_content(self, path: Path) -> bool:
        return self.content_root_for(path) is not None


__all__ = ["METADATA_FOLDER_NAME", "Project"]
