"""Route reformat requests for Swift documents through swift-format.

Every reformat entry point a host offers (whole file, selected ranges, ranges
with context) ends up formatting the whole document: swift-format has no range
mode, and the result replaces the document's full text.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional

from loguru import logger

from .invoker import SwiftFormatCLI
from .models import (
    BadSyntax,
    FailedToStart,
    FormatOutcome,
    MessageLevel,
    Notification,
    NotificationAction,
    Success,
    TextRange,
    UnknownFailure,
)
from .project import Project
from .settings import SettingsState, SettingsStore

SWIFT_FILE_SUFFIX = ".swift"


def should_format(path: Path, settings: SettingsState) -> bool:
    """Whether swift-format, rather than the host's own formatter, handles ``path``."""

    return path.suffix.lower() == SWIFT_FILE_SUFFIX and settings.is_enabled


def get_replacements(outcome: FormatOutcome, text: str) -> Dict[TextRange, str]:
    if isinstance(outcome, Success):
        return {TextRange.all_of(text): outcome.formatted_text}
    return {}


def perform_replacements(text: str, replacements: Mapping[TextRange, str]) -> str:
    """Apply replacements back to front so earlier offsets stay valid."""

    for text_range in sorted(replacements, key=lambda item: item.start, reverse=True):
        text = text[: text_range.start] + replacements[text_range] + text[text_range.end :]
    return text


def notification_for(outcome: FormatOutcome) -> Optional[Notification]:
    if isinstance(outcome, FailedToStart):
        return Notification(MessageLevel.WARNING, outcome.message, (NotificationAction.CONFIGURE,))
    if isinstance(outcome, BadSyntax):
        return Notification(MessageLevel.WARNING, outcome.message)
    if isinstance(outcome, UnknownFailure):
        return Notification(MessageLevel.ERROR, outcome.message, (NotificationAction.OPEN_SETTINGS,))
    return None


@dataclass(slots=True)
class FormatResult:
    """What a reformat request produced for one document."""

    path: Path
    original_text: str
    outcome: Optional[FormatOutcome] = None
    replacements: Dict[TextRange, str] = field(default_factory=dict)
    notification: Optional[Notification] = None

    @property
    def handled(self) -> bool:
        """False when the document was left to the host's own formatter."""

        return self.outcome is not None

    @property
    def new_text(self) -> str:
        return perform_replacements(self.original_text, self.replacements)

    @property
    def changed(self) -> bool:
        return self.new_text != self.original_text


class SwiftFormatter:
    """Format Swift documents of one project with the configured executable."""

    def __init__(
        self,
        project: Project,
        store: SettingsStore,
        *,
        cli_factory: Callable[[str], SwiftFormatCLI] = SwiftFormatCLI,
    ) -> None:
        self.project = project
        self.store = store
        self._cli_factory = cli_factory

    def reformat_text(
        self,
        path: Path,
        text: str,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> FormatResult:
        settings = self.store.snapshot()
        result = FormatResult(path=path, original_text=text)
        if not should_format(path, settings):
            logger.debug("Not formatting {} with swift-format", path)
            return result

        cli = self._cli_factory(settings.swift_format_path)
        outcome = cli.format_with_settings(text, settings, self.project, cancel_event=cancel_event)
        result.outcome = outcome
        result.replacements = get_replacements(outcome, text)
        result.notification = notification_for(outcome)
        if result.notification is not None:
            logger.warning("swift-format on {}: {}", path, result.notification.text)
        return result

    def reformat_ranges(
        self,
        path: Path,
        text: str,
        ranges: Iterable[TextRange],
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> FormatResult:
        ranges = list(ranges)
        logger.debug("Formatting whole document {} for {} requested range(s)", path, len(ranges))
        return self.reformat_text(path, text, cancel_event=cancel_event)

    def reformat_file(
        self,
        path: Path,
        *,
        write: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> FormatResult:
        """Format a file on disk, writing it back only if the text changed.

        Line endings are preserved byte for byte. Files swift-format does not
        handle are never read; a file that is not valid UTF-8 yields an
        :class:`UnknownFailure` instead of raising.
        """

        if not should_format(path, self.store.snapshot()):
            logger.debug("Not formatting {} with swift-format", path)
            return FormatResult(path=path, original_text="")

        try:
            text = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            outcome = UnknownFailure(f"Couldn't read {path.name} as UTF-8: {exc.reason}", exc)
            logger.warning("Skipping {}: {}", path, outcome.message)
            return FormatResult(
                path=path,
                original_text="",
                outcome=outcome,
                notification=notification_for(outcome),
            )

        result = self.reformat_text(path, text, cancel_event=cancel_event)
        if write and result.changed:
            path.write_bytes(result.new_text.encode("utf-8"))
            logger.info("Reformatted {}", path)
        return result


__all__ = [
    "FormatResult",
    "SWIFT_FILE_SUFFIX",
    "SwiftFormatter",
    "get_replacements",
    "notification_for",
    "perform_replacements",
    "should_format",
]
