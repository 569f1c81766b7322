"""Shared value types: formatter outcomes, text ranges and notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class Success:
    """swift-format exited with status zero; ``formatted_text`` is its stdout verbatim."""

    formatted_text: str


@dataclass(frozen=True, slots=True)
class FailedToStart:
    """The executable could not be spawned."""

    message: str = "Failed to launch swift-format."


@dataclass(frozen=True, slots=True)
class BadSyntax:
    """swift-format rejected the document as unparsable."""

    message: str


@dataclass(frozen=True, slots=True)
class UnknownFailure:
    message: str = "Something went wrong running swift-format"
    cause: Optional[BaseException] = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The caller cancelled the run; nothing is replaced and nothing is reported."""


FormatOutcome = Union[Success, FailedToStart, BadSyntax, UnknownFailure, Cancelled]


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """Half-open ``[start, end)`` character range of a document."""

    start: int
    end: int

    @classmethod
    def all_of(cls, text: str) -> "TextRange":
        return cls(0, len(text))


class MessageLevel(str, Enum):
    """Severity for user-facing notifications."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class NotificationAction(str, Enum):
    ENABLE = "Enable"
    CONFIGURE = "Configure"
    OPEN_SETTINGS = "Open Settings"


@dataclass(frozen=True, slots=True)
class Notification:
    """A balloon-style message a host shows to the user, with optional actions."""

    level: MessageLevel
    text: str
    actions: Tuple[NotificationAction, ...] = ()


__all__ = [
    "BadSyntax",
    "Cancelled",
    "FailedToStart",
    "FormatOutcome",
    "MessageLevel",
    "Notification",
    "NotificationAction",
    "Success",
    "TextRange",
    "UnknownFailure",
]
