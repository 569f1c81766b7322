"""Bridge loguru messages into Qt signals."""

from __future__ import annotations

from loguru import logger
from PySide6.QtCore import QObject, Signal


class LogBridge(QObject):
    """Forward loguru records to the editor's log pane."""

    message_emitted = Signal(str)

    def __init__(self, level: str = "INFO") -> None:
        super().__init__()
        self._sink_id = logger.add(self._sink, level=level, format="{time:HH:mm:ss} {level} {message}")

    def _sink(self, message) -> None:  # pragma: no cover - integrates with loguru internals
        self.message_emitted.emit(str(message).rstrip("\n"))

    def close(self) -> None:
        logger.remove(self._sink_id)


__all__ = ["LogBridge"]
