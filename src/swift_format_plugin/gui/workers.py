"""Background worker that runs swift-format without freezing the editor."""

from __future__ import annotations

import threading

from loguru import logger
from PySide6.QtCore import QObject, Signal

from ..formatter import SwiftFormatter
from .models import FormatRequest


class FormatWorker(QObject):
    """Format one document in a background thread.

    ``finished`` carries ``(request, FormatResult)``. A cancelled run still
    finishes, with a ``Cancelled`` outcome and no replacements.
    """

    finished = Signal(object, object)
    failed = Signal(str)

    def __init__(self, formatter: SwiftFormatter, request: FormatRequest) -> None:
        super().__init__()
        self._formatter = formatter
        self._request = request
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        self._cancel_event.set()

    def run(self) -> None:
        try:
            result = self._formatter.reformat_text(
                self._request.path,
                self._request.text,
                cancel_event=self._cancel_event,
            )
        except Exception as exc:  # pragma: no cover - runtime error surface to GUI
            logger.exception("Formatting failed")
            self.failed.emit(f"Formatting failed: {exc}")
        else:
            self.finished.emit(self._request, result)


__all__ = ["FormatWorker"]
