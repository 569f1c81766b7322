"""Editor and log widgets of the main window."""

from __future__ import annotations

from PySide6.QtGui import QFont, QFontDatabase, QTextCursor
from PySide6.QtWidgets import QLabel, QPlainTextEdit, QVBoxLayout, QWidget

from ..formatter import perform_replacements
from ..models import TextRange


def _qt_offset(text: str, offset: int) -> int:
    # Qt positions count UTF-16 code units, Python offsets count code points.
    return len(text[:offset].encode("utf-16-le")) // 2


class EditorView(QPlainTextEdit):
    """Plain-text editor holding the open document."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        font = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        font.setStyleHint(QFont.Monospace)
        self.setFont(font)
        self.setLineWrapMode(QPlainTextEdit.NoWrap)

    def apply_replacements(self, replacements: dict[TextRange, str]) -> bool:
        """Replace ranges inside one edit block so a single undo reverts the reformat."""

        if not replacements:
            return False
        original = self.toPlainText()
        if perform_replacements(original, replacements) == original:
            return False

        cursor = QTextCursor(self.document())
        cursor.beginEditBlock()
        try:
            for text_range in sorted(replacements, key=lambda item: item.start, reverse=True):
                cursor.setPosition(_qt_offset(original, text_range.start))
                cursor.setPosition(_qt_offset(original, text_range.end), QTextCursor.KeepAnchor)
                cursor.insertText(replacements[text_range])
        finally:
            cursor.endEditBlock()
        return True


class LogView(QWidget):
    """Status line plus streaming log output."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._status = QLabel("Ready.", self)
        self._status.setWordWrap(True)
        layout.addWidget(self._status)

        self._log = QPlainTextEdit(self)
        self._log.setReadOnly(True)
        self._log.setMaximumBlockCount(2000)
        layout.addWidget(self._log, stretch=1)

    def append_message(self, message: str) -> None:
        self._log.appendPlainText(message)
        self._log.verticalScrollBar().setValue(self._log.verticalScrollBar().maximum())

    def set_status(self, message: str) -> None:
        self._status.setText(message)

    def clear(self) -> None:
        self._log.clear()
        self._status.setText("Ready.")


__all__ = ["EditorView", "LogView"]
