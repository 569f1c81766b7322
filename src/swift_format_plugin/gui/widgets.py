"""Reusable Qt widgets for the swift-format plugin GUI."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)


class PathPicker(QWidget):
    """Line edit with a browse button and an inline validation message.

    ``validator`` maps the current text to an error message (or ``None``) and
    is re-run on every edit.
    """

    path_changed = Signal(str)

    def __init__(
        self,
        caption: str,
        *,
        mode: str = "file",
        placeholder: str | None = None,
        validator: Optional[Callable[[str], Optional[str]]] = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._caption = caption
        self._mode = mode
        self._validator = validator

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        self._row = row = QHBoxLayout()
        self._edit = QLineEdit(self)
        if placeholder:
            self._edit.setPlaceholderText(placeholder)
        row.addWidget(self._edit, stretch=1)
        self._browse = QPushButton("Browse…", self)
        self._browse.clicked.connect(self._choose_path)
        row.addWidget(self._browse)
        outer.addLayout(row)

        self._error = QLabel(self)
        self._error.setStyleSheet("color: #c0392b;")
        self._error.setVisible(False)
        outer.addWidget(self._error)

        self._edit.textChanged.connect(self._on_text_changed)

    def add_button(self, button: QPushButton) -> None:
        self._row.addWidget(button)

    def set_text(self, value: str) -> None:
        self._edit.setText(value)

    def text(self) -> str:
        return self._edit.text().strip()

    def error(self) -> Optional[str]:
        return self._validator(self.text()) if self._validator else None

    def _choose_path(self) -> None:
        current = self.text() or str(Path.home())
        if self._mode == "directory":
            chosen = QFileDialog.getExistingDirectory(self, self._caption, current)
        else:
            chosen, _ = QFileDialog.getOpenFileName(self, self._caption, current)
        if chosen:
            self._edit.setText(chosen)

    def _on_text_changed(self, text: str) -> None:
        message = self.error()
        self._error.setText(message or "")
        self._error.setVisible(bool(message))
        self.path_changed.emit(text)


class KeyValueLabel(QWidget):
    """Display a label/value pair."""

    def __init__(self, label: str, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        name = QLabel(f"<b>{label}:</b>", self)
        self._value = QLabel("—", self)
        self._value.setTextInteractionFlags(
            self._value.textInteractionFlags() | Qt.TextSelectableByMouse
        )
        layout.addWidget(name)
        layout.addWidget(self._value, stretch=1)

    def set_value(self, value: str | None) -> None:
        self._value.setText(value or "—")


__all__ = ["KeyValueLabel", "PathPicker"]
