"""Editor window that reformats Swift documents through swift-format."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from loguru import logger
from PySide6.QtCore import Qt, QThread
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QSplitter,
)

from ..errors import SettingsError
from ..formatter import FormatResult, SwiftFormatter
from ..models import Cancelled, MessageLevel, Notification, NotificationAction
from ..project import Project
from ..settings import SettingsStore, initialize_settings
from ..suggest import suggest_executable
from .logging_bridge import LogBridge
from .models import FormatRequest
from .settings_dialog import SettingsDialog
from .views import EditorView, LogView
from .workers import FormatWorker

_UNTITLED = "Untitled.swift"


class MainWindow(QMainWindow):
    """Single-document editor with a Code > Reformat action."""

    def __init__(self, project: Project, store: SettingsStore, path: Optional[Path] = None) -> None:
        super().__init__()
        self.resize(1080, 760)

        self._project = project
        self._store = store
        self._formatter = SwiftFormatter(project, store)
        self._threads: List[QThread] = []
        self._active_worker: Optional[FormatWorker] = None
        self._path: Optional[Path] = None

        splitter = QSplitter(Qt.Vertical, self)
        self._editor = EditorView(parent=splitter)
        self._log_view = LogView(parent=splitter)
        splitter.addWidget(self._editor)
        splitter.addWidget(self._log_view)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        self._log_bridge = LogBridge()
        self._log_bridge.message_emitted.connect(self._log_view.append_message)

        self._build_menus()
        self._update_title()
        if path is not None:
            self.open_file(path)

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("&Open…", self)
        open_action.setShortcut(QKeySequence.Open)
        open_action.triggered.connect(self._choose_file)
        file_menu.addAction(open_action)
        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.Save)
        save_action.triggered.connect(self.save_file)
        file_menu.addAction(save_action)
        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        code_menu = self.menuBar().addMenu("&Code")
        self._reformat_action = QAction("&Reformat Code", self)
        self._reformat_action.setShortcut(QKeySequence("Ctrl+Alt+L"))
        self._reformat_action.triggered.connect(self.reformat)
        code_menu.addAction(self._reformat_action)
        self._cancel_action = QAction("&Cancel Reformat", self)
        self._cancel_action.setEnabled(False)
        self._cancel_action.triggered.connect(self.cancel_reformat)
        code_menu.addAction(self._cancel_action)
        code_menu.addSeparator()
        settings_action = QAction("swift-format &Settings…", self)
        settings_action.triggered.connect(self.open_settings)
        code_menu.addAction(settings_action)

    # ------------------------------------------------------------------
    # First run
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Record the initial plugin state and tell the user how to proceed."""

        notification = initialize_settings(self._store, suggest_executable)
        if notification is not None:
            self._save_settings()
            self._show_notification(notification)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    def _document_path(self) -> Path:
        return self._path or self._project.root / _UNTITLED

    def _update_title(self) -> None:
        self.setWindowTitle(f"{self._document_path().name} - {self._project.name}")

    def _choose_file(self) -> None:
        chosen, _ = QFileDialog.getOpenFileName(
            self, "Open Swift file", str(self._project.root), "Swift files (*.swift);;All files (*)"
        )
        if chosen:
            self.open_file(Path(chosen))

    def open_file(self, path: Path) -> None:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Cannot open {}: {}", path, exc)
            QMessageBox.critical(self, "Open failed", str(exc))
            return
        self._path = path.resolve()
        self._editor.setPlainText(text)
        self._editor.document().setModified(False)
        self._update_title()
        logger.info("Opened {}", self._path)

    def save_file(self) -> None:
        if self._path is None:
            chosen, _ = QFileDialog.getSaveFileName(
                self, "Save Swift file", str(self._document_path()), "Swift files (*.swift)"
            )
            if not chosen:
                return
            self._path = Path(chosen)
        try:
            self._path.write_text(self._editor.toPlainText(), encoding="utf-8")
        except OSError as exc:
            logger.error("Cannot save {}: {}", self._path, exc)
            QMessageBox.critical(self, "Save failed", str(exc))
            return
        self._editor.document().setModified(False)
        self._update_title()
        logger.info("Saved {}", self._path)

    # ------------------------------------------------------------------
    # Worker orchestration helpers
    # ------------------------------------------------------------------
    def _launch_worker(self, worker, *, on_finished=None, on_failed=None) -> None:
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        def _cleanup() -> None:
            thread.quit()
            thread.wait()
            worker.deleteLater()

        worker.finished.connect(lambda *args: self._handle_result(_cleanup, on_finished, *args))
        worker.failed.connect(lambda *args: self._handle_result(_cleanup, on_failed, *args))

        thread.finished.connect(thread.deleteLater)
        self._threads.append(thread)
        thread.finished.connect(lambda: self._threads.remove(thread))
        thread.start()

    @staticmethod
    def _handle_result(cleanup, callback, *args) -> None:
        cleanup()
        if callback:
            callback(*args)

    # ------------------------------------------------------------------
    # Reformat
    # ------------------------------------------------------------------
    def reformat(self) -> None:
        if self._active_worker is not None:
            logger.info("A reformat is already running")
            return
        request = FormatRequest(
            path=self._document_path(),
            text=self._editor.toPlainText(),
            revision=self._editor.document().revision(),
        )
        worker = FormatWorker(self._formatter, request)
        self._set_running(worker)
        self._log_view.set_status(f"Reformatting {request.path.name}…")
        self._launch_worker(worker, on_finished=self._reformat_finished, on_failed=self._reformat_failed)

    def cancel_reformat(self) -> None:
        if self._active_worker is not None:
            self._active_worker.cancel()

    def _set_running(self, worker: Optional[FormatWorker]) -> None:
        self._active_worker = worker
        self._reformat_action.setEnabled(worker is None)
        self._cancel_action.setEnabled(worker is not None)

    def _reformat_finished(self, request: FormatRequest, result: FormatResult) -> None:
        self._set_running(None)
        if not result.handled:
            self._log_view.set_status(f"{request.path.name} is not formatted by swift-format.")
            return
        if isinstance(result.outcome, Cancelled):
            self._log_view.set_status("Reformat cancelled.")
            return
        if result.notification is not None:
            self._log_view.set_status("Reformat failed.")
            self._show_notification(result.notification)
            return
        if self._editor.document().revision() != request.revision:
            logger.warning("Document changed while formatting; discarding result")
            self._log_view.set_status("Document changed while formatting; result discarded.")
            return
        if self._editor.apply_replacements(result.replacements):
            self._log_view.set_status(f"Reformatted {request.path.name}.")
        else:
            self._log_view.set_status(f"{request.path.name} is already formatted.")

    def _reformat_failed(self, message: str) -> None:
        self._set_running(None)
        self._log_view.set_status(message)
        QMessageBox.critical(self, "Reformat failed", message)

    # ------------------------------------------------------------------
    # Notifications and settings
    # ------------------------------------------------------------------
    def _show_notification(self, notification: Notification) -> None:
        box = QMessageBox(self)
        box.setWindowTitle("swift-format")
        box.setText(notification.text)
        icons = {
            MessageLevel.ERROR: QMessageBox.Critical,
            MessageLevel.WARNING: QMessageBox.Warning,
            MessageLevel.INFO: QMessageBox.Information,
        }
        box.setIcon(icons[notification.level])
        buttons = {
            box.addButton(action.value, QMessageBox.ActionRole): action
            for action in notification.actions
        }
        box.addButton(QMessageBox.Close)
        box.exec()
        chosen = buttons.get(box.clickedButton())
        if chosen is not None:
            self._run_action(chosen)

    def _run_action(self, action: NotificationAction) -> None:
        if action is NotificationAction.ENABLE:
            self._store.update(lambda state: state.set_enabled(True, project=self._project))
            if self._save_settings():
                logger.info("swift-format enabled for {}", self._project.name)
        else:
            self.open_settings()

    def _save_settings(self) -> bool:
        try:
            self._store.save()
        except SettingsError as exc:
            logger.exception("Failed to save settings")
            QMessageBox.critical(self, "Settings error", str(exc))
            return False
        return True

    def open_settings(self) -> None:
        dialog = SettingsDialog(self._project, self._store, parent=self)
        dialog.exec()

    def closeEvent(self, event) -> None:  # pragma: no cover - UI only
        self.cancel_reformat()
        for thread in list(self._threads):
            thread.quit()
            thread.wait()
        if hasattr(self, "_log_bridge"):
            self._log_bridge.close()
        super().closeEvent(event)


__all__ = ["MainWindow"]
