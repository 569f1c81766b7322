"""Application bootstrap for the swift-format editor GUI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import QTimer, Qt
from PySide6.QtWidgets import QApplication, QMessageBox, QStyle

from ..errors import SettingsError
from ..project import Project
from ..settings import SettingsStore
from .main_window import MainWindow


def _init_logging() -> None:
    """Configure loguru to play nicely with the GUI."""

    # Remove default stderr handler so log messages flow through custom sinks.
    logger.remove()
    log_dir = Path.home() / ".swift_format_plugin"
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "gui.log"
    logger.add(logfile, rotation="1 week", retention=5, level="INFO")


def _open_target(argv: list[str]) -> tuple[Project, Path | None]:
    """Interpret ``argv[1]`` as either a project folder or a file to edit."""

    if len(argv) < 2:
        return Project(Path.cwd()), None
    target = Path(argv[1]).expanduser().resolve()
    if target.is_dir():
        return Project(target), None
    return Project(target.parent), target


def main() -> int:
    """Entry point used by setuptools and PyInstaller."""

    _init_logging()
    policy = getattr(Qt.HighDpiScaleFactorRoundingPolicy, "PassThrough", None)
    if policy is not None and hasattr(QApplication, "setHighDpiScaleFactorRoundingPolicy"):
        QApplication.setHighDpiScaleFactorRoundingPolicy(policy)
    app = QApplication(sys.argv)
    app.setApplicationName("swift-format")

    project, path = _open_target(sys.argv)
    try:
        store = SettingsStore.load(project)
    except SettingsError as exc:
        logger.error("{}", exc)
        QMessageBox.critical(None, "swift-format", str(exc))
        return 4

    window = MainWindow(project, store, path)
    window.setWindowIcon(window.style().standardIcon(QStyle.SP_FileIcon))
    window.show()
    QTimer.singleShot(0, window.initialize)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
