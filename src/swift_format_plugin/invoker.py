"""Run the external ``swift-format`` process and classify what it did."""

from __future__ import annotations

import re
import subprocess
import threading
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from .models import BadSyntax, Cancelled, FailedToStart, FormatOutcome, Success, UnknownFailure
from .project import Project
from .resolver import materialized_config, resolve_configuration
from .settings import SettingsState

FORMAT_ARGUMENTS = ("format", "--parallel", "--ignore-unparsable-files")

# swift-format reports unparsable input on stderr with one of these markers.
_FATAL_ERROR_MARKER = re.compile(
    r"fatal error|invalid (?:or unrecognized )?swift syntax|unable to format .*syntax",
    re.IGNORECASE,
)

POLL_INTERVAL = 0.05


def build_arguments(executable: Union[str, Path], config_path: Optional[Path] = None) -> List[str]:
    arguments = [str(executable), *FORMAT_ARGUMENTS]
    if config_path is not None:
        arguments.extend(["--configuration", str(config_path)])
    return arguments


def is_syntax_failure(diagnostics: str) -> bool:
    return bool(_FATAL_ERROR_MARKER.search(diagnostics or ""))


def classify(returncode: int, stdout: str, stderr: str) -> FormatOutcome:
    """Map a finished process onto an outcome."""

    if returncode == 0:
        return Success(stdout)
    diagnostics = (stderr or "").strip()
    if is_syntax_failure(diagnostics):
        return BadSyntax(f"The file could not be safely reformatted: {diagnostics}")
    message = f"swift-format exited with status {returncode}"
    if diagnostics:
        message = f"{message}: {diagnostics}"
    return UnknownFailure(message)


class SwiftFormatCLI:
    """Interact with an external ``swift-format`` executable.

    Each call owns its child process; instances hold no per-call state and may
    be shared between threads.
    """

    def __init__(self, executable_path: Union[str, Path], *, poll_interval: float = POLL_INTERVAL) -> None:
        self.executable_path = str(executable_path).strip()
        self.poll_interval = poll_interval

    def format_text(
        self,
        text: str,
        *,
        config_path: Optional[Path] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> FormatOutcome:
        """Pipe ``text`` through swift-format and wait for it to finish.

        Setting ``cancel_event`` kills the child and yields :class:`Cancelled`.
        """

        if not self.executable_path:
            logger.warning("No swift-format executable configured")
            return FailedToStart()
        if cancel_event is not None and cancel_event.is_set():
            return Cancelled()

        cmd = build_arguments(self.executable_path, config_path)
        logger.debug("Running swift-format command: {}", " ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Failed to launch {}: {}", self.executable_path, exc)
            return FailedToStart()

        try:
            pending_input: Optional[bytes] = text.encode("utf-8")
            while True:
                try:
                    stdout, stderr = process.communicate(pending_input, timeout=self.poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    # Input is handed over on the first call only.
                    pending_input = None
                    if cancel_event is not None and cancel_event.is_set():
                        logger.info("swift-format run cancelled; terminating pid {}", process.pid)
                        process.kill()
                        process.communicate()
                        return Cancelled()
        except Exception as exc:
            logger.exception("swift-format run failed")
            process.kill()
            process.wait()
            return UnknownFailure(f"Something went wrong running swift-format: {exc}", exc)

        diagnostics = stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            logger.debug("swift-format stderr: {}", diagnostics)
        return classify(process.returncode, stdout.decode("utf-8", errors="replace"), diagnostics)

    def format_with_settings(
        self,
        text: str,
        settings: SettingsState,
        project: Project,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> FormatOutcome:
        """Format ``text`` using the configuration selected by ``settings``.

        ``settings`` should be a snapshot; any temporary configuration file lives
        only for the duration of this call.
        """

        resolution = resolve_configuration(settings, project)
        with materialized_config(resolution) as config_path:
            return self.format_text(text, config_path=config_path, cancel_event=cancel_event)


__all__ = [
    "FORMAT_ARGUMENTS",
    "SwiftFormatCLI",
    "build_arguments",
    "classify",
    "is_syntax_failure",
]
