"""Work out which configuration file, if any, swift-format should be given."""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from loguru import logger

from .configuration import (
    CONFIG_FILE_NAME,
    Configuration,
    from_json,
    load_configuration,
    save_configuration,
    to_json,
)
from .errors import ConfigParseError, ConfigWriteError
from .project import Project
from .settings import ConfigMode, InlineConfig, ProjectFolderConfig, SettingsState

PATH_NOT_SPECIFIED = "Path not specified"
PATH_DOES_NOT_EXIST = "Path does not exist"
FOLDER_PATH_EXPECTED = "Folder path expected"
FOLDER_OUTSIDE_PROJECT = "Folder must be within the project"
FOLDER_EXCLUDED = "Folder is excluded. Select a folder within the project"


@dataclass(frozen=True, slots=True)
class ConfigResolution:
    """Outcome of resolving the configuration source for one invocation.

    At most one of ``config_file`` and ``inline_json`` is set. ``error`` carries
    the validation message when a project folder was rejected.
    """

    mode: ConfigMode
    config_file: Optional[Path] = None
    inline_json: Optional[str] = None
    error: Optional[str] = None

    @property
    def uses_configuration(self) -> bool:
        return self.config_file is not None or self.inline_json is not None


def _absolute(project: Project, path: Union[str, Path]) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = project.root / candidate
    return candidate


def folder_path_error(project: Project, path: Union[str, Path, None]) -> Optional[str]:
    """Validate a folder chosen to hold the ``.swift-format`` file.

    Returns ``None`` when the folder is acceptable, otherwise the message to
    show next to the path field. The project metadata folder is always
    accepted, even before it exists.
    """

    if path is None or not str(path).strip():
        return PATH_NOT_SPECIFIED

    folder = _absolute(project, path)
    if project.is_metadata_path(folder):
        return None
    if not folder.exists():
        return PATH_DOES_NOT_EXIST
    if not folder.is_dir():
        return FOLDER_PATH_EXPECTED

    if project.content_root_for(folder, honor_exclusions=True) is None:
        if project.content_root_for(folder, honor_exclusions=False) is None:
            return FOLDER_OUTSIDE_PROJECT
        return FOLDER_EXCLUDED
    return None


def config_file_path(settings: SettingsState, project: Project) -> Optional[Path]:
    """Path of the project-folder configuration file, when that storage is valid."""

    mode = settings.storage_mode
    if not isinstance(mode, ProjectFolderConfig):
        return None
    if folder_path_error(project, mode.folder_path) is not None:
        return None
    return _absolute(project, mode.folder_path) / CONFIG_FILE_NAME


def resolve_configuration(settings: SettingsState, project: Project) -> ConfigResolution:
    mode = settings.custom_config_mode
    if isinstance(mode, ProjectFolderConfig):
        error = folder_path_error(project, mode.folder_path)
        if error is not None:
            logger.warning(
                "Ignoring configuration folder {!r}: {}; using swift-format defaults",
                mode.folder_path,
                error,
            )
            return ConfigResolution(mode, error=error)
        return ConfigResolution(mode, config_file=_absolute(project, mode.folder_path) / CONFIG_FILE_NAME)
    if isinstance(mode, InlineConfig):
        return ConfigResolution(mode, inline_json=mode.config_json)
    return ConfigResolution(mode)


def _write_temp_config(config_json: str) -> Optional[Path]:
    try:
        handle, name = tempfile.mkstemp(prefix=CONFIG_FILE_NAME)
    except OSError as exc:
        logger.error("Couldn't create temporary configuration file: {}", exc)
        return None

    path = Path(name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8", newline="") as stream:
            stream.write(config_json)
    except OSError as exc:
        logger.error("Couldn't write configuration to {}: {}", path, exc)
        _delete_temp_config(path)
        return None
    return path


def _delete_temp_config(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Couldn't delete temporary configuration {}: {}", path, exc)


@contextmanager
def materialized_config(resolution: ConfigResolution) -> Iterator[Optional[Path]]:
    """Yield the path to hand to ``--configuration``, or ``None``.

    Inline JSON is written to a fresh temporary file owned by this context and
    removed when it exits, whatever the exit path.
    """

    if resolution.config_file is not None:
        if resolution.config_file.exists():
            yield resolution.config_file
        else:
            logger.debug("No configuration file at {}", resolution.config_file)
            yield None
        return

    if resolution.inline_json is None:
        yield None
        return

    temp_path = _write_temp_config(resolution.inline_json)
    try:
        yield temp_path
    finally:
        if temp_path is not None:
            _delete_temp_config(temp_path)


def read_configuration(settings: SettingsState, project: Project) -> Optional[Configuration]:
    """Load the stored configuration for editing; unreadable data yields ``None``."""

    mode = settings.storage_mode
    try:
        if isinstance(mode, InlineConfig):
            return from_json(mode.config_json)
        path = config_file_path(settings, project)
        if path is None or not path.exists():
            return None
        return load_configuration(path)
    except ConfigParseError as exc:
        logger.warning("Couldn't read configuration: {}", exc)
        return None


def write_configuration(
    configuration: Configuration, settings: SettingsState, project: Project
) -> SettingsState:
    """Store ``configuration`` where the settings say it lives.

    Project-folder storage writes the ``.swift-format`` file; otherwise the JSON
    is kept inline. Returns the (possibly updated) settings; write failures are
    logged and leave the previous file untouched.
    """

    updated = settings.model_copy(deep=True)
    if isinstance(settings.storage_mode, ProjectFolderConfig):
        path = config_file_path(settings, project)
        if path is None:
            logger.error("Couldn't write configuration to file: invalid folder {!r}", settings.config)
            return updated
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            save_configuration(configuration, path)
        except (ConfigWriteError, OSError) as exc:
            logger.error("Couldn't write configuration to file: {}", exc)
        else:
            logger.debug("Wrote configuration to {}", path)
        return updated

    updated.config = to_json(configuration)
    return updated


__all__ = [
    "ConfigResolution",
    "FOLDER_EXCLUDED",
    "FOLDER_OUTSIDE_PROJECT",
    "FOLDER_PATH_EXPECTED",
    "PATH_DOES_NOT_EXIST",
    "PATH_NOT_SPECIFIED",
    "config_file_path",
    "folder_path_error",
    "materialized_config",
    "read_configuration",
    "resolve_configuration",
    "write_configuration",
]
