"""Per-project plugin settings and their YAML persistence."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SettingsError
from .models import MessageLevel, Notification, NotificationAction
from .project import Project

SETTINGS_FILE_NAME = "swift-format.yml"


class EnabledState(str, Enum):
    UNKNOWN = "UNKNOWN"
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


@dataclass(frozen=True, slots=True)
class NoCustomConfig:
    """swift-format runs with its built-in defaults."""


@dataclass(frozen=True, slots=True)
class ProjectFolderConfig:
    """Configuration lives in ``<folder_path>/.swift-format``."""

    folder_path: str


@dataclass(frozen=True, slots=True)
class InlineConfig:
    """Configuration JSON is stored inside the settings themselves."""

    config_json: str


ConfigMode = Union[NoCustomConfig, ProjectFolderConfig, InlineConfig]


class SettingsState(BaseModel):
    """Persisted settings record.

    ``config`` holds either a folder path or an inline JSON document; a value
    starting with ``{`` is JSON.
    """

    model_config = ConfigDict(populate_by_name=True)

    enabled: EnabledState = EnabledState.UNKNOWN
    swift_format_path: str = Field(default="", alias="swiftFormatPath")
    use_custom_configuration: bool = Field(default=False, alias="useCustomConfiguration")
    config: Optional[str] = None

    @property
    def is_enabled(self) -> bool:
        return self.enabled == EnabledState.ENABLED

    @property
    def is_uninitialized(self) -> bool:
        return self.enabled == EnabledState.UNKNOWN

    @property
    def storage_mode(self) -> ConfigMode:
        """Where configuration is stored, regardless of whether it is in use."""

        if not self.config:
            return NoCustomConfig()
        if self.config.startswith("{"):
            return InlineConfig(self.config)
        return ProjectFolderConfig(self.config)

    @property
    def custom_config_mode(self) -> ConfigMode:
        if not self.use_custom_configuration:
            return NoCustomConfig()
        return self.storage_mode

    def set_config_mode(self, mode: ConfigMode) -> None:
        if isinstance(mode, NoCustomConfig):
            self.use_custom_configuration = False
        elif isinstance(mode, ProjectFolderConfig):
            self.use_custom_configuration = True
            self.config = mode.folder_path
        else:
            self.use_custom_configuration = True
            self.config = mode.config_json

    def set_enabled(self, enabled: bool, *, project: Optional[Project] = None) -> None:
        """Enable or disable the plugin.

        The default (template) project cannot store DISABLED: projects created
        from it should still be offered the first-run prompt.
        """

        if enabled:
            self.enabled = EnabledState.ENABLED
        elif project is not None and project.is_default:
            self.enabled = EnabledState.UNKNOWN
        else:
            self.enabled = EnabledState.DISABLED


def settings_path(project: Project) -> Path:
    return project.metadata_path / SETTINGS_FILE_NAME


class SettingsStore:
    """Thread-safe holder of one project's :class:`SettingsState`.

    Formatting reads a single :meth:`snapshot` at the start of each run so that
    edits from the settings UI never race an invocation in flight.
    """

    def __init__(self, project: Project, state: Optional[SettingsState] = None) -> None:
        self.project = project
        self._state = state or SettingsState()
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return settings_path(self.project)

    @classmethod
    def load(cls, project: Project) -> "SettingsStore":
        """Load settings from the project's metadata folder, or start fresh."""

        path = settings_path(project)
        if not path.exists():
            logger.debug("No settings at {}; starting from defaults", path)
            return cls(project)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise SettingsError(f"Failed to read settings from {path}: {exc}") from exc

        try:
            state = SettingsState.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(f"Invalid settings in {path}: {exc}") from exc
        return cls(project, state)

    def save(self) -> None:
        rendered = self.snapshot().model_dump(mode="json", by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(rendered, sort_keys=False), encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Failed to write settings to {self.path}: {exc}") from exc
        logger.debug("Saved settings to {}", self.path)

    def snapshot(self) -> SettingsState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def update(self, mutate: Callable[[SettingsState], None]) -> SettingsState:
        """Apply ``mutate`` to a copy of the state and publish it atomically."""

        with self._lock:
            state = self._state.model_copy(deep=True)
            mutate(state)
            self._state = state
            return state.model_copy(deep=True)

    def replace(self, state: SettingsState) -> None:
        with self._lock:
            self._state = state.model_copy(deep=True)


def initialize_settings(
    store: SettingsStore, suggest: Callable[[], Optional[Path]]
) -> Optional[Notification]:
    """First-open handling for a project whose enabled state is still UNKNOWN.

    The plugin is switched off, the executable path is auto-discovered and the
    returned notification asks the user to either enable the plugin or
    configure the executable. Already initialized projects yield ``None``.
    """

    if not store.snapshot().is_uninitialized:
        return None

    discovered = suggest()

    def _initialize(state: SettingsState) -> None:
        state.enabled = EnabledState.DISABLED
        state.swift_format_path = str(discovered) if discovered else ""

    state = store.update(_initialize)
    if state.swift_format_path.strip():
        logger.info("Found swift-format at {}", state.swift_format_path)
        return Notification(
            MessageLevel.INFO,
            "The plugin is disabled by default.",
            (NotificationAction.ENABLE,),
        )
    logger.info("swift-format executable not found; configuration required")
    return Notification(
        MessageLevel.WARNING,
        "The plugin needs to be configured.",
        (NotificationAction.CONFIGURE,),
    )


__all__ = [
    "ConfigMode",
    "EnabledState",
    "InlineConfig",
    "NoCustomConfig",
    "ProjectFolderConfig",
    "SETTINGS_FILE_NAME",
    "SettingsState",
    "SettingsStore",
    "initialize_settings",
    "settings_path",
]
