"""Typer-based command-line host for the swift-format plugin."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .configuration import (
    Configuration,
    effective_rules,
    is_default,
    merge_with_defaults,
    restore_defaults,
    set_option,
    set_rule,
    to_json,
    unset_option,
)
from .errors import InvalidOptionError, SettingsError
from .formatter import SwiftFormatter
from .models import MessageLevel, Notification
from .project import Project
from .resolver import (
    config_file_path,
    folder_path_error,
    read_configuration,
    resolve_configuration,
    write_configuration,
)
from .rules import FORMATTER_RULE_KEYS, describe_rule
from .settings import (
    InlineConfig,
    NoCustomConfig,
    ProjectFolderConfig,
    SettingsState,
    SettingsStore,
    initialize_settings,
)
from .suggest import suggest_executable

app = typer.Typer(help="Reformat Swift sources with an external swift-format executable.")
settings_app = typer.Typer(help="Inspect and change the per-project plugin settings.")
config_app = typer.Typer(help="Edit the swift-format configuration used by the project.")
app.add_typer(settings_app, name="settings")
app.add_typer(config_app, name="config")

console = Console()

_LEVEL_STYLES = {
    MessageLevel.ERROR: "red",
    MessageLevel.WARNING: "yellow",
    MessageLevel.INFO: "cyan",
}

ProjectOption = typer.Option(
    Path("."), "--project", "-p", exists=True, file_okay=False, dir_okay=True, help="Project root"
)
ExcludeOption = typer.Option(
    None, "--exclude", help="Gitignore-style pattern excluded from the project (repeatable)"
)


def _configure_logging(level: str, log_file: Path | None) -> None:
    logger.remove()
    logger.add(lambda message: console.print(message, end="", markup=False, highlight=False), level=level)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level)


def _open_project(project_dir: Path, exclude: Optional[List[str]]) -> Tuple[Project, SettingsStore]:
    project = Project(project_dir, excluded=tuple(exclude or ()))
    try:
        store = SettingsStore.load(project)
    except SettingsError as exc:
        console.print(f"[red]Settings error:[/red] {exc}")
        raise typer.Exit(code=4)
    return project, store


def _save(store: SettingsStore) -> None:
    try:
        store.save()
    except SettingsError as exc:
        console.print(f"[red]Settings error:[/red] {exc}")
        raise typer.Exit(code=4)


def _print_notification(notification: Notification, prefix: str = "") -> None:
    style = _LEVEL_STYLES[notification.level]
    actions = ""
    if notification.actions:
        actions = " (" + ", ".join(action.value for action in notification.actions) + ")"
    console.print(f"[{style}]{prefix}{notification.text}[/{style}]{actions}", markup=True, soft_wrap=True)


def _describe_mode(settings: SettingsState) -> str:
    mode = settings.custom_config_mode
    if isinstance(mode, ProjectFolderConfig):
        return f"project file in {mode.folder_path}"
    if isinstance(mode, InlineConfig):
        return "inline"
    return "none"


@app.command("format")
def format_command(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
    check: bool = typer.Option(False, "--check", help="Report files that would change without writing"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Reformat Swift FILES in place."""

    _configure_logging(log_level.upper(), log_file)
    project, store = _open_project(project_dir, exclude)
    formatter = SwiftFormatter(project, store)

    failures = 0
    changed = 0
    for path in files:
        result = formatter.reformat_file(path, write=not check)
        if not result.handled:
            console.print(f"[yellow]Skipped[/yellow] {path}", soft_wrap=True)
            continue
        if result.notification is not None:
            failures += 1
            _print_notification(result.notification, prefix=f"{path}: ")
            continue
        if result.changed:
            changed += 1
            verb = "Would reformat" if check else "Reformatted"
            console.print(f"[green]{verb}[/green] {path}", soft_wrap=True)

    if failures:
        raise typer.Exit(code=3)
    if check and changed:
        raise typer.Exit(code=1)


@settings_app.command("show")
def settings_show(project_dir: Path = ProjectOption, exclude: Optional[List[str]] = ExcludeOption) -> None:
    """Print the current plugin settings."""

    project, store = _open_project(project_dir, exclude)
    settings = store.snapshot()
    resolution = resolve_configuration(settings, project)

    table = Table(title=f"swift-format settings for {project.name}")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Enabled", settings.enabled.value)
    table.add_row("Executable", settings.swift_format_path or "-")
    table.add_row("Custom configuration", _describe_mode(settings))
    if resolution.config_file is not None:
        table.add_row("Configuration file", str(resolution.config_file))
    console.print(table)
    if resolution.error:
        console.print(f"[red]Configuration folder rejected:[/red] {resolution.error}")


@settings_app.command("init")
def settings_init(project_dir: Path = ProjectOption) -> None:
    """Run first-open initialization: disable the plugin and look for swift-format."""

    _, store = _open_project(project_dir, None)
    notification = initialize_settings(store, suggest_executable)
    if notification is None:
        console.print("Settings already initialized.")
        return
    _save(store)
    _print_notification(notification)


@settings_app.command("enable")
def settings_enable(project_dir: Path = ProjectOption) -> None:
    """Format Swift files with swift-format."""

    project, store = _open_project(project_dir, None)
    store.update(lambda state: state.set_enabled(True, project=project))
    _save(store)
    console.print("[green]swift-format enabled.[/green]")


@settings_app.command("disable")
def settings_disable(project_dir: Path = ProjectOption) -> None:
    """Leave Swift files to the host's own formatter."""

    project, store = _open_project(project_dir, None)
    store.update(lambda state: state.set_enabled(False, project=project))
    _save(store)
    console.print("swift-format disabled.")


@settings_app.command("set-path")
def settings_set_path(
    executable: str = typer.Argument(..., help="Path to the swift-format executable"),
    project_dir: Path = ProjectOption,
) -> None:
    """Point the plugin at a swift-format executable."""

    _, store = _open_project(project_dir, None)

    def _set(state: SettingsState) -> None:
        state.swift_format_path = executable

    store.update(_set)
    _save(store)
    console.print(f"swift-format path set to {executable}", soft_wrap=True)


@settings_app.command("discover")
def settings_discover(project_dir: Path = ProjectOption) -> None:
    """Search PATH for swift-format and store the first hit."""

    _, store = _open_project(project_dir, None)
    found = suggest_executable()
    if found is None:
        console.print("[red]swift-format not found on PATH.[/red]")
        raise typer.Exit(code=4)

    def _set(state: SettingsState) -> None:
        state.swift_format_path = str(found)

    store.update(_set)
    _save(store)
    console.print(f"[green]Found swift-format at {found}[/green]", soft_wrap=True)


@settings_app.command("use-config")
def settings_use_config(
    mode: str = typer.Argument(..., help="none, inline or folder"),
    folder: Optional[str] = typer.Argument(None, help="Folder for the .swift-format file (folder mode)"),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
) -> None:
    """Choose where the swift-format configuration comes from."""

    project, store = _open_project(project_dir, exclude)
    settings = store.snapshot()
    current = read_configuration(settings, project) or Configuration()
    mode = mode.lower()

    if mode == "none":
        store.update(lambda state: state.set_config_mode(NoCustomConfig()))
    elif mode == "inline":
        store.update(lambda state: state.set_config_mode(InlineConfig(to_json(current))))
    elif mode == "folder":
        error = folder_path_error(project, folder)
        if error is not None:
            console.print(f"[red]Invalid configuration folder:[/red] {error}")
            raise typer.Exit(code=4)
        updated = store.update(lambda state: state.set_config_mode(ProjectFolderConfig(str(folder))))
        path = config_file_path(updated, project)
        if path is not None and not path.exists():
            store.replace(write_configuration(current, updated, project))
    else:
        console.print(f"[red]Unknown configuration mode:[/red] {mode}")
        raise typer.Exit(code=2)

    _save(store)
    console.print(f"Custom configuration: {_describe_mode(store.snapshot())}", soft_wrap=True)


def _edit_configuration(
    project_dir: Path, exclude: Optional[List[str]], mutate: Callable[[Configuration], None]
) -> Configuration:
    project, store = _open_project(project_dir, exclude)
    settings = store.snapshot()
    if isinstance(settings.storage_mode, ProjectFolderConfig):
        error = folder_path_error(project, settings.storage_mode.folder_path)
        if error is not None:
            console.print(f"[red]Invalid configuration folder:[/red] {error}")
            raise typer.Exit(code=4)

    configuration = read_configuration(settings, project) or Configuration()
    try:
        mutate(configuration)
    except InvalidOptionError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=4)

    updated = write_configuration(configuration, settings, project)
    if isinstance(settings.storage_mode, NoCustomConfig):
        # Nothing stored yet: the edited configuration becomes the active one.
        updated.set_config_mode(InlineConfig(updated.config))
        console.print("Custom configuration: inline", soft_wrap=True)
    store.replace(updated)
    _save(store)
    return configuration


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(False, "--effective", help="Fill unset options with defaults"),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
) -> None:
    """Print the stored configuration as JSON."""

    project, store = _open_project(project_dir, exclude)
    configuration = read_configuration(store.snapshot(), project) or Configuration()
    if effective:
        configuration = merge_with_defaults(configuration)
    console.print(to_json(configuration), markup=False, highlight=False, soft_wrap=True)
    if is_default(configuration):
        console.print("[dim]Configuration matches the swift-format defaults.[/dim]")


@config_app.command("set")
def config_set(
    option: str = typer.Argument(..., help="Option name, e.g. lineLength"),
    value: str = typer.Argument(..., help="New value; integers are clamped to 0..10000"),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
) -> None:
    """Set one configuration option."""

    _edit_configuration(project_dir, exclude, lambda config: set_option(config, option, value))
    console.print(f"{option} = {value}", markup=False)


@config_app.command("unset")
def config_unset(
    option: str = typer.Argument(...),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
) -> None:
    """Return an option to its default."""

    _edit_configuration(project_dir, exclude, lambda config: unset_option(config, option))
    console.print(f"{option} unset", markup=False)


@config_app.command("rule")
def config_rule(
    name: str = typer.Argument(..., help="Rule name, e.g. OrderedImports"),
    enabled: bool = typer.Option(..., "--enable/--disable"),
    project_dir: Path = ProjectOption,
    exclude: Optional[List[str]] = ExcludeOption,
) -> None:
    """Turn a formatter rule on or off."""

    _edit_configuration(project_dir, exclude, lambda config: set_rule(config, name, enabled))
    console.print(f"{name} {'enabled' if enabled else 'disabled'}", markup=False)


@config_app.command("rules")
def config_rules(project_dir: Path = ProjectOption, exclude: Optional[List[str]] = ExcludeOption) -> None:
    """List the configurable formatter rules and their effective values."""

    project, store = _open_project(project_dir, exclude)
    configuration = read_configuration(store.snapshot(), project) or Configuration()
    rules = effective_rules(configuration)

    table = Table(title="Formatter rules")
    table.add_column("Rule")
    table.add_column("Description")
    table.add_column("Enabled")
    for name in FORMATTER_RULE_KEYS:
        table.add_row(name, describe_rule(name), "yes" if rules[name] else "no")
    console.print(table)


@config_app.command("reset")
def config_reset(project_dir: Path = ProjectOption, exclude: Optional[List[str]] = ExcludeOption) -> None:
    """Restore the swift-format default configuration."""

    def _reset(config: Configuration) -> None:
        defaults = restore_defaults()
        for name in Configuration.model_fields:
            setattr(config, name, getattr(defaults, name))

    _edit_configuration(project_dir, exclude, _reset)
    console.print("[green]Configuration restored to defaults.[/green]")


if __name__ == "__main__":
    app()
