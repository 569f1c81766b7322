from __future__ import annotations

import json
from pathlib import Path

import pytest
from swift_format_plugin.configuration import Configuration, to_json
from swift_format_plugin.project import Project
from swift_format_plugin.resolver import (
    FOLDER_EXCLUDED,
    FOLDER_OUTSIDE_PROJECT,
    FOLDER_PATH_EXPECTED,
    PATH_DOES_NOT_EXIST,
    PATH_NOT_SPECIFIED,
    config_file_path,
    folder_path_error,
    materialized_config,
    read_configuration,
    resolve_configuration,
    write_configuration,
)
from swift_format_plugin.settings import (
    InlineConfig,
    NoCustomConfig,
    ProjectFolderConfig,
    SettingsState,
)


def test_folder_validation_messages(project: Project, tmp_path: Path) -> None:
    (project.root / "Package.swift").write_text("// swift-tools-version:5.9\n", encoding="utf-8")
    outside = tmp_path / "elsewhere"
    outside.mkdir()

    assert folder_path_error(project, "") == PATH_NOT_SPECIFIED
    assert folder_path_error(project, "   ") == PATH_NOT_SPECIFIED
    assert folder_path_error(project, None) == PATH_NOT_SPECIFIED
    assert folder_path_error(project, "missing") == PATH_DOES_NOT_EXIST
    assert folder_path_error(project, "Package.swift") == FOLDER_PATH_EXPECTED
    assert folder_path_error(project, str(outside)) == FOLDER_OUTSIDE_PROJECT
    assert folder_path_error(project, "build") == FOLDER_EXCLUDED


def test_folders_inside_content_are_accepted(project: Project) -> None:
    (project.root / "Sources" / "App").mkdir()
    assert folder_path_error(project, "Sources") is None
    assert folder_path_error(project, project.root / "Sources" / "App") is None
    assert folder_path_error(project, str(project.root)) is None


def test_folders_below_excluded_folder_are_rejected(project: Project) -> None:
    nested = project.root / "build" / "debug"
    nested.mkdir()
    assert folder_path_error(project, nested) == FOLDER_EXCLUDED


def test_metadata_folder_is_always_valid(tmp_path: Path) -> None:
    root = tmp_path / "Fresh"
    root.mkdir()
    project = Project(root)
    assert not project.metadata_path.exists()
    assert folder_path_error(project, ".idea") is None
    assert folder_path_error(project, project.metadata_path) is None


def test_content_roots_outside_project_root(tmp_path: Path) -> None:
    root = tmp_path / "App"
    shared = tmp_path / "Shared"
    root.mkdir()
    shared.mkdir()
    project = Project(root, content_roots=[root, shared])
    assert folder_path_error(project, shared) is None


def test_resolve_without_custom_configuration(project: Project) -> None:
    settings = SettingsState(config=".idea", use_custom_configuration=False)
    resolution = resolve_configuration(settings, project)
    assert resolution.mode == NoCustomConfig()
    assert not resolution.uses_configuration


def test_resolve_project_folder(project: Project) -> None:
    settings = SettingsState(config=".idea", use_custom_configuration=True)
    resolution = resolve_configuration(settings, project)
    assert resolution.config_file == project.metadata_path / ".swift-format"
    assert config_file_path(settings, project) == resolution.config_file


def test_resolve_invalid_folder_falls_back_to_defaults(project: Project) -> None:
    settings = SettingsState(config="build", use_custom_configuration=True)
    resolution = resolve_configuration(settings, project)
    assert resolution.error == FOLDER_EXCLUDED
    assert not resolution.uses_configuration
    assert config_file_path(settings, project) is None


def test_resolve_inline(project: Project) -> None:
    settings = SettingsState(config='{"lineLength": 80}', use_custom_configuration=True)
    resolution = resolve_configuration(settings, project)
    assert resolution.mode == InlineConfig('{"lineLength": 80}')
    assert resolution.inline_json == '{"lineLength": 80}'


def test_materialized_project_file_requires_existing_file(project: Project) -> None:
    settings = SettingsState(config=".idea", use_custom_configuration=True)
    resolution = resolve_configuration(settings, project)
    with materialized_config(resolution) as path:
        assert path is None

    resolution.config_file.write_text("{}", encoding="utf-8")
    with materialized_config(resolution) as path:
        assert path == resolution.config_file
    assert resolution.config_file.exists()


def test_materialized_inline_config_is_temporary(project: Project) -> None:
    content = '{\n  "lineLength" : 80\n}'
    settings = SettingsState(config=content, use_custom_configuration=True)
    with materialized_config(resolve_configuration(settings, project)) as path:
        assert path is not None
        assert path.name.startswith(".swift-format")
        assert path.read_bytes() == content.encode("utf-8")
    assert not path.exists()


def test_materialized_inline_config_removed_on_error(project: Project) -> None:
    settings = SettingsState(config="{}", use_custom_configuration=True)
    with pytest.raises(RuntimeError):
        with materialized_config(resolve_configuration(settings, project)) as path:
            assert path.exists()
            raise RuntimeError("formatter crashed")
    assert not path.exists()


def test_materialized_inline_configs_are_distinct(project: Project) -> None:
    settings = SettingsState(config="{}", use_custom_configuration=True)
    resolution = resolve_configuration(settings, project)
    with materialized_config(resolution) as first, materialized_config(resolution) as second:
        assert first != second


def test_write_and_read_inline_configuration(project: Project) -> None:
    settings = SettingsState()
    updated = write_configuration(Configuration(line_length=80), settings, project)
    assert settings.config is None
    assert json.loads(updated.config) == {"lineLength": 80}
    assert read_configuration(updated, project).line_length == 80


def test_write_and_read_project_file(project: Project) -> None:
    settings = SettingsState(config="Sources/Config", use_custom_configuration=True)
    (project.root / "Sources" / "Config").mkdir()
    updated = write_configuration(Configuration(tab_width=4), settings, project)

    path = project.root / "Sources" / "Config" / ".swift-format"
    assert updated == settings
    assert json.loads(path.read_text(encoding="utf-8")) == {"tabWidth": 4}
    assert read_configuration(updated, project).tab_width == 4


def test_write_creates_metadata_folder(tmp_path: Path) -> None:
    root = tmp_path / "Fresh"
    root.mkdir()
    project = Project(root)
    settings = SettingsState(config=".idea", use_custom_configuration=True)
    write_configuration(Configuration(line_length=60), settings, project)
    assert (root / ".idea" / ".swift-format").exists()


def test_read_configuration_tolerates_bad_data(project: Project) -> None:
    assert read_configuration(SettingsState(config="{broken"), project) is None
    assert read_configuration(SettingsState(config=".idea"), project) is None
    (project.metadata_path / ".swift-format").write_text("[]", encoding="utf-8")
    assert read_configuration(SettingsState(config=".idea"), project) is None


def test_inline_round_trip_preserves_json(project: Project) -> None:
    config = Configuration(line_length=80, maximum_blank_lines=2)
    updated = write_configuration(config, SettingsState(), project)
    assert updated.config == to_json(config)


def test_content_root_for_prefers_deepest_root(tmp_path: Path) -> None:
    root = tmp_path / "App"
    module = root / "Modules" / "Core"
    module.mkdir(parents=True)
    project = Project(root, content_roots=[root, module])
    assert project.content_root_for(module / "Sources") == module.resolve()
    assert project.content_root_for(root / "Modules") == root.resolve()
    assert project.content_root_for(tmp_path) is None
    assert project.is_metadata_path(root / ".idea")
    assert not project.is_metadata_path(root)
