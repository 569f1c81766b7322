"""Settings dialog: executable location, configuration storage and swift-format options."""

from __future__ import annotations

from typing import Dict

from loguru import logger
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSpinBox,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..configuration import (
    BOOL_OPTIONS,
    OPTION_RANGE,
    AccessLevel,
    Configuration,
    FileScopedDeclarationPrivacy,
    Tabs,
    effective_rules,
    effective_value,
    is_default,
    restore_defaults,
    set_indent_count,
    set_rule,
    use_tabs,
)
from ..errors import SettingsError
from ..project import Project
from ..resolver import folder_path_error, read_configuration, write_configuration
from ..rules import FORMATTER_RULE_KEYS, describe_rule
from ..settings import ProjectFolderConfig, SettingsState, SettingsStore
from ..suggest import SWIFT_FORMAT_TOOL, suggest_executable
from .widgets import KeyValueLabel, PathPicker

_BOOL_LABELS = {
    "indent_conditional_compilation_blocks": "Indent conditional compilation blocks",
    "indent_switch_case_labels": "Indent switch case labels",
    "respects_existing_line_breaks": "Respects existing line breaks",
    "line_break_before_control_flow_keywords": "Line break before control flow keywords",
    "line_break_before_each_argument": "Line break before each argument",
    "line_break_before_each_generic_requirement": "Line break before each generic requirement",
    "prioritize_keeping_function_output_together": "Prioritize keeping function output together",
    "line_break_around_multiline_expression_chain_components": (
        "Line break around multiline expression chain components"
    ),
}
_INDENT_OPTIONS = ("indent_conditional_compilation_blocks", "indent_switch_case_labels")


def _scrollable(panel: QWidget) -> QScrollArea:
    area = QScrollArea()
    area.setWidgetResizable(True)
    area.setWidget(panel)
    return area


def _spin_box() -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(*OPTION_RANGE)
    return spin


class SettingsDialog(QDialog):
    """Edit the plugin settings and the swift-format configuration of a project."""

    def __init__(self, project: Project, store: SettingsStore, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("swift-format Settings")
        self.resize(640, 620)
        self._project = project
        self._store = store
        self._configuration = read_configuration(store.snapshot(), project) or Configuration()

        self._bool_boxes: Dict[str, QCheckBox] = {}
        self._int_spins: Dict[str, QSpinBox] = {}
        self._rule_boxes: Dict[str, QCheckBox] = {}

        layout = QVBoxLayout(self)
        layout.addWidget(self._general_group())

        tabs = QTabWidget(self)
        tabs.addTab(self._tabs_and_indents_panel(), "Tabs and Indents")
        tabs.addTab(self._line_breaks_panel(), "Line breaks")
        tabs.addTab(self._other_panel(), "Other")
        tabs.addTab(_scrollable(self._rules_panel()), "Rules")
        layout.addWidget(tabs, stretch=1)

        footer = QHBoxLayout()
        self._restore_button = QPushButton("Restore Defaults", self)
        self._restore_button.clicked.connect(self._restore_defaults)
        footer.addWidget(self._restore_button)
        footer.addStretch(1)
        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok
            | QDialogButtonBox.StandardButton.Cancel
            | QDialogButtonBox.StandardButton.Apply,
            self,
        )
        buttons.accepted.connect(self._accept)
        buttons.rejected.connect(self.reject)
        buttons.button(QDialogButtonBox.StandardButton.Apply).clicked.connect(self.apply)
        footer.addWidget(buttons)
        layout.addLayout(footer)

        self.reset()
        self._connect_change_signals()

    # ------------------------------------------------------------------
    # Panels
    # ------------------------------------------------------------------
    def _general_group(self) -> QGroupBox:
        group = QGroupBox("swift-format", self)
        form = QFormLayout(group)

        self._enabled_checkbox = QCheckBox("Enable swift-format", group)
        form.addRow(self._enabled_checkbox)

        self._path_picker = PathPicker(f"Select '{SWIFT_FORMAT_TOOL}'", mode="file", parent=group)
        discover = QPushButton("Auto Discover", group)
        discover.clicked.connect(self._auto_discover)
        self._path_picker.add_button(discover)
        form.addRow("Location:", self._path_picker)

        self._custom_checkbox = QCheckBox("Use custom configuration", group)
        form.addRow(self._custom_checkbox)
        self._store_as_file_checkbox = QCheckBox("Store as project file", group)
        form.addRow(self._store_as_file_checkbox)
        self._folder_picker = PathPicker(
            "Store configuration file in",
            mode="directory",
            validator=lambda text: folder_path_error(self._project, text),
            parent=group,
        )
        form.addRow("Store configuration file in:", self._folder_picker)
        self._config_file_label = KeyValueLabel("Configuration file", parent=group)
        form.addRow(self._config_file_label)

        self._custom_checkbox.toggled.connect(self._update_storage_controls)
        self._store_as_file_checkbox.toggled.connect(self._on_store_as_file_toggled)
        self._folder_picker.path_changed.connect(lambda _: self._update_storage_controls())
        return group

    def _tabs_and_indents_panel(self) -> QWidget:
        panel = QWidget()
        form = QFormLayout(panel)
        self._tabs_checkbox = QCheckBox("Use tab character", panel)
        form.addRow(self._tabs_checkbox)
        self._int_spins["tab_width"] = _spin_box()
        form.addRow("Tab size:", self._int_spins["tab_width"])
        self._indent_spin = _spin_box()
        form.addRow("Indent:", self._indent_spin)
        for name in _INDENT_OPTIONS:
            self._bool_boxes[name] = QCheckBox(_BOOL_LABELS[name], panel)
            form.addRow(self._bool_boxes[name])
        self._int_spins["line_length"] = _spin_box()
        form.addRow("Line length:", self._int_spins["line_length"])
        return panel

    def _line_breaks_panel(self) -> QWidget:
        panel = QWidget()
        form = QFormLayout(panel)
        for name in BOOL_OPTIONS:
            if name in _INDENT_OPTIONS:
                continue
            self._bool_boxes[name] = QCheckBox(_BOOL_LABELS[name], panel)
            form.addRow(self._bool_boxes[name])
        self._int_spins["maximum_blank_lines"] = _spin_box()
        form.addRow("Maximum blank lines:", self._int_spins["maximum_blank_lines"])
        return panel

    def _other_panel(self) -> QWidget:
        panel = QWidget()
        form = QFormLayout(panel)
        self._privacy_combo = QComboBox(panel)
        for level in AccessLevel:
            self._privacy_combo.addItem(level.value)
        form.addRow("File scoped declaration privacy:", self._privacy_combo)
        return panel

    def _rules_panel(self) -> QWidget:
        panel = QWidget()
        column = QVBoxLayout(panel)
        for name in FORMATTER_RULE_KEYS:
            box = QCheckBox(describe_rule(name), panel)
            box.setToolTip(name)
            self._rule_boxes[name] = box
            column.addWidget(box)
        column.addStretch(1)
        return panel

    def _connect_change_signals(self) -> None:
        for box in (self._tabs_checkbox, *self._bool_boxes.values(), *self._rule_boxes.values()):
            box.toggled.connect(self._refresh_restore_defaults)
        for spin in (self._indent_spin, *self._int_spins.values()):
            spin.valueChanged.connect(self._refresh_restore_defaults)
        self._privacy_combo.currentTextChanged.connect(self._refresh_restore_defaults)

    # ------------------------------------------------------------------
    # Binding between widgets and models
    # ------------------------------------------------------------------
    def _show_configuration(self, configuration: Configuration) -> None:
        indentation = effective_value(configuration, "indentation")
        self._tabs_checkbox.setChecked(isinstance(indentation, Tabs))
        self._indent_spin.setValue(indentation.count)
        for name, spin in self._int_spins.items():
            spin.setValue(effective_value(configuration, name))
        for name, box in self._bool_boxes.items():
            box.setChecked(effective_value(configuration, name))
        privacy = effective_value(configuration, "file_scoped_declaration_privacy")
        self._privacy_combo.setCurrentText(privacy.access_level.value)
        rules = effective_rules(configuration)
        for name, box in self._rule_boxes.items():
            box.setChecked(rules[name])

    def _show_settings(self, settings: SettingsState) -> None:
        self._enabled_checkbox.setChecked(settings.is_enabled)
        self._path_picker.set_text(settings.swift_format_path)
        self._custom_checkbox.setChecked(settings.use_custom_configuration)
        storage = settings.storage_mode
        in_folder = isinstance(storage, ProjectFolderConfig)
        self._store_as_file_checkbox.setChecked(in_folder)
        self._folder_picker.set_text(storage.folder_path if in_folder else "")
        self._update_storage_controls()

    def _collect_configuration(self) -> Configuration:
        configuration = self._configuration.model_copy(deep=True)
        use_tabs(configuration, self._tabs_checkbox.isChecked())
        set_indent_count(configuration, self._indent_spin.value())
        for name, spin in self._int_spins.items():
            setattr(configuration, name, spin.value())
        for name, box in self._bool_boxes.items():
            setattr(configuration, name, box.isChecked())
        configuration.file_scoped_declaration_privacy = FileScopedDeclarationPrivacy(
            access_level=AccessLevel(self._privacy_combo.currentText())
        )
        for name, box in self._rule_boxes.items():
            set_rule(configuration, name, box.isChecked())
        return configuration

    def _collect_settings(self) -> SettingsState:
        settings = self._store.snapshot()
        settings.set_enabled(self._enabled_checkbox.isChecked(), project=self._project)
        settings.swift_format_path = self._path_picker.text()
        if self._store_as_file_checkbox.isChecked():
            settings.config = self._folder_picker.text()
        elif isinstance(settings.storage_mode, ProjectFolderConfig):
            # Leaving project-file storage moves the configuration inline.
            settings.config = None
        settings.use_custom_configuration = self._custom_checkbox.isChecked()
        return settings

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._show_settings(self._store.snapshot())
        self._show_configuration(self._configuration)
        self._refresh_restore_defaults()

    def apply(self) -> bool:
        if self._store_as_file_checkbox.isChecked():
            error = self._folder_picker.error()
            if error:
                QMessageBox.warning(self, "Invalid configuration folder", error)
                return False

        configuration = self._collect_configuration()
        settings = write_configuration(configuration, self._collect_settings(), self._project)
        self._store.replace(settings)
        try:
            self._store.save()
        except SettingsError as exc:
            logger.exception("Failed to save settings")
            QMessageBox.critical(self, "Settings error", str(exc))
            return False
        self._configuration = configuration
        self._refresh_restore_defaults()
        return True

    def _accept(self) -> None:
        if self.apply():
            self.accept()

    def _restore_defaults(self) -> None:
        self._show_configuration(restore_defaults())

    def _refresh_restore_defaults(self, *_args) -> None:
        self._restore_button.setVisible(not is_default(self._collect_configuration()))

    def _auto_discover(self) -> None:
        found = suggest_executable()
        if found is None:
            QMessageBox.information(self, "Auto Discover", f"Could not find '{SWIFT_FORMAT_TOOL}' on PATH.")
            return
        self._path_picker.set_text(str(found))

    def _on_store_as_file_toggled(self, checked: bool) -> None:
        if checked and not self._folder_picker.text():
            self._folder_picker.set_text(str(self._project.metadata_path))
        self._update_storage_controls()

    def _update_storage_controls(self) -> None:
        custom = self._custom_checkbox.isChecked()
        in_folder = self._store_as_file_checkbox.isChecked()
        self._store_as_file_checkbox.setEnabled(custom)
        self._folder_picker.setEnabled(custom and in_folder)
        if in_folder and not self._folder_picker.error():
            folder = self._folder_picker.text()
            self._config_file_label.set_value(f"{folder}/.swift-format")
        elif in_folder:
            self._config_file_label.set_value(None)
        else:
            self._config_file_label.set_value("stored inline in project settings")


__all__ = ["SettingsDialog"]
