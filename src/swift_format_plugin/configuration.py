"""swift-format configuration model, defaults and JSON round-tripping."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Tag, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ConfigParseError, ConfigWriteError, InvalidOptionError
from .rules import FORMATTER_RULE_KEYS, RULES, rule_default

CONFIG_FILE_NAME = ".swift-format"

# Bounds enforced by editing surfaces (settings panel, CLI); the model itself
# accepts any integer read from disk.
OPTION_RANGE: Tuple[int, int] = (0, 10000)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Spaces(BaseModel):
    """Indent with ``spaces`` space characters per level."""

    spaces: int

    @property
    def count(self) -> int:
        return self.spaces


class Tabs(BaseModel):
    """Indent with ``tabs`` tab characters per level."""

    tabs: int

    @property
    def count(self) -> int:
        return self.tabs


def _indentation_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "tabs" if "tabs" in value else "spaces"
    return "tabs" if isinstance(value, Tabs) else "spaces"


Indentation = Annotated[
    Union[Annotated[Spaces, Tag("spaces")], Annotated[Tabs, Tag("tabs")]],
    Discriminator(_indentation_kind),
]


class AccessLevel(str, Enum):
    PRIVATE = "private"
    FILEPRIVATE = "fileprivate"


class FileScopedDeclarationPrivacy(_CamelModel):
    access_level: AccessLevel


class Configuration(_CamelModel):
    """A swift-format configuration where every option may be left unset.

    Unset options (``None``) inherit the value of :data:`DEFAULT_CONFIGURATION`
    when read through :func:`merge_with_defaults` or :func:`effective_value`.
    """

    file_scoped_declaration_privacy: Optional[FileScopedDeclarationPrivacy] = None
    indentation: Optional[Indentation] = None
    indent_conditional_compilation_blocks: Optional[bool] = None
    indent_switch_case_labels: Optional[bool] = None
    line_break_around_multiline_expression_chain_components: Optional[bool] = None
    line_break_before_control_flow_keywords: Optional[bool] = None
    line_break_before_each_argument: Optional[bool] = None
    line_break_before_each_generic_requirement: Optional[bool] = None
    line_length: Optional[int] = None
    maximum_blank_lines: Optional[int] = None
    prioritize_keeping_function_output_together: Optional[bool] = None
    respects_existing_line_breaks: Optional[bool] = None
    rules: Optional[Dict[str, Optional[bool]]] = None
    tab_width: Optional[int] = None
    version: Optional[int] = None


DEFAULT_CONFIGURATION = Configuration(
    file_scoped_declaration_privacy=FileScopedDeclarationPrivacy(access_level=AccessLevel.PRIVATE),
    indentation=Spaces(spaces=2),
    indent_conditional_compilation_blocks=True,
    indent_switch_case_labels=False,
    line_break_around_multiline_expression_chain_components=False,
    line_break_before_control_flow_keywords=False,
    line_break_before_each_argument=False,
    line_break_before_each_generic_requirement=False,
    line_length=100,
    maximum_blank_lines=1,
    prioritize_keeping_function_output_together=False,
    respects_existing_line_breaks=True,
    rules=dict(RULES),
    tab_width=8,
    version=1,
)

INT_OPTIONS = ("line_length", "maximum_blank_lines", "tab_width")
BOOL_OPTIONS = (
    "indent_conditional_compilation_blocks",
    "indent_switch_case_labels",
    "line_break_around_multiline_expression_chain_components",
    "line_break_before_control_flow_keywords",
    "line_break_before_each_argument",
    "line_break_before_each_generic_requirement",
    "prioritize_keeping_function_output_together",
    "respects_existing_line_breaks",
)
_OPTION_FIELDS = tuple(name for name in Configuration.model_fields if name != "rules")

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def restore_defaults() -> Configuration:
    """Return a private, fully populated copy of the default configuration."""

    return DEFAULT_CONFIGURATION.model_copy(deep=True)


def effective_rules(config: Configuration) -> Dict[str, bool]:
    overrides = config.rules or {}
    names = list(RULES) + [name for name in overrides if name not in RULES]
    return {
        name: overrides[name] if overrides.get(name) is not None else rule_default(name)
        for name in names
    }


def effective_value(config: Configuration, name: str) -> Any:
    """Return the option value, falling back to the default when unset."""

    field = _field_name(name)
    if field == "rules":
        return effective_rules(config)
    value = getattr(config, field)
    if value is not None:
        return value
    default = getattr(DEFAULT_CONFIGURATION, field)
    return default.model_copy(deep=True) if isinstance(default, BaseModel) else default


def merge_with_defaults(config: Configuration) -> Configuration:
    merged: Dict[str, Any] = {name: effective_value(config, name) for name in _OPTION_FIELDS}
    merged["rules"] = effective_rules(config)
    return Configuration(**merged).model_copy(deep=True)


def is_default(config: Configuration) -> bool:
    """True when no option and no formatter rule diverges from the defaults."""

    for name in _OPTION_FIELDS:
        value = getattr(config, name)
        if value is not None and value != getattr(DEFAULT_CONFIGURATION, name):
            return False

    overrides = config.rules or {}
    for key in FORMATTER_RULE_KEYS:
        override = overrides.get(key)
        if override is not None and override != rule_default(key):
            return False
    return True


def to_json(config: Configuration) -> str:
    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    if "rules" in data:
        data["rules"] = {name: value for name, value in data["rules"].items() if value is not None}
    return json.dumps(data, indent=2)


def from_json(text: str) -> Configuration:
    try:
        return Configuration.model_validate_json(text)
    except ValidationError as exc:
        raise ConfigParseError(f"Invalid swift-format configuration: {exc}") from exc


def load_configuration(path: Path) -> Configuration:
    """Load a configuration from a ``.swift-format`` JSON file."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigParseError(f"Configuration file not found: {path}") from exc
    except OSError as exc:
        raise ConfigParseError(f"Couldn't read configuration from file {path}: {exc}") from exc
    return from_json(text)


def save_configuration(config: Configuration, path: Path) -> None:
    """Persist configuration to disk as pretty-printed JSON."""

    try:
        path.write_text(to_json(config), encoding="utf-8")
    except OSError as exc:
        raise ConfigWriteError(f"Couldn't write configuration to file {path}: {exc}") from exc


# ----------------------------------------------------------------------
# Editing helpers shared by the settings dialog and the CLI
# ----------------------------------------------------------------------
def clamp_option(value: int) -> int:
    low, high = OPTION_RANGE
    return max(low, min(high, value))


def option_names() -> Tuple[str, ...]:
    """camelCase names of every option except ``rules``."""

    return tuple(to_camel(name) for name in _OPTION_FIELDS)


def _field_name(name: str) -> str:
    if name in Configuration.model_fields:
        return name
    for field, info in Configuration.model_fields.items():
        if info.alias == name:
            return field
    raise InvalidOptionError(f"Unknown configuration option '{name}'")


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidOptionError(f"Expected a boolean value, got '{raw}'")


def _parse_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidOptionError(f"Expected an integer value, got '{raw}'") from exc


def _parse_indentation(raw: str) -> Union[Spaces, Tabs]:
    kind, _, count = raw.strip().lower().partition(":")
    size = clamp_option(_parse_int(count)) if count else DEFAULT_CONFIGURATION.indentation.count
    if kind == "spaces":
        return Spaces(spaces=size)
    if kind == "tabs":
        return Tabs(tabs=size)
    raise InvalidOptionError(f"Indentation must look like 'spaces:N' or 'tabs:N', got '{raw}'")


def set_option(config: Configuration, name: str, raw: str) -> None:
    """Set an option from its textual form; integers are clamped to :data:`OPTION_RANGE`."""

    field = _field_name(name)
    if field == "rules":
        raise InvalidOptionError("Use set_rule() to change individual rules")
    if field in INT_OPTIONS:
        setattr(config, field, clamp_option(_parse_int(raw)))
    elif field in BOOL_OPTIONS:
        setattr(config, field, _parse_bool(raw))
    elif field == "indentation":
        config.indentation = _parse_indentation(raw)
    elif field == "file_scoped_declaration_privacy":
        try:
            level = AccessLevel(raw.strip())
        except ValueError as exc:
            raise InvalidOptionError(f"Access level must be 'private' or 'fileprivate', got '{raw}'") from exc
        config.file_scoped_declaration_privacy = FileScopedDeclarationPrivacy(access_level=level)
    elif field == "version":
        config.version = _parse_int(raw)


def unset_option(config: Configuration, name: str) -> None:
    setattr(config, _field_name(name), None)


def set_rule(config: Configuration, name: str, enabled: Optional[bool]) -> None:
    if name not in RULES:
        raise InvalidOptionError(f"Unknown swift-format rule '{name}'")
    if config.rules is None:
        config.rules = dict(RULES)
    config.rules[name] = enabled


def use_tabs(config: Configuration, enabled: bool) -> None:
    count = effective_value(config, "indentation").count
    config.indentation = Tabs(tabs=count) if enabled else Spaces(spaces=count)


def set_indent_count(config: Configuration, count: int) -> None:
    count = clamp_option(count)
    current = effective_value(config, "indentation")
    config.indentation = Tabs(tabs=count) if isinstance(current, Tabs) else Spaces(spaces=count)


__all__ = [
    "AccessLevel",
    "CONFIG_FILE_NAME",
    "Configuration",
    "DEFAULT_CONFIGURATION",
    "FileScopedDeclarationPrivacy",
    "OPTION_RANGE",
    "Spaces",
    "Tabs",
    "clamp_option",
    "effective_rules",
    "effective_value",
    "from_json",
    "is_default",
    "load_configuration",
    "merge_with_defaults",
    "option_names",
    "restore_defaults",
    "save_configuration",
    "set_indent_count",
    "set_option",
    "set_rule",
    "to_json",
    "unset_option",
    "use_tabs",
]
