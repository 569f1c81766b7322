"""Exception types shared across the plugin.

Hosts catch these to tell configuration problems the user can fix apart from
unexpected bugs.
"""

from __future__ import annotations


class SwiftFormatPluginError(Exception):
    """Base class for all plugin specific errors."""


class ConfigParseError(SwiftFormatPluginError):
    """Raised when a swift-format configuration cannot be decoded."""


class ConfigWriteError(SwiftFormatPluginError):
    """Raised when a swift-format configuration cannot be written."""


class SettingsError(SwiftFormatPluginError):
    """Raised when persisted plugin settings are unreadable or unwritable."""


class InvalidOptionError(SwiftFormatPluginError):
    """Raised when a configuration option name or value is not recognized."""


__all__ = [
    "ConfigParseError",
    "ConfigWriteError",
    "InvalidOptionError",
    "SettingsError",
    "SwiftFormatPluginError",
]
