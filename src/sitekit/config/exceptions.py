"""Exceptions shared by every sitekit module.

Exception hierarchy::

    SitekitError (root of every sitekit exception)
        ConfigError (configuration could not be loaded)
            ConfigFileNotFoundError (explicit config path missing)
            ConfigFormatError (config file is not a YAML mapping)
"""

from __future__ import annotations


class SitekitError(Exception):
    """Base exception for all sitekit errors."""


class ConfigError(SitekitError):
    """Base exception for configuration errors."""


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """A configuration file that was explicitly requested does not exist."""


class ConfigFormatError(ConfigError, ValueError):
    """A configuration file could not be parsed into a mapping."""


__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "SitekitError",
]
