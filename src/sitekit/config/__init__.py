"""Configuration loading for sitekit."""

from sitekit.config.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    SitekitError,
)
from sitekit.config.loader import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    deep_merge,
    find_config_file,
    get_config,
    load_config,
    load_from_file,
    reset_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "SitekitError",
    "deep_merge",
    "find_config_file",
    "get_config",
    "load_config",
    "load_from_file",
    "reset_config",
]
