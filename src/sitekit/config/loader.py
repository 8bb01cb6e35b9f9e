"""Cascading configuration loader.

Configuration is read from ``sitekit.conf.yml``. The first file found wins,
searched in this order:

1. An explicit path passed to :func:`load_config`.
2. The path in the ``SITEKIT_CONFIG`` environment variable.
3. ``./sitekit.conf.yml`` in the current working directory.
4. ``~/.config/sitekit/sitekit.conf.yml``.

The file is deep-merged over the packaged defaults and exposed as a
:class:`box.Box` for dot-notation access.

Examples:
    >>> config = load_config()  # doctest: +SKIP
    >>> config.defaults.site  # doctest: +SKIP
    'www'
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from box import Box

from sitekit.config.exceptions import ConfigFileNotFoundError, ConfigFormatError

log = logging.getLogger(__name__)

#: Name of the configuration file searched for.
CONFIG_FILENAME = "sitekit.conf.yml"

#: Environment variable holding an explicit configuration path.
CONFIG_ENV_VAR = "SITEKIT_CONFIG"

_DEFAULTS_PATH = Path(__file__).resolve().parent.parent / CONFIG_FILENAME

_config: Box | None = None


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``.

    Examples:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    merged: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigFileNotFoundError(f"Config file not found: {path}") from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigFormatError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigFormatError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return dict(data)


def find_config_file(path: str | os.PathLike[str] | None = None) -> Path | None:
    """Locate the configuration file using the cascading search.

    Args:
        path: Explicit path; when given it must exist.

    Returns:
        Path of the first configuration file found, or None.

    Raises:
        ConfigFileNotFoundError: If an explicit path (argument or env var) does not exist.
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidate = Path(explicit).expanduser()
        if not candidate.is_file():
            raise ConfigFileNotFoundError(f"Config file not found: {candidate}")
        return candidate

    for candidate in (Path.cwd() / CONFIG_FILENAME, Path.home() / ".config" / "sitekit" / CONFIG_FILENAME):
        if candidate.is_file():
            return candidate
    return None


def load_from_file(path: str | os.PathLike[str]) -> Box:
    """Load a single configuration file merged over the packaged defaults.

    Args:
        path: Path to a YAML configuration file.

    Returns:
        Box with the merged configuration.
    """
    defaults = _read_yaml(_DEFAULTS_PATH)
    return Box(deep_merge(defaults, _read_yaml(Path(path))))


def load_config(path: str | os.PathLike[str] | None = None) -> Box:
    """Load and cache the configuration.

    Args:
        path: Optional explicit configuration path.

    Returns:
        Box with the merged configuration.
    """
    global _config  # noqa: PLW0603

    found = find_config_file(path)
    defaults = _read_yaml(_DEFAULTS_PATH)
    if found is None:
        log.debug("No %s found, using packaged defaults", CONFIG_FILENAME)
        data = defaults
    else:
        log.debug("Loading configuration from %s", found)
        data = deep_merge(defaults, _read_yaml(found))

    _config = Box(data)
    return _config


def get_config() -> Box:
    """Return the cached configuration, loading it on first use."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration."""
    global _config  # noqa: PLW0603
    _config = None


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "deep_merge",
    "find_config_file",
    "get_config",
    "load_config",
    "load_from_file",
    "reset_config",
]
