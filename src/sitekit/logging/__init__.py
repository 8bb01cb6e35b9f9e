"""Logging for sitekit.

``init_logging`` builds the package :class:`LogManager` and copies its
handlers onto the standard ``sitekit`` logger, so module loggers obtained
with ``logging.getLogger(__name__)`` share the same output.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console

from sitekit.logging.manager import (
    FALLBACK_PRESETS,
    LOGGING_LEVEL,
    SUCCESS_LEVEL,
    TRACE_LEVEL,
    LogManager,
)

_root_logger: LogManager | None = None


def init_logging(
    *,
    preset: str | None = None,
    config: dict[str, Any] | None = None,
    console: Console | None = None,
) -> LogManager:
    """Configure package logging and return the root LogManager.

    Args:
        preset: Logging preset (``dev``, ``debug``, ``prod``).
        config: Explicit logging config merged over the preset.
        console: Rich console used by the console handler.

    Returns:
        The configured LogManager.
    """
    global _root_logger  # noqa: PLW0603

    manager = LogManager(name="sitekit", preset=preset, config=config, console=console)

    std_logger = logging.getLogger("sitekit")
    for handler in std_logger.handlers[:]:
        std_logger.removeHandler(handler)
    std_logger.setLevel(TRACE_LEVEL)
    for handler in manager.handlers:
        std_logger.addHandler(handler)
    std_logger.propagate = False

    _root_logger = manager
    return manager


def get_logger() -> LogManager:
    """Return the package LogManager, initialising it with defaults if needed."""
    if _root_logger is None:
        return init_logging(preset="dev")
    return _root_logger


__all__ = [
    "FALLBACK_PRESETS",
    "LOGGING_LEVEL",
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "LogManager",
    "get_logger",
    "init_logging",
]
