"""Rich-backed logger with custom levels and structured context.

``LogManager`` is a :class:`logging.Logger` subclass that adds:

- ``TRACE`` (5) and ``SUCCESS`` (25) levels with matching methods
- structured ``key=value`` context passed as keyword arguments
- presets (``dev``, ``debug``, ``prod``) selecting console and/or file output

Examples:
    >>> logger = LogManager(name="demo", config={"output": "console"})  # doctest: +SKIP
    >>> logger.success("Imported configuration", site="www")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from sitekit.config.loader import deep_merge

TRACE_LEVEL = 5
SUCCESS_LEVEL = 25

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

LOGGING_LEVEL = SimpleNamespace(
    TRACE=TRACE_LEVEL,
    DEBUG=logging.DEBUG,
    INFO=logging.INFO,
    SUCCESS=SUCCESS_LEVEL,
    WARNING=logging.WARNING,
    ERROR=logging.ERROR,
    CRITICAL=logging.CRITICAL,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "output": "console",
    "console": {"level": "INFO", "show_time": False},
    "file": {
        "level": "DEBUG",
        "path": "logs/sitekit.log",
        "max_bytes": 1_048_576,
        "backup_count": 3,
    },
}

FALLBACK_PRESETS: dict[str, dict[str, Any]] = {
    "dev": {"output": "console", "console": {"level": "INFO"}},
    "debug": {"output": "both", "console": {"level": "DEBUG", "show_time": True}},
    "prod": {"output": "file", "file": {"level": "INFO"}},
}

_RESERVED_KWARGS = frozenset({"exc_info", "extra", "stack_info", "stacklevel"})
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level_value(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def format_context(message: str, context: dict[str, Any]) -> str:
    """Append structured context to a log message.

    Examples:
        >>> format_context("Step failed", {"step": "db-dump", "rc": 1})
        'Step failed | step=db-dump rc=1'
        >>> format_context("plain", {})
        'plain'
    """
    if not context:
        return message
    pairs = " ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} | {pairs}"


class LogManager(logging.Logger):
    """Logger configured from a preset and/or an explicit config mapping.

    Args:
        name: Logger name.
        preset: Preset name from :data:`FALLBACK_PRESETS`; unknown presets
            fall back to the defaults.
        config: Explicit config merged over the preset.
        console: Rich console for the console handler (stderr by default).
    """

    def __init__(
        self,
        name: str = "sitekit",
        *,
        preset: str | None = None,
        config: dict[str, Any] | None = None,
        console: Console | None = None,
    ) -> None:
        super().__init__(name, TRACE_LEVEL)
        self._config = self._resolve_config(preset, config)
        self._setup_handlers(console)

    @staticmethod
    def _resolve_config(preset: str | None, config: dict[str, Any] | None) -> dict[str, Any]:
        resolved = dict(DEFAULT_CONFIG)
        if preset:
            resolved = deep_merge(resolved, FALLBACK_PRESETS.get(preset, {}))
        if config:
            resolved = deep_merge(resolved, config)
        return resolved

    @property
    def config(self) -> dict[str, Any]:
        """Return the resolved logging configuration."""
        return self._config

    def _setup_handlers(self, console: Console | None) -> None:
        output = self._config.get("output", "console")

        if output in ("console", "both"):
            console_cfg = self._config.get("console", {})
            handler = RichHandler(
                console=console or Console(stderr=True),
                show_path=False,
                show_time=bool(console_cfg.get("show_time", False)),
                markup=False,
                rich_tracebacks=True,
            )
            handler.setLevel(_level_value(console_cfg.get("level", "INFO")))
            self.addHandler(handler)

        if output in ("file", "both"):
            file_cfg = self._config.get("file", {})
            path = Path(file_cfg.get("path", "logs/sitekit.log"))
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path,
                maxBytes=int(file_cfg.get("max_bytes", 1_048_576)),
                backupCount=int(file_cfg.get("backup_count", 3)),
                encoding="utf-8",
            )
            file_handler.setLevel(_level_value(file_cfg.get("level", "DEBUG")))
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            self.addHandler(file_handler)

    def _log(  # type: ignore[override]
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        """Route structured keyword context into the message text."""
        message = format_context(str(msg), context) if context else msg
        super()._log(
            level,
            message,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )

    def trace(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at TRACE level."""
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def success(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at SUCCESS level."""
        if self.isEnabledFor(SUCCESS_LEVEL):
            self._log(SUCCESS_LEVEL, msg, args, **kwargs)

    def get_logger(self) -> LogManager:
        """Return self, for call sites expecting a factory."""
        return self


__all__ = [
    "DEFAULT_CONFIG",
    "FALLBACK_PRESETS",
    "LOGGING_LEVEL",
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "LogManager",
    "format_context",
]
