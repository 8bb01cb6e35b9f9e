"""Shared CLI helpers: console, command results and error exits."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

console = Console()


class CommandStatus(str, Enum):
    """Outcome of a CLI command."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


_STATUS_STYLE = {
    CommandStatus.OK: ("green", "✓"),
    CommandStatus.WARNING: ("yellow", "!"),
    CommandStatus.ERROR: ("red", "✗"),
}


@dataclass(slots=True)
class CommandResult:
    """Final message of a CLI command.

    Attributes:
        status: Outcome.
        message: Human-readable summary.
        payload: Optional details rendered as a two-column table.
    """

    status: CommandStatus
    message: str
    payload: Mapping[str, Any] | None = None


def render_result(result: CommandResult) -> None:
    """Print a command result to the console."""
    style, icon = _STATUS_STYLE[result.status]
    console.print(f"[{style}]{icon} {result.message}[/]", highlight=False)
    if result.payload:
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="dim")
        table.add_column("Value")
        for key, value in result.payload.items():
            table.add_row(str(key), str(value))
        console.print(table)


def exit_error(message: str, *, code: int = 1) -> NoReturn:
    """Render an error result and exit with ``code``."""
    render_result(CommandResult(status=CommandStatus.ERROR, message=message))
    raise typer.Exit(code=code)


__all__ = [
    "CommandResult",
    "CommandStatus",
    "console",
    "exit_error",
    "render_result",
]
