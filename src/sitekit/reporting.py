"""Operator-facing output.

Workflows never print directly; they write through a :class:`Reporter`.
Typed messages (notice, success, warning, error) go to the package
``LogManager``; plain text, section titles and tables go to the Rich
console.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from sitekit.logging.manager import LogManager


class MessageKind(str, Enum):
    """Kind of a reported message.

    Attributes:
        TEXT: Plain text written to the console.
        NOTICE: Informational notice (e.g. an invalid value was ignored).
        SUCCESS: An operation completed.
        WARNING: An operation failed but the workflow continues.
        ERROR: An operation failed.
    """

    TEXT = "text"
    NOTICE = "notice"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@runtime_checkable
class Reporter(Protocol):
    """Output sink used by resolvers, pipelines and health checks."""

    def title(self, text: str) -> None:
        """Start a new output section."""
        ...

    def write(self, message: str, kind: MessageKind = MessageKind.TEXT) -> None:
        """Write one message of the given kind."""
        ...

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        """Render a table."""
        ...

    def newline(self) -> None:
        """Write an empty line."""
        ...


class ConsoleReporter:
    """Reporter rendering to a Rich console and a LogManager.

    Args:
        console: Console for text, titles and tables.
        logger: LogManager receiving typed messages.
    """

    def __init__(self, console: Console, logger: LogManager) -> None:
        self._console = console
        self._logger = logger

    def title(self, text: str) -> None:
        self._console.print()
        self._console.rule(f"[bold]{text}[/]", align="left")

    def write(self, message: str, kind: MessageKind = MessageKind.TEXT) -> None:
        kind = MessageKind(kind)
        if kind is MessageKind.NOTICE:
            self._logger.info(message)
        elif kind is MessageKind.SUCCESS:
            self._logger.success(message)
        elif kind is MessageKind.WARNING:
            self._logger.warning(message)
        elif kind is MessageKind.ERROR:
            self._logger.error(message)
        else:
            self._console.print(f" {message}", markup=False, highlight=False)

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        table = Table(show_lines=False)
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self._console.print(table)

    def newline(self) -> None:
        self._console.print()


@dataclass(slots=True)
class RecordingReporter:
    """In-memory reporter keeping everything written to it.

    Examples:
        >>> reporter = RecordingReporter()
        >>> reporter.write("Skipping database dump.", MessageKind.NOTICE)
        >>> reporter.messages_of(MessageKind.NOTICE)
        ['Skipping database dump.']
    """

    messages: list[tuple[MessageKind, str]] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    tables: list[tuple[list[str], list[list[object]]]] = field(default_factory=list)

    def title(self, text: str) -> None:
        self.titles.append(text)

    def write(self, message: str, kind: MessageKind = MessageKind.TEXT) -> None:
        self.messages.append((MessageKind(kind), message))

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        self.tables.append((list(headers), [list(row) for row in rows]))

    def newline(self) -> None:
        return None

    def messages_of(self, kind: MessageKind) -> list[str]:
        """Return the messages of one kind, in order."""
        return [message for message_kind, message in self.messages if message_kind is kind]


__all__ = [
    "ConsoleReporter",
    "MessageKind",
    "RecordingReporter",
    "Reporter",
]
