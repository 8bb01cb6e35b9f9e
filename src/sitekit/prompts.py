"""Interactive prompt primitives.

Prompts are only used while resolving a target and confirming a pipeline,
never while steps run.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Confirm, Prompt


@runtime_checkable
class Prompter(Protocol):
    """Choice, free-text and yes/no prompts."""

    def choice(self, question: str, choices: Sequence[str], default: str | None = None) -> str | None:
        """Ask the user to pick one of ``choices``; None when aborted."""
        ...

    def text(self, question: str, default: str | None = None) -> str | None:
        """Ask for free text; None when aborted."""
        ...

    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...


class RichPrompter:
    """Prompter backed by :mod:`rich.prompt`.

    An interrupted prompt (Ctrl-C or end of input) is reported as an
    aborted choice rather than an exception.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def choice(self, question: str, choices: Sequence[str], default: str | None = None) -> str | None:
        unique = list(dict.fromkeys(choices))
        if not unique:
            return None
        try:
            return Prompt.ask(
                question,
                choices=unique,
                default=default if default in unique else None,
                console=self._console,
            )
        except (EOFError, KeyboardInterrupt):
            self._console.print()
            return None

    def text(self, question: str, default: str | None = None) -> str | None:
        try:
            return Prompt.ask(question, default=default, console=self._console)
        except (EOFError, KeyboardInterrupt):
            self._console.print()
            return None

    def confirm(self, question: str, default: bool = False) -> bool:
        try:
            return Confirm.ask(question, default=default, console=self._console)
        except (EOFError, KeyboardInterrupt):
            self._console.print()
            return False


__all__ = [
    "Prompter",
    "RichPrompter",
]
