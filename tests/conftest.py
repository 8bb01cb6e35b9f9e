"""Shared pytest fixtures for the sitekit test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from sitekit.config import reset_config
from sitekit.pipeline.models import ProcessOutcome
from sitekit.reporting import RecordingReporter
from sitekit.targets.models import ExecutionContext
from sitekit.targets.registry import TargetRegistry
from sitekit.workflows.runtime import Runtime

# pylint: disable=redefined-outer-name

SITES: dict[str, Any] = {
    "www": {
        "local": {"root": "/var/www/docroot", "uri": "http://www.docksal", "site-env": "local"},
        "remote_dev": {"label": "dev", "uri": "https://dev.example.com", "host": "dev.example.com"},
        "remote_prod": {"label": "prod", "uri": "https://www.example.com", "host": "prod.example.com"},
    },
    "blog": {
        "local": {"root": "/var/www/blog", "uri": "http://blog.docksal"},
        "remote_prod": {"label": "prod", "uri": "https://blog.example.com"},
    },
}


# ============================================================================
# FAKES
# ============================================================================


@dataclass(slots=True)
class RecordedCall:
    """One call received by the fake process runner."""

    kind: str
    target: str
    args: tuple[str, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    streaming: bool = False


class FakeProcessRunner:
    """Process runner recording calls and replaying scripted outcomes.

    ``outcomes`` maps an operation name (site-tool calls) or a command
    fragment (shell calls) to the outcome returned for it. Exact operation
    matches win over fragment matches; unscripted calls succeed.
    """

    def __init__(self, outcomes: Mapping[str, ProcessOutcome] | None = None) -> None:
        self.outcomes: dict[str, ProcessOutcome] = dict(outcomes or {})
        self.calls: list[RecordedCall] = []

    def invoke(
        self,
        context: ExecutionContext,
        operation: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        *,
        streaming: bool = False,
    ) -> ProcessOutcome:
        self.calls.append(
            RecordedCall(
                kind="invoke",
                target=operation,
                args=tuple(args),
                options=dict(options or {}),
                env=dict(context.env_vars),
                cwd=context.name,
                streaming=streaming,
            )
        )
        return self._outcome(operation)

    def shell(
        self,
        command: str,
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        streaming: bool = False,
    ) -> ProcessOutcome:
        self.calls.append(
            RecordedCall(kind="shell", target=command, env=dict(env or {}), cwd=cwd, streaming=streaming)
        )
        return self._outcome(command)

    def _outcome(self, key: str) -> ProcessOutcome:
        if key in self.outcomes:
            return self.outcomes[key]
        for fragment, outcome in self.outcomes.items():
            if fragment in key:
                return outcome
        return ProcessOutcome(return_code=0)

    @property
    def operations(self) -> list[str]:
        """Site-tool operations invoked, in order (component listings excluded)."""
        return [call.target for call in self.calls if call.kind == "invoke" and call.target != "pm:list"]

    @property
    def commands(self) -> list[str]:
        """Shell commands run, in order."""
        return [call.target for call in self.calls if call.kind == "shell"]


class ScriptedPrompter:
    """Prompter answering from scripted lists and recording questions.

    When a list runs out, ``choice`` and ``text`` return the default and
    ``confirm`` returns ``default``.
    """

    def __init__(self, choices: Sequence[str | None] = (), confirms: Sequence[bool] = ()) -> None:
        self.choices = list(choices)
        self.confirms = list(confirms)
        self.questions: list[str] = []
        self.offered: list[list[str]] = []

    def choice(self, question: str, choices: Sequence[str], default: str | None = None) -> str | None:
        self.questions.append(question)
        self.offered.append(list(choices))
        return self.choices.pop(0) if self.choices else default

    def text(self, question: str, default: str | None = None) -> str | None:
        self.questions.append(question)
        return self.choices.pop(0) if self.choices else default

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0) if self.confirms else default


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset cached configuration and the package logger between tests."""
    monkeypatch.delenv("SITEKIT_CONFIG", raising=False)
    reset_config()
    yield
    reset_config()
    std_logger = logging.getLogger("sitekit")
    for handler in std_logger.handlers[:]:
        std_logger.removeHandler(handler)
    std_logger.setLevel(logging.NOTSET)
    std_logger.propagate = True


@pytest.fixture
def sites() -> dict[str, Any]:
    """Return the inline alias definitions used across tests."""
    return SITES


@pytest.fixture
def registry() -> TargetRegistry:
    """Registry with a ``www`` and a ``blog`` site."""
    return TargetRegistry.from_mapping(SITES)


@pytest.fixture
def fake_runner() -> FakeProcessRunner:
    """Process runner where every call succeeds unless scripted otherwise."""
    return FakeProcessRunner()


@pytest.fixture
def make_fake_runner() -> Callable[..., FakeProcessRunner]:
    """Factory for process runners with scripted outcomes."""
    return FakeProcessRunner


@pytest.fixture
def reporter() -> RecordingReporter:
    """In-memory reporter."""
    return RecordingReporter()


@pytest.fixture
def make_prompter() -> Callable[..., ScriptedPrompter]:
    """Factory for scripted prompters."""
    return ScriptedPrompter


@pytest.fixture
def local_context() -> ExecutionContext:
    """Context of the local ``www`` alias."""
    return ExecutionContext(
        name="@www.local",
        uri="http://www.docksal",
        options={"uri": "http://www.docksal"},
        root="/var/www/docroot",
    )


@pytest.fixture
def make_runtime(
    registry: TargetRegistry,
    fake_runner: FakeProcessRunner,
    reporter: RecordingReporter,
    tmp_path: Path,
) -> Callable[..., Runtime]:
    """Factory wiring a Runtime around the fakes.

    Keyword arguments override the config sections, the prompter and the
    process runner.
    """

    def _make(
        *,
        config: dict[str, Any] | None = None,
        prompter: ScriptedPrompter | None = None,
        runner: FakeProcessRunner | None = None,
        streaming: bool = False,
    ) -> Runtime:
        merged: dict[str, Any] = {
            "defaults": {"site": "www", "environment": "local"},
            "site_tool": {"binary": "drush"},
            "sync": {"dump_dir": str(tmp_path / "database_backups"), "project_root": str(tmp_path)},
            "check": {"max_redirects": 10, "timeout": 5},
        }
        merged.update(config or {})
        return Runtime.create(
            merged,
            process_runner=runner or fake_runner,
            reporter=reporter,
            prompter=prompter or ScriptedPrompter(),
            registry=registry,
            streaming=streaming,
        )

    return _make
