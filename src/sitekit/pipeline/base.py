"""Protocols for process invocation and step execution.

``ProcessRunner`` is the only boundary to the outside world: the step
executors and the capability probe call it instead of spawning processes
themselves, so both can be exercised with fakes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sitekit.pipeline.models import ProcessOutcome, Step, StepResult
    from sitekit.targets.models import ExecutionContext


@runtime_checkable
class ProcessRunner(Protocol):
    """Run site-tool operations and shell commands out of process."""

    def invoke(
        self,
        context: ExecutionContext,
        operation: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        *,
        streaming: bool = False,
    ) -> ProcessOutcome:
        """Run ``operation`` against ``context`` with its env overlay.

        Args:
            context: Context naming the alias and carrying env vars.
            operation: Site-tool operation name.
            args: Positional arguments.
            options: Operation options.
            streaming: Forward output in real time instead of buffering it.

        Returns:
            ProcessOutcome with exit code, stdout and stderr.
        """
        ...

    def shell(
        self,
        command: str,
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        streaming: bool = False,
    ) -> ProcessOutcome:
        """Run a shell command with an environment overlay."""
        ...


@runtime_checkable
class AbstractStep(Protocol):
    """Protocol implemented by the per-kind step executors.

    Examples:
        >>> def run_step(executor: AbstractStep, step: Step, ctx: ExecutionContext) -> StepResult:
        ...     return executor.execute(step, ctx)
    """

    def execute(
        self,
        step: Step,
        context: ExecutionContext,
        *,
        streaming: bool = False,
    ) -> StepResult:
        """Execute a pipeline step under a context."""
        ...


__all__ = [
    "AbstractStep",
    "ProcessRunner",
]
