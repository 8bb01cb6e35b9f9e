"""Dispatch a step to the executor for its kind."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sitekit.pipeline.models import Step, StepKind, StepResult
from sitekit.pipeline.steps.callable import CallableStep
from sitekit.pipeline.steps.shell import ShellStep
from sitekit.pipeline.steps.site import SiteStep

if TYPE_CHECKING:
    from sitekit.pipeline.base import AbstractStep, ProcessRunner
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)


class StepRunner:
    """Execute one step under a context.

    A single attempt is made per call; retries are not performed.

    Args:
        runner: Process runner shared by the site and shell executors.
        executors: Per-kind executor overrides.

    Examples:
        >>> step_runner = StepRunner(FakeProcessRunner())  # doctest: +SKIP
        >>> step_runner.run_operation(context, "cr").success  # doctest: +SKIP
        True
    """

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        executors: Mapping[StepKind, AbstractStep] | None = None,
    ) -> None:
        self._runner = runner
        self._executors: dict[StepKind, AbstractStep] = {
            StepKind.SITE: SiteStep(runner),
            StepKind.SHELL: ShellStep(runner),
            StepKind.CALLABLE: CallableStep(),
        }
        if executors:
            self._executors.update(executors)

    @property
    def process_runner(self) -> ProcessRunner:
        """Return the underlying process runner."""
        return self._runner

    def run(self, context: ExecutionContext, step: Step, *, streaming: bool = False) -> StepResult:
        """Execute ``step`` under ``context`` (or the step's own context)."""
        effective = step.context or context
        executor = self._executors[step.kind]
        result = executor.execute(step, effective, streaming=streaming)
        result.required = step.required
        logger.debug("Step '%s' -> %s (%.3fs)", result.name, result.status.value, result.duration)
        return result

    def run_operation(
        self,
        context: ExecutionContext,
        operation: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        *,
        streaming: bool = False,
    ) -> StepResult:
        """Run a single site-tool operation outside of a pipeline."""
        name = operation.replace(":", "-").replace(".", "-")
        step = Step(name=name, operation=operation, args=tuple(args), options=dict(options or {}))
        return self.run(context, step, streaming=streaming)


__all__ = [
    "StepRunner",
]
