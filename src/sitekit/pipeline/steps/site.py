"""Site-tool step executor for pipeline.

Invokes ``step.operation`` against the execution context through the
injected :class:`~sitekit.pipeline.base.ProcessRunner`. The runner decides
how the child process is spawned; this executor only maps the outcome to a
:class:`~sitekit.pipeline.models.StepResult`.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sitekit.pipeline.models import ProcessOutcome, Step, StepResult, StepStatus

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)


def outcome_to_result(name: str, outcome: ProcessOutcome, duration: float) -> StepResult:
    """Map a process outcome to a step result.

    Exit code 0 is success; anything else is a failure whose ``error`` is
    the stripped stderr.

    Examples:
        >>> outcome_to_result("cache-clear", ProcessOutcome(1, "", "boom\\n"), 0.1).error
        'boom'
    """
    if outcome.success:
        status = StepStatus.SUCCESS
        error = None
    else:
        status = StepStatus.FAILED
        error = outcome.stderr.strip() or f"exit code {outcome.return_code}"
    return StepResult(
        name=name,
        status=status,
        output=outcome.stdout,
        error_output=outcome.stderr,
        return_code=outcome.return_code,
        duration=duration,
        error=error,
    )


class SiteStep:
    """Run a site-tool operation as a pipeline step.

    Args:
        runner: Process runner used for the invocation.

    Examples:
        >>> from sitekit.targets.models import ExecutionContext
        >>> step = SiteStep(runner)  # doctest: +SKIP
        >>> result = step.execute(Step(name="cache-clear", operation="cr"), ExecutionContext("@self"))  # doctest: +SKIP
    """

    def __init__(self, runner: ProcessRunner) -> None:
        self._runner = runner

    def execute(
        self,
        step: Step,
        context: ExecutionContext,
        *,
        streaming: bool = False,
    ) -> StepResult:
        """Invoke the step's operation.

        Args:
            step: Step definition with operation, args and options.
            context: Context the operation runs as.
            streaming: Forward output in real time.

        Returns:
            StepResult with captured output, return code and duration.
        """
        operation = step.operation or ""
        logger.debug("SiteStep '%s': %s %s", step.name, context.name, operation)

        start = time.monotonic()
        outcome = self._runner.invoke(context, operation, step.args, step.options, streaming=streaming)
        result = outcome_to_result(step.name, outcome, time.monotonic() - start)

        if not result.success:
            logger.debug("SiteStep '%s' failed (rc=%d)", step.name, outcome.return_code)
        return result


__all__ = [
    "SiteStep",
    "outcome_to_result",
]
