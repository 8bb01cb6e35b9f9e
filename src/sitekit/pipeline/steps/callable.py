"""Callable step executor for pipeline.

Calls ``step.func`` with the execution context. A falsy return value other
than ``None`` marks the step as failed; a raised :class:`SitekitError` or
``OSError`` becomes a failed result carrying the error message.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sitekit.config.exceptions import SitekitError
from sitekit.pipeline.models import Step, StepResult, StepStatus

if TYPE_CHECKING:
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)


class CallableStep:
    """Execute a Python callable as a pipeline step.

    Examples:
        >>> from sitekit.pipeline.models import StepKind
        >>> from sitekit.targets.models import ExecutionContext
        >>> step = Step(name="noop", kind=StepKind.CALLABLE, func=lambda ctx: None)
        >>> CallableStep().execute(step, ExecutionContext(name="@self")).status
        <StepStatus.SUCCESS: 'success'>
    """

    def execute(
        self,
        step: Step,
        context: ExecutionContext,
        *,
        streaming: bool = False,
    ) -> StepResult:
        """Call the step's function with ``context``.

        Returns:
            StepResult with duration and status.
        """
        func = step.func
        if func is None:
            return StepResult(name=step.name, status=StepStatus.FAILED, error="No callable configured")

        start = time.monotonic()
        try:
            value = func(context)
        except (SitekitError, OSError) as exc:
            duration = time.monotonic() - start
            logger.debug("CallableStep '%s' raised %s", step.name, type(exc).__name__)
            return StepResult(name=step.name, status=StepStatus.FAILED, duration=duration, error=str(exc))

        duration = time.monotonic() - start
        if value is not None and not value:
            return StepResult(name=step.name, status=StepStatus.FAILED, duration=duration, error=step.failure_message)

        logger.debug("CallableStep '%s' completed in %.3fs", step.name, duration)
        output = value if isinstance(value, str) else ""
        return StepResult(name=step.name, status=StepStatus.SUCCESS, output=output, duration=duration)


__all__ = [
    "CallableStep",
]
