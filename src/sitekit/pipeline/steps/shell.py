"""Shell step executor for pipeline.

Runs ``step.command`` through the process runner with the context's
environment overlay, so pipes and redirections (``sql:dump > file``,
``gunzip -c file | ...``) work as written.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sitekit.pipeline.models import Step, StepResult
from sitekit.pipeline.steps.site import outcome_to_result

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)


class ShellStep:
    """Execute a shell command as a pipeline step.

    Examples:
        >>> from sitekit.pipeline.models import StepKind
        >>> step = Step(name="composer", kind=StepKind.SHELL, command="composer install")
        >>> ShellStep(runner).execute(step, context)  # doctest: +SKIP
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
        """Execute a shell command.

        Returns:
            StepResult with captured stdout, stderr, return code and duration.
        """
        command = step.command or ""
        logger.debug("ShellStep '%s': command=%r", step.name, command)

        start = time.monotonic()
        outcome = self._runner.shell(command, cwd=step.cwd, env=context.env_vars, streaming=streaming)
        result = outcome_to_result(step.name, outcome, time.monotonic() - start)

        if not result.success:
            logger.debug("ShellStep '%s' failed (rc=%d): %s", step.name, outcome.return_code, result.error)
        return result


__all__ = [
    "ShellStep",
]
