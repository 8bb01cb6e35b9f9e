"""Confirm-then-run execution of an ordered step sequence.

Provides the ``Pipeline`` class that runs a sequence of steps against one
execution context with confirmation gating, skip flags, step requirements
and the per-step abort/continue policy.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sitekit.pipeline.exceptions import PipelineConfigError
from sitekit.pipeline.models import PipelineResult, PipelineState, Step, StepResult, StepStatus
from sitekit.pipeline.validators import validate_pipeline_config
from sitekit.reporting import MessageKind

if TYPE_CHECKING:
    from sitekit.pipeline.steps import StepRunner
    from sitekit.prompts import Prompter
    from sitekit.reporting import Reporter
    from sitekit.targets.models import ExecutionContext
    from sitekit.targets.probe import CapabilityProbe

logger = logging.getLogger(__name__)


class Pipeline:
    """Execute an ordered list of steps against one context.

    The pipeline moves through ``IDLE -> CONFIRMING -> RUNNING`` and ends
    in ``COMPLETED`` or ``ABORTED``. Declining the confirmation returns it
    to ``IDLE`` without running anything.

    Args:
        name: Pipeline name used in logs and results.
        steps: Steps in execution order.
        context: Context every step runs as, unless it carries its own.
        step_runner: Executes individual steps.
        reporter: Receives step titles, messages and warnings.
        prompter: Asks the confirmation question.
        streaming: Forward step output in real time.

    Raises:
        PipelineConfigError: If the step list is empty, too long or has
            duplicate names.

    Examples:
        >>> pipeline = Pipeline("export", steps, context, step_runner, reporter=reporter)  # doctest: +SKIP
        >>> pipeline.run("Export site www as local environment?", assume_yes=True).state  # doctest: +SKIP
        <PipelineState.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        name: str,
        steps: Sequence[Step],
        context: ExecutionContext,
        step_runner: StepRunner,
        *,
        reporter: Reporter,
        prompter: Prompter | None = None,
        streaming: bool = False,
    ) -> None:
        steps = tuple(steps)
        validate_pipeline_config(step_count=len(steps))
        seen: set[str] = set()
        for step in steps:
            if step.name in seen:
                raise PipelineConfigError(f"Duplicate step name: '{step.name}'")
            seen.add(step.name)

        self._name = name
        self._steps = steps
        self._context = context
        self._step_runner = step_runner
        self._reporter = reporter
        self._prompter = prompter
        self._streaming = streaming
        self._state = PipelineState.IDLE

    @classmethod
    def build(
        cls,
        name: str,
        steps: Sequence[Step],
        context: ExecutionContext,
        step_runner: StepRunner,
        *,
        probe: CapabilityProbe | None = None,
        reporter: Reporter,
        prompter: Prompter | None = None,
        streaming: bool = False,
    ) -> Pipeline:
        """Create a pipeline, dropping steps whose capability is not enabled.

        Each governing component is checked once, here; the result is not
        re-checked while the pipeline runs. Without a probe every gated
        step is dropped.
        """
        enabled: dict[str, bool] = {}
        kept: list[Step] = []
        for step in steps:
            if step.capability is None:
                kept.append(step)
                continue
            if step.capability not in enabled:
                enabled[step.capability] = probe.is_enabled(context, step.capability) if probe else False
            if enabled[step.capability]:
                kept.append(step)
            else:
                logger.debug("Step '%s' dropped: '%s' is not enabled", step.name, step.capability)

        return cls(
            name,
            kept,
            context,
            step_runner,
            reporter=reporter,
            prompter=prompter,
            streaming=streaming,
        )

    @property
    def name(self) -> str:
        """Return the pipeline name."""
        return self._name

    @property
    def steps(self) -> tuple[Step, ...]:
        """Return the steps in execution order."""
        return self._steps

    @property
    def state(self) -> PipelineState:
        """Return the current lifecycle state."""
        return self._state

    def confirm(self, question: str, *, assume_yes: bool = False) -> bool:
        """Ask the operator to confirm the run.

        ``assume_yes`` answers for them. Without a prompter the run is
        treated as declined.
        """
        self._state = PipelineState.CONFIRMING
        if assume_yes:
            return True
        if self._prompter is None:
            logger.debug("Pipeline '%s': no prompter available, confirmation declined", self._name)
            return False
        return bool(self._prompter.confirm(question))

    def run(
        self,
        question: str | None = None,
        *,
        assume_yes: bool = False,
        announce: str | None = None,
    ) -> PipelineResult:
        """Confirm, then execute the steps in order.

        Args:
            question: Yes/no question asked before any step runs. None
                skips confirmation.
            assume_yes: Answer the question with yes.
            announce: Success message written once the run is confirmed.

        Returns:
            PipelineResult. Its state is ``IDLE`` when the confirmation
            was declined, ``ABORTED`` when a required step failed and
            ``COMPLETED`` otherwise.
        """
        result = PipelineResult(name=self._name)

        if question is not None and not self.confirm(question, assume_yes=assume_yes):
            self._state = PipelineState.IDLE
            result.state = self._state
            logger.info("Pipeline '%s' declined", self._name)
            return result

        self._state = PipelineState.RUNNING
        logger.info("Pipeline '%s' started (%d steps)", self._name, len(self._steps))
        if announce:
            self._reporter.write(announce, MessageKind.SUCCESS)

        start = time.monotonic()
        for step in self._steps:
            if step.skip:
                logger.debug("Step '%s' skipped by flag", step.name)
                result.results.append(StepResult(name=step.name, status=StepStatus.SKIPPED, required=step.required))
                continue

            missing = self._unmet_requirements(step, result)
            if missing:
                self._reporter.write(
                    f"Skipping {step.label}: {', '.join(missing)} did not complete.",
                    MessageKind.WARNING,
                )
                result.results.append(StepResult(name=step.name, status=StepStatus.SKIPPED, required=step.required))
                continue

            step_result = self._execute(step)
            result.results.append(step_result)

            if not step_result.success and step.required:
                self._state = PipelineState.ABORTED
                result.aborted_at = step.name
                logger.info("Pipeline '%s' aborted at step '%s'", self._name, step.name)
                break
        else:
            self._state = PipelineState.COMPLETED

        result.state = self._state
        result.duration = time.monotonic() - start
        logger.info(
            "Pipeline '%s' finished in %.3fs (state=%s)",
            self._name,
            result.duration,
            result.state.value,
        )
        return result

    def _unmet_requirements(self, step: Step, result: PipelineResult) -> list[str]:
        missing = []
        for name in step.requires:
            previous = result.get(name)
            if previous is None or not previous.success:
                missing.append(name)
        return missing

    def _execute(self, step: Step) -> StepResult:
        if step.title:
            self._reporter.title(step.title)
        if step.description:
            self._reporter.write(step.description)

        step_result = self._step_runner.run(self._context, step, streaming=self._streaming)

        if step_result.success:
            if step.success_message:
                self._reporter.write(step.success_message, MessageKind.SUCCESS)
            return step_result

        message = step.failure_message or f"Step '{step.label}' failed."
        if step_result.error_output.strip() and not self._streaming:
            self._reporter.write(step_result.error_output.strip())
        elif step_result.error and not step_result.error_output and step_result.error != step.failure_message:
            self._reporter.write(step_result.error)
        self._reporter.write(message, MessageKind.ERROR if step.required else MessageKind.WARNING)
        return step_result


__all__ = [
    "Pipeline",
]
