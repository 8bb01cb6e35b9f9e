"""Tests for the sitekit.pipeline.runner module."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from sitekit.pipeline.exceptions import PipelineConfigError
from sitekit.pipeline.models import PipelineState, ProcessOutcome, Step, StepKind, StepStatus
from sitekit.pipeline.runner import Pipeline
from sitekit.pipeline.steps import StepRunner
from sitekit.reporting import MessageKind, RecordingReporter
from sitekit.targets.models import ExecutionContext
from sitekit.targets.probe import LIST_OPERATION, CapabilityProbe

FAIL = ProcessOutcome(1, "", "boom\n")


@pytest.fixture
def make_pipeline(
    local_context: ExecutionContext,
    reporter: RecordingReporter,
    make_prompter: Callable[..., Any],
) -> Callable[..., Pipeline]:
    """Build a pipeline over a fake process runner."""

    def _make(steps: list[Step], runner: Any, *, confirms: tuple[bool, ...] = (), prompter: Any = ...) -> Pipeline:
        return Pipeline(
            "test",
            steps,
            local_context,
            StepRunner(runner),
            reporter=reporter,
            prompter=make_prompter(confirms=confirms) if prompter is ... else prompter,
        )

    return _make


# ============================================================================
# Construction
# ============================================================================


class TestPipelineConstruction:
    """Tests for pipeline validation."""

    def test_empty(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """A pipeline needs steps."""
        with pytest.raises(PipelineConfigError):
            make_pipeline([], fake_runner)

    def test_duplicate_names(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """Step names are unique within a pipeline."""
        steps = [Step(name="cr", operation="cr"), Step(name="cr", operation="cache:rebuild")]
        with pytest.raises(PipelineConfigError, match="Duplicate step name"):
            make_pipeline(steps, fake_runner)

    def test_initial_state(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """A new pipeline is idle."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner)
        assert pipeline.state is PipelineState.IDLE
        assert pipeline.name == "test"
        assert [s.name for s in pipeline.steps] == ["cr"]


# ============================================================================
# Confirmation
# ============================================================================


class TestPipelineConfirmation:
    """Tests for the confirmation gate."""

    def test_declined_runs_nothing(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """Declining leaves the pipeline idle with no results."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner, confirms=(False,))

        result = pipeline.run("Export site www as local environment?")

        assert result.state is PipelineState.IDLE
        assert result.results == []
        assert fake_runner.calls == []
        assert pipeline.state is PipelineState.IDLE

    def test_confirmed(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """A yes runs every step."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner, confirms=(True,))
        assert pipeline.run("Go?").state is PipelineState.COMPLETED

    def test_assume_yes_skips_prompt(
        self, make_pipeline: Callable[..., Pipeline], fake_runner: Any, make_prompter: Callable[..., Any]
    ) -> None:
        """assume_yes answers for the operator."""
        prompter = make_prompter()
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner, prompter=prompter)

        result = pipeline.run("Go?", assume_yes=True, announce="Running export.")

        assert result.success
        assert prompter.questions == []

    def test_no_prompter_declines(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """Without a prompter and without assume_yes nothing runs."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner, prompter=None)
        assert pipeline.run("Go?").state is PipelineState.IDLE

    def test_no_question(self, make_pipeline: Callable[..., Pipeline], fake_runner: Any) -> None:
        """Without a question the pipeline runs straight away."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner, prompter=None)
        assert pipeline.run().success

    def test_announce(
        self, make_pipeline: Callable[..., Pipeline], fake_runner: Any, reporter: RecordingReporter
    ) -> None:
        """The announcement is written once the run is confirmed."""
        pipeline = make_pipeline([Step(name="cr", operation="cr")], fake_runner)
        pipeline.run("Go?", assume_yes=True, announce="Running import on site:www as environment:local.")
        assert reporter.messages_of(MessageKind.SUCCESS) == ["Running import on site:www as environment:local."]


# ============================================================================
# Failure policy
# ============================================================================


class TestPipelineFailurePolicy:
    """Tests for the abort/continue policy."""

    def test_required_failure_aborts(
        self,
        make_pipeline: Callable[..., Pipeline],
        make_fake_runner: Callable[..., Any],
        reporter: RecordingReporter,
    ) -> None:
        """A failing required step stops the run."""
        runner = make_fake_runner({"config:import": FAIL})
        steps = [
            Step(name="cache-clear", operation="cache:rebuild"),
            Step(name="config-import", operation="config:import", failure_message="Failure importing configuration."),
            Step(name="import-blocks", operation="import-blocks", required=False),
        ]

        result = make_pipeline(steps, runner).run(assume_yes=True)

        assert result.state is PipelineState.ABORTED
        assert result.aborted_at == "config-import"
        assert result.executed_steps == ["cache-clear", "config-import"]
        assert runner.operations == ["cache:rebuild", "config:import"]
        assert reporter.messages_of(MessageKind.ERROR) == ["Failure importing configuration."]
        assert "boom" in reporter.messages_of(MessageKind.TEXT)

    def test_optional_failure_continues(
        self,
        make_pipeline: Callable[..., Pipeline],
        make_fake_runner: Callable[..., Any],
        reporter: RecordingReporter,
    ) -> None:
        """A failing optional step is a warning and the run goes on."""
        runner = make_fake_runner({"composer": FAIL})
        steps = [
            Step(
                name="composer",
                kind=StepKind.SHELL,
                command="composer install",
                required=False,
                failure_message="Failure installing Composer dependencies.",
            ),
            Step(name="cr", operation="cr", success_message="Cache cleared."),
        ]

        result = make_pipeline(steps, runner).run(assume_yes=True)

        assert result.state is PipelineState.COMPLETED
        assert [r.name for r in result.warnings] == ["composer"]
        assert reporter.messages_of(MessageKind.WARNING) == ["Failure installing Composer dependencies."]
        assert reporter.messages_of(MessageKind.SUCCESS) == ["Cache cleared."]

    def test_default_failure_message(
        self,
        make_pipeline: Callable[..., Pipeline],
        make_fake_runner: Callable[..., Any],
        reporter: RecordingReporter,
    ) -> None:
        """Steps without a failure message get a generic one using their label."""
        runner = make_fake_runner({"cr": FAIL})
        make_pipeline([Step(name="cr", operation="cr", title="Clearing cache")], runner).run(assume_yes=True)
        assert reporter.messages_of(MessageKind.ERROR) == ["Step 'Clearing cache' failed."]
        assert reporter.titles == ["Clearing cache"]


# ============================================================================
# Skips and requirements
# ============================================================================


class TestPipelineSkips:
    """Tests for skip flags and step requirements."""

    def test_skip_flag(
        self, make_pipeline: Callable[..., Pipeline], fake_runner: Any, reporter: RecordingReporter
    ) -> None:
        """Skipped steps never run and write nothing."""
        steps = [
            Step(name="composer", kind=StepKind.SHELL, command="composer install", skip=True, title="Composer"),
            Step(name="cr", operation="cr"),
        ]

        result = make_pipeline(steps, fake_runner).run(assume_yes=True)

        assert result.get("composer").status is StepStatus.SKIPPED  # type: ignore[union-attr]
        assert fake_runner.commands == []
        assert reporter.titles == []
        assert result.success

    def test_unmet_requirement(
        self,
        make_pipeline: Callable[..., Pipeline],
        make_fake_runner: Callable[..., Any],
        reporter: RecordingReporter,
    ) -> None:
        """A step whose requirement failed is skipped with a warning."""
        runner = make_fake_runner({"sql:drop": FAIL})
        steps = [
            Step(name="db-drop", operation="sql:drop", required=False),
            Step(
                name="db-import",
                kind=StepKind.SHELL,
                command="gunzip -c dump | drush sql:cli",
                required=False,
                requires=("db-drop",),
                title="Import",
            ),
        ]

        result = make_pipeline(steps, runner).run(assume_yes=True)

        assert result.get("db-import").status is StepStatus.SKIPPED  # type: ignore[union-attr]
        assert runner.commands == []
        assert "Skipping Import: db-drop did not complete." in reporter.messages_of(MessageKind.WARNING)

    def test_requirement_skipped_by_flag(
        self, make_pipeline: Callable[..., Pipeline], fake_runner: Any
    ) -> None:
        """A requirement that was skipped is not met either."""
        steps = [
            Step(name="db-drop", operation="sql:drop", skip=True, required=False),
            Step(name="db-import", operation="sql:cli", requires=("db-drop",), required=False),
        ]
        result = make_pipeline(steps, fake_runner).run(assume_yes=True)
        assert result.executed_steps == []


# ============================================================================
# Capability gating
# ============================================================================


class TestPipelineBuild:
    """Tests for Pipeline.build capability gating."""

    def test_disabled_capability_dropped(
        self,
        make_fake_runner: Callable[..., Any],
        local_context: ExecutionContext,
        reporter: RecordingReporter,
    ) -> None:
        """Steps of a disabled component are removed before the run."""
        runner = make_fake_runner({LIST_OPERATION: ProcessOutcome(0, '{"default_content_deploy": {}}')})
        steps = [
            Step(name="cr", operation="cr"),
            Step(name="import-blocks", operation="import-blocks", capability="structure_sync", required=False),
            Step(name="import-taxonomies", operation="import-taxonomies", capability="structure_sync", required=False),
            Step(name="content", operation="default-content-deploy:import", capability="default_content_deploy"),
        ]

        pipeline = Pipeline.build(
            "conf-import",
            steps,
            local_context,
            StepRunner(runner),
            probe=CapabilityProbe(runner),
            reporter=reporter,
        )

        assert [s.name for s in pipeline.steps] == ["cr", "content"]
        assert [c.target for c in runner.calls].count(LIST_OPERATION) == 1

    def test_no_probe_drops_gated_steps(
        self, fake_runner: Any, local_context: ExecutionContext, reporter: RecordingReporter
    ) -> None:
        """Without a probe, gated steps are never kept."""
        steps = [
            Step(name="cr", operation="cr"),
            Step(name="import-blocks", operation="import-blocks", capability="structure_sync"),
        ]
        pipeline = Pipeline.build("conf-import", steps, local_context, StepRunner(fake_runner), reporter=reporter)
        assert [s.name for s in pipeline.steps] == ["cr"]
