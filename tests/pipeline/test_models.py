"""Tests for the sitekit.pipeline.models module."""

from __future__ import annotations

import pytest

from sitekit.pipeline.exceptions import PipelineAbortedError, PipelineConfigError
from sitekit.pipeline.models import (
    PipelineResult,
    PipelineState,
    ProcessOutcome,
    Step,
    StepKind,
    StepResult,
    StepStatus,
)


class TestStep:
    """Tests for Step validation."""

    def test_site_step_defaults(self) -> None:
        """Site steps are required by default and need an operation."""
        step = Step(name="cache-clear", operation="cache:rebuild", args=[1, "x"])  # type: ignore[arg-type]
        assert step.kind is StepKind.SITE
        assert step.required is True
        assert step.args == ("1", "x")
        assert step.label == "cache-clear"

    def test_label_uses_title(self) -> None:
        """The title is the human-readable label."""
        assert Step(name="cache-clear", operation="cr", title="Clearing cache").label == "Clearing cache"

    def test_site_step_without_operation(self) -> None:
        """A site step must name its operation."""
        with pytest.raises(PipelineConfigError, match="requires an 'operation'"):
            Step(name="empty")

    def test_shell_step_without_command(self) -> None:
        """A shell step must carry a command."""
        with pytest.raises(PipelineConfigError, match="requires a 'command'"):
            Step(name="composer", kind=StepKind.SHELL)

    def test_callable_step_without_func(self) -> None:
        """A callable step must carry a function."""
        with pytest.raises(PipelineConfigError, match="requires a 'func'"):
            Step(name="check", kind=StepKind.CALLABLE)

    def test_self_requirement(self) -> None:
        """A step cannot require itself."""
        with pytest.raises(PipelineConfigError, match="cannot require itself"):
            Step(name="db-drop", operation="sql:drop", requires=["db-drop"])  # type: ignore[arg-type]

    def test_invalid_name(self) -> None:
        """Step names are validated."""
        with pytest.raises(PipelineConfigError):
            Step(name="db dump", operation="sql:dump")

    def test_frozen(self) -> None:
        """Steps are immutable."""
        step = Step(name="cr", operation="cr")
        with pytest.raises(AttributeError):
            step.skip = True  # type: ignore[misc]


class TestProcessOutcome:
    """Tests for ProcessOutcome."""

    def test_success(self) -> None:
        """Only exit code 0 is a success."""
        assert ProcessOutcome(0).success is True
        assert ProcessOutcome(1, "", "boom").success is False


class TestPipelineResult:
    """Tests for PipelineResult aggregation."""

    def _result(self) -> PipelineResult:
        return PipelineResult(
            name="sync",
            state=PipelineState.COMPLETED,
            results=[
                StepResult(name="composer", status=StepStatus.FAILED, required=False, error="boom"),
                StepResult(name="db-dump", status=StepStatus.SKIPPED, required=False),
                StepResult(name="db-drop", status=StepStatus.SUCCESS),
            ],
        )

    def test_aggregates(self) -> None:
        """Failures, warnings, skips and executed steps are derived from results."""
        result = self._result()
        assert result.success is True
        assert result.confirmed is True
        assert [r.name for r in result.failed_steps] == ["composer"]
        assert [r.name for r in result.warnings] == ["composer"]
        assert [r.name for r in result.skipped_steps] == ["db-dump"]
        assert result.executed_steps == ["composer", "db-drop"]

    def test_get(self) -> None:
        """Results are looked up by step name."""
        result = self._result()
        assert result.get("db-drop") is not None
        assert result.get("missing") is None

    def test_idle_is_not_confirmed(self) -> None:
        """A declined run was never confirmed."""
        result = PipelineResult(name="sync")
        assert result.confirmed is False
        assert result.success is False

    def test_raise_for_state(self) -> None:
        """An aborted result raises with the failing step's error."""
        result = PipelineResult(
            name="conf-import",
            state=PipelineState.ABORTED,
            results=[StepResult(name="config-import", status=StepStatus.FAILED, error="exit code 1")],
            aborted_at="config-import",
        )
        with pytest.raises(PipelineAbortedError) as exc_info:
            result.raise_for_state()
        assert exc_info.value.step_name == "config-import"
        assert exc_info.value.reason == "exit code 1"

    def test_raise_for_state_passes_through(self) -> None:
        """A completed result is returned unchanged."""
        result = self._result()
        assert result.raise_for_state() is result
