"""Data models for the sitekit.pipeline module.

This module defines the core data structures used by the pipeline module:

- StepKind: Enum for how a step is executed (site operation, shell, callable)
- StepStatus: Enum for step result status (success, failed, skipped)
- PipelineState: Enum for the pipeline lifecycle
- ProcessOutcome: Frozen exit code and output of one external invocation
- Step: Frozen definition of a single pipeline step
- StepResult: Mutable result of a single step execution
- PipelineResult: Mutable aggregate result of a pipeline run
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from sitekit.pipeline.exceptions import PipelineAbortedError, PipelineConfigError
from sitekit.pipeline.validators import (
    MAX_STEP_ARGS,
    validate_command,
    validate_operation,
    validate_step_name,
)

if TYPE_CHECKING:
    from sitekit.targets.models import ExecutionContext


class StepKind(str, Enum):
    """Execution mode for a pipeline step.

    Attributes:
        SITE: Invoke a site-tool operation against the context.
        SHELL: Run a shell command with the context's environment overlay.
        CALLABLE: Call a Python function with the context.
    """

    SITE = "site"
    SHELL = "shell"
    CALLABLE = "callable"


class StepStatus(str, Enum):
    """Result status of a pipeline step.

    Attributes:
        SUCCESS: Step completed (exit code 0).
        FAILED: Step failed (non-zero exit code or error).
        SKIPPED: Step did not run (skip flag or unmet requirement).
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineState(str, Enum):
    """Lifecycle state of a pipeline.

    Attributes:
        IDLE: Built but not running; also the state after a declined confirmation.
        CONFIRMING: Waiting for the operator's yes/no.
        RUNNING: Executing steps.
        COMPLETED: Every non-skipped step succeeded or was an optional failure.
        ABORTED: A required step failed.
    """

    IDLE = "idle"
    CONFIRMING = "confirming"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class ProcessOutcome:
    """Exit code and output of one external invocation.

    Examples:
        >>> ProcessOutcome(return_code=0, stdout="ok").success
        True
    """

    return_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """Whether the invocation exited with code 0."""
        return self.return_code == 0


@dataclass(frozen=True, slots=True)
class Step:
    """Definition of a single pipeline step.

    Attributes:
        name: Unique step name within the pipeline.
        operation: Site-tool operation (required for site steps).
        args: Positional arguments for the operation.
        options: Options for the operation (``True`` becomes a bare flag).
        required: Abort the pipeline when this step fails.
        skip: Omit the step entirely.
        kind: Execution mode.
        title: Section title shown before the step runs.
        capability: Component that must be enabled for the step to be kept.
        requires: Names of earlier steps that must have succeeded.
        command: Shell command (required for shell steps).
        cwd: Working directory for shell steps.
        func: Function called with the context (required for callable steps).
        context: Context overriding the pipeline's for this step.
        description: Message written when the step starts.
        success_message: Message written when the step succeeds.
        failure_message: Message written when the step fails.

    Examples:
        >>> step = Step(name="cache-clear", operation="cache:rebuild")
        >>> step.kind, step.required
        (<StepKind.SITE: 'site'>, True)
    """

    name: str
    operation: str | None = None
    args: tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)
    required: bool = True
    skip: bool = False
    kind: StepKind = StepKind.SITE
    title: str | None = None
    capability: str | None = None
    requires: tuple[str, ...] = ()
    command: str | None = None
    cwd: str | None = None
    func: Callable[[ExecutionContext], object] | None = None
    context: ExecutionContext | None = None
    description: str | None = None
    success_message: str | None = None
    failure_message: str | None = None

    def __post_init__(self) -> None:
        """Validate step definition values.

        Raises:
            PipelineConfigError: If any value is invalid.
        """
        validate_step_name(self.name)
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))
        object.__setattr__(self, "requires", tuple(self.requires))

        if self.kind == StepKind.SITE:
            if not self.operation:
                raise PipelineConfigError(f"Step '{self.name}': site step requires an 'operation'")
            validate_operation(self.operation)
        elif self.kind == StepKind.SHELL:
            if not self.command:
                raise PipelineConfigError(f"Step '{self.name}': shell step requires a 'command'")
            validate_command(self.command)
        elif self.kind == StepKind.CALLABLE:
            if self.func is None or not callable(self.func):
                raise PipelineConfigError(f"Step '{self.name}': callable step requires a 'func'")

        if len(self.args) > MAX_STEP_ARGS:
            raise PipelineConfigError(f"Step '{self.name}': too many arguments (max {MAX_STEP_ARGS})")
        if self.name in self.requires:
            raise PipelineConfigError(f"Step '{self.name}' cannot require itself")

    @property
    def label(self) -> str:
        """Human-readable name used in messages."""
        return self.title or self.name


@dataclass(slots=True)
class StepResult:
    """Result of a single pipeline step execution.

    Attributes:
        name: Step name.
        status: Execution result status.
        output: Standard output captured from the step.
        error_output: Standard error captured from the step.
        return_code: Process exit code (site and shell steps).
        required: Whether the step was required.
        duration: Execution duration in seconds.
        error: Error message if the step failed.

    Examples:
        >>> result = StepResult(name="config-import", status=StepStatus.SUCCESS)
        >>> result.success
        True
    """

    name: str
    status: StepStatus
    output: str = ""
    error_output: str = ""
    return_code: int | None = None
    required: bool = True
    duration: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        """Whether the step succeeded."""
        return self.status == StepStatus.SUCCESS


@dataclass(slots=True)
class PipelineResult:
    """Aggregate result of a pipeline run.

    Attributes:
        name: Pipeline name.
        state: Final pipeline state.
        results: Ordered list of step results.
        duration: Total run duration in seconds.
        aborted_at: Name of the required step that aborted the run.

    Examples:
        >>> result = PipelineResult(name="sync")
        >>> result.state
        <PipelineState.IDLE: 'idle'>
    """

    name: str
    state: PipelineState = PipelineState.IDLE
    results: list[StepResult] = field(default_factory=list)
    duration: float = 0.0
    aborted_at: str | None = None

    @property
    def confirmed(self) -> bool:
        """Whether the pipeline got past confirmation."""
        return self.state in (PipelineState.RUNNING, PipelineState.COMPLETED, PipelineState.ABORTED)

    @property
    def success(self) -> bool:
        """Whether the run completed (optional failures allowed)."""
        return self.state == PipelineState.COMPLETED

    @property
    def failed_steps(self) -> list[StepResult]:
        """Steps that failed."""
        return [r for r in self.results if r.status == StepStatus.FAILED]

    @property
    def warnings(self) -> list[StepResult]:
        """Optional steps that failed and were warned through."""
        return [r for r in self.failed_steps if not r.required]

    @property
    def skipped_steps(self) -> list[StepResult]:
        """Steps that were skipped."""
        return [r for r in self.results if r.status == StepStatus.SKIPPED]

    @property
    def executed_steps(self) -> list[str]:
        """Names of the steps that actually ran, in order."""
        return [r.name for r in self.results if r.status != StepStatus.SKIPPED]

    def get(self, name: str) -> StepResult | None:
        """Return the result of the named step, if recorded."""
        for result in self.results:
            if result.name == name:
                return result
        return None

    def raise_for_state(self) -> PipelineResult:
        """Raise if the run was aborted.

        Raises:
            PipelineAbortedError: If a required step failed.
        """
        if self.state == PipelineState.ABORTED:
            failed = self.get(self.aborted_at or "")
            reason = (failed.error if failed else None) or "step failed"
            raise PipelineAbortedError(self.aborted_at or "?", reason)
        return self


__all__ = [
    "PipelineResult",
    "PipelineState",
    "ProcessOutcome",
    "Step",
    "StepKind",
    "StepResult",
    "StepStatus",
]
