"""Ordered, confirm-then-run step pipelines.

Steps are data (:class:`Step` records) executed by one generic
:class:`Pipeline`. Each step is dispatched by :class:`StepRunner` to an
executor for its kind (site-tool operation, shell command or Python
callable); every out-of-process invocation goes through an injected
:class:`ProcessRunner`.

Examples:
    >>> from sitekit.pipeline import Step, StepKind
    >>> Step(name="composer", kind=StepKind.SHELL, command="composer install", required=False).required
    False
"""

from sitekit.pipeline.base import AbstractStep, ProcessRunner
from sitekit.pipeline.exceptions import (
    PipelineAbortedError,
    PipelineConfigError,
    PipelineError,
    ResourceAccessError,
)
from sitekit.pipeline.models import (
    PipelineResult,
    PipelineState,
    ProcessOutcome,
    Step,
    StepKind,
    StepResult,
    StepStatus,
)
from sitekit.pipeline.process import SubprocessRunner, build_option_flags
from sitekit.pipeline.runner import Pipeline
from sitekit.pipeline.steps import CallableStep, ShellStep, SiteStep, StepRunner

__all__ = [
    "AbstractStep",
    "CallableStep",
    "Pipeline",
    "PipelineAbortedError",
    "PipelineConfigError",
    "PipelineError",
    "PipelineResult",
    "PipelineState",
    "ProcessOutcome",
    "ProcessRunner",
    "ResourceAccessError",
    "ShellStep",
    "SiteStep",
    "Step",
    "StepKind",
    "StepResult",
    "StepRunner",
    "StepStatus",
    "SubprocessRunner",
    "build_option_flags",
]
