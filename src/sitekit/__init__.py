"""sitekit: environment-aware orchestration for multi-environment site deployments.

The package resolves a (site, environment) target, derives an execution
context for it and runs ordered pipelines of site-tool operations
(configuration import/export, database sync, dependency installation,
cache clears) and URL/log health checks against it.

Examples:
    >>> from sitekit import TargetRegistry
    >>> registry = TargetRegistry.from_mapping({"www": {"local": {}, "prod": {"uri": "https://example.com"}}})
    >>> sorted(registry.list_sites())
    ['www']
"""

from sitekit.config.exceptions import SitekitError
from sitekit.meta import __version__
from sitekit.pipeline import Pipeline, PipelineResult, Step, StepResult, StepRunner
from sitekit.targets import (
    AliasResolver,
    CapabilityProbe,
    ExecutionContext,
    ExecutionContextBuilder,
    Target,
    TargetRegistry,
)

__all__ = [
    "AliasResolver",
    "CapabilityProbe",
    "ExecutionContext",
    "ExecutionContextBuilder",
    "Pipeline",
    "PipelineResult",
    "SitekitError",
    "Step",
    "StepResult",
    "StepRunner",
    "Target",
    "TargetRegistry",
    "__version__",
]
