"""Pipeline step implementations.

Provides concrete step executors for the different execution modes:

- SiteStep: Invoke a site-tool operation against the execution context
- ShellStep: Run a shell command with the context's environment overlay
- CallableStep: Call a Python function with the execution context

``StepRunner`` dispatches a step to the executor matching its kind.
"""

from sitekit.pipeline.steps.callable import CallableStep
from sitekit.pipeline.steps.runner import StepRunner
from sitekit.pipeline.steps.shell import ShellStep
from sitekit.pipeline.steps.site import SiteStep, outcome_to_result

__all__ = [
    "CallableStep",
    "ShellStep",
    "SiteStep",
    "StepRunner",
    "outcome_to_result",
]
