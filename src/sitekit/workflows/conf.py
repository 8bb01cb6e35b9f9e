"""Import or export configuration as a given environment.

The site's local alias runs the operations; the chosen environment only
contributes its ``SITE_ENVIRONMENT`` value and URI through the context
overlay. Block, taxonomy and default content steps are kept only when
their module is enabled on the target.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sitekit.pipeline.models import PipelineResult, Step
from sitekit.pipeline.runner import Pipeline

if TYPE_CHECKING:
    from sitekit.targets.models import ExecutionContext, Target
    from sitekit.workflows.runtime import Runtime

logger = logging.getLogger(__name__)

#: ``key -> label`` of the supported operations.
OPERATIONS = {"export": "Export", "import": "Import"}

STRUCTURE_SYNC = "structure_sync"
DEFAULT_CONTENT_DEPLOY = "default_content_deploy"


def build_conf_steps(operation: str) -> list[Step]:
    """Return the step list of a configuration import or export.

    Examples:
        >>> [step.name for step in build_conf_steps("export")]
        ['cache-clear', 'config-export', 'export-blocks', 'export-taxonomies']
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown configuration operation: {operation!r}")

    steps = [Step(name="cache-clear", operation="cache:rebuild", title="Clearing cache")]
    if operation == "import":
        steps += [
            Step(
                name="config-import",
                operation="config:import",
                options={"yes": True},
                title="Importing configuration",
                failure_message="Failure importing configuration.",
            ),
            Step(
                name="import-blocks",
                operation="import-blocks",
                options={"choice": "full"},
                required=False,
                title="Syncing Blocks",
                capability=STRUCTURE_SYNC,
            ),
            Step(
                name="import-taxonomies",
                operation="import-taxonomies",
                options={"choice": "full"},
                required=False,
                title="Syncing Taxonomies",
                capability=STRUCTURE_SYNC,
            ),
            Step(
                name="default-content",
                operation="default-content-deploy:import",
                options={"yes": True},
                required=False,
                title="Deploying Content",
                capability=DEFAULT_CONTENT_DEPLOY,
            ),
        ]
    else:
        steps += [
            Step(
                name="config-export",
                operation="config:export",
                options={"yes": True},
                title="Exporting configuration",
                failure_message="Failure exporting configuration.",
            ),
            Step(
                name="export-blocks",
                operation="export-blocks",
                options={"choice": "full"},
                required=False,
                title="Syncing Blocks",
                capability=STRUCTURE_SYNC,
            ),
            Step(
                name="export-taxonomies",
                operation="export-taxonomies",
                options={"choice": "full"},
                required=False,
                title="Syncing Taxonomies",
                capability=STRUCTURE_SYNC,
            ),
        ]
    return steps


class ConfWorkflow:
    """Resolve a target and run the configuration pipeline for it.

    Args:
        runtime: Shared collaborators.
    """

    def __init__(self, runtime: Runtime) -> None:
        self._runtime = runtime

    def run(
        self,
        operation: str | None = None,
        site: str | None = None,
        environment: str | None = None,
        *,
        assume_yes: bool = False,
    ) -> PipelineResult:
        """Resolve operation, site and environment, then run the pipeline.

        Raises:
            TargetValidationError: If nothing valid was chosen.
        """
        rt = self._runtime
        operation = rt.resolver.resolve_operation(operation, OPERATIONS)
        target = rt.resolver.resolve(
            site,
            environment,
            purpose=f"{operation} as",
            default_environment=rt.default_environment,
        )
        return self.execute(operation, target, assume_yes=assume_yes)

    def context_for(self, target: Target) -> ExecutionContext:
        """Return the local context of the target's site running as ``target``."""
        rt = self._runtime
        base = rt.builder.local_context(rt.registry, target.site)
        return rt.builder.build_overlay(base, rt.registry.get(target.alias_id))

    def execute(self, operation: str, target: Target, *, assume_yes: bool = False) -> PipelineResult:
        """Run the pipeline for an already-resolved target."""
        rt = self._runtime
        context = self.context_for(target)
        logger.debug("Configuration %s as %s using %s", operation, target, context.name)

        pipeline = Pipeline.build(
            f"conf-{operation}",
            build_conf_steps(operation),
            context,
            rt.step_runner,
            probe=rt.probe,
            reporter=rt.reporter,
            prompter=rt.prompter,
            streaming=rt.streaming,
        )
        label = OPERATIONS[operation]
        result = pipeline.run(
            f"{label} site {target.site} as {target.environment} environment?",
            assume_yes=assume_yes,
            announce=f"Running {operation} on site:{target.site} as environment:{target.environment}.",
        )
        rt.reporter.newline()
        return result


__all__ = [
    "DEFAULT_CONTENT_DEPLOY",
    "OPERATIONS",
    "STRUCTURE_SYNC",
    "ConfWorkflow",
    "build_conf_steps",
]
