"""Collaborators shared by the workflows.

A :class:`Runtime` bundles the registry, resolver, context builder, step
runner, capability probe and output sinks for one command invocation.
Workflows receive it instead of reaching for globals.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sitekit.config.exceptions import ConfigFormatError
from sitekit.pipeline.process import DEFAULT_SITE_TOOL
from sitekit.pipeline.steps import StepRunner
from sitekit.targets.context import ExecutionContextBuilder, UriOverlay
from sitekit.targets.probe import CapabilityProbe
from sitekit.targets.registry import TargetRegistry
from sitekit.targets.resolver import DEFAULT_ENVIRONMENT, DEFAULT_SITE, AliasResolver

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.prompts import Prompter
    from sitekit.reporting import Reporter


def config_section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a config section, or an empty mapping when absent."""
    section = config.get(name) or {}
    return section if isinstance(section, Mapping) else {}


@dataclass(slots=True)
class Runtime:
    """Everything a workflow needs for one invocation.

    Attributes:
        config: Loaded configuration.
        registry: Registered aliases.
        resolver: Target resolver.
        builder: Execution context builder.
        step_runner: Step executor.
        probe: Capability probe.
        reporter: Output sink.
        prompter: Interactive prompts (None when not interactive).
        streaming: Forward step output in real time.
    """

    config: Mapping[str, Any]
    registry: TargetRegistry
    resolver: AliasResolver
    builder: ExecutionContextBuilder
    step_runner: StepRunner
    probe: CapabilityProbe
    reporter: Reporter
    prompter: Prompter | None = None
    streaming: bool = False

    @classmethod
    def create(
        cls,
        config: Mapping[str, Any],
        *,
        process_runner: ProcessRunner,
        reporter: Reporter,
        prompter: Prompter,
        registry: TargetRegistry | None = None,
        streaming: bool = False,
    ) -> Runtime:
        """Wire the collaborators from configuration.

        Args:
            config: Loaded configuration (``Box`` or plain mapping).
            process_runner: Runner for every out-of-process call.
            reporter: Output sink.
            prompter: Interactive prompts.
            registry: Registry override (built from ``targets`` otherwise).
            streaming: Forward step output in real time.

        Raises:
            ConfigFormatError: If ``context.uri_overlay`` is not a known mode.
        """
        if registry is None:
            registry = TargetRegistry.from_config(config)
        defaults = config_section(config, "defaults")
        targets = config_section(config, "targets")
        context = config_section(config, "context")

        resolver = AliasResolver(
            registry,
            prompter,
            reporter,
            default_site=str(defaults.get("site") or DEFAULT_SITE),
            strict_labels=bool(targets.get("strict_labels", False)),
        )
        overlay = context.get("uri_overlay") or UriOverlay.OPTIONS
        try:
            builder = ExecutionContextBuilder(uri_overlay=UriOverlay(overlay))
        except ValueError as exc:
            choices = ", ".join(mode.value for mode in UriOverlay)
            raise ConfigFormatError(f"Invalid context.uri_overlay {overlay!r}, expected one of: {choices}") from exc
        return cls(
            config=config,
            registry=registry,
            resolver=resolver,
            builder=builder,
            step_runner=StepRunner(process_runner),
            probe=CapabilityProbe(process_runner),
            reporter=reporter,
            prompter=prompter,
            streaming=streaming,
        )

    @property
    def process_runner(self) -> ProcessRunner:
        """Return the process runner behind the step runner."""
        return self.step_runner.process_runner

    @property
    def binary(self) -> str:
        """Return the site tool binary used in shell pipelines."""
        return str(config_section(self.config, "site_tool").get("binary") or DEFAULT_SITE_TOOL)

    @property
    def default_site(self) -> str:
        """Return the configured default site."""
        return str(config_section(self.config, "defaults").get("site") or DEFAULT_SITE)

    @property
    def default_environment(self) -> str:
        """Return the configured default environment label."""
        return str(config_section(self.config, "defaults").get("environment") or DEFAULT_ENVIRONMENT)


__all__ = [
    "Runtime",
    "config_section",
]
