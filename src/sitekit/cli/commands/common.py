"""Options and wiring shared by the sitekit commands."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import typer

from sitekit.cli.common import CommandResult, CommandStatus, console, exit_error, render_result
from sitekit.config import SitekitError, load_config
from sitekit.logging import init_logging
from sitekit.pipeline.models import PipelineState
from sitekit.pipeline.process import DEFAULT_SITE_TOOL, SubprocessRunner
from sitekit.prompts import RichPrompter
from sitekit.reporting import ConsoleReporter
from sitekit.workflows.runtime import Runtime, config_section

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.pipeline.models import PipelineResult

logger = logging.getLogger(__name__)

VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Stream step output and log at debug level.",
)
YES_OPTION = typer.Option(
    False,
    "--yes",
    "-y",
    help="Answer yes to the confirmation question.",
)


def create_process_runner(config: Mapping[str, Any]) -> ProcessRunner:
    """Return the process runner configured by ``site_tool``."""
    tool = config_section(config, "site_tool")
    timeout = tool.get("timeout")
    return SubprocessRunner(
        str(tool.get("binary") or DEFAULT_SITE_TOOL),
        console=console,
        timeout=float(timeout) if timeout else None,
    )


def build_runtime(ctx: typer.Context, *, verbose: bool = False) -> Runtime:
    """Load configuration, set up logging and wire the workflow runtime.

    Exits with code 1 when the configuration cannot be loaded.
    """
    config_path = (ctx.obj or {}).get("config_path")
    try:
        config = load_config(config_path)
    except SitekitError as exc:
        exit_error(str(exc))

    preset = "debug" if verbose else str(config_section(config, "logging").get("preset") or "dev")
    log_manager = init_logging(preset=preset)
    try:
        return Runtime.create(
            config,
            process_runner=create_process_runner(config),
            reporter=ConsoleReporter(console, log_manager),
            prompter=RichPrompter(console),
            streaming=verbose,
        )
    except SitekitError as exc:
        exit_error(str(exc))


def finish_pipeline(result: PipelineResult, success_message: str) -> None:
    """Render the final outcome of a pipeline run.

    A declined confirmation is a silent success; an aborted run exits
    with code 1.
    """
    if result.state is PipelineState.IDLE:
        logger.debug("Pipeline '%s' not confirmed, nothing to do", result.name)
        return
    if result.state is PipelineState.ABORTED:
        exit_error(f"Aborted at step '{result.aborted_at}'.")

    warnings = result.warnings
    if warnings:
        names = ", ".join(step.name for step in warnings)
        render_result(
            CommandResult(
                status=CommandStatus.WARNING,
                message=f"{success_message} {len(warnings)} step(s) reported warnings: {names}.",
            )
        )
    else:
        render_result(CommandResult(status=CommandStatus.OK, message=success_message))


__all__ = [
    "VERBOSE_OPTION",
    "YES_OPTION",
    "build_runtime",
    "create_process_runner",
    "finish_pipeline",
]
