"""Import or export configuration as an environment."""

from __future__ import annotations

from typing import Annotated

import typer

from sitekit.cli.common import exit_error
from sitekit.config import SitekitError
from sitekit.workflows.conf import OPERATIONS, ConfWorkflow

from .common import VERBOSE_OPTION, YES_OPTION, build_runtime, finish_pipeline


def conf(
    ctx: typer.Context,
    operation: Annotated[str | None, typer.Argument(help="Operation to perform: import or export.")] = None,
    site: Annotated[str | None, typer.Argument(help="Site to perform the operation on.")] = None,
    environment: Annotated[str | None, typer.Argument(help="Environment to perform the operation as.")] = None,
    yes: bool = YES_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Import or export configuration as an environment.

    Missing or invalid arguments are asked for interactively.
    Example: sitekit conf import www local
    """
    runtime = build_runtime(ctx, verbose=verbose)
    try:
        result = ConfWorkflow(runtime).run(operation, site, environment, assume_yes=yes)
    except SitekitError as exc:
        exit_error(str(exc))

    operation_label = OPERATIONS.get(result.name.removeprefix("conf-"), "Configuration")
    finish_pipeline(result, f"{operation_label} completed.")


__all__ = ["conf"]
