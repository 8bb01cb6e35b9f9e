"""Sync the local site from another environment."""

from __future__ import annotations

from typing import Annotated

import typer

from sitekit.cli.common import exit_error
from sitekit.config import SitekitError
from sitekit.workflows.sync import SyncOptions, SyncWorkflow

from .common import VERBOSE_OPTION, YES_OPTION, build_runtime, finish_pipeline


def sync(
    ctx: typer.Context,
    site: Annotated[str | None, typer.Argument(help="Site to sync.")] = None,
    environment_from: Annotated[str | None, typer.Argument(help="Environment to sync from.")] = None,
    environment_as: Annotated[str | None, typer.Argument(help="Environment to import configuration as.")] = None,
    dump_dir: Annotated[
        str | None,
        typer.Option("--dump-dir", help="Database dump directory, relative to the local docroot."),
    ] = None,
    skip_composer: Annotated[bool, typer.Option("--skip-composer", help="Skip Composer install.")] = False,
    skip_config: Annotated[bool, typer.Option("--skip-config", help="Skip configuration import.")] = False,
    skip_db_dump: Annotated[
        bool,
        typer.Option("--skip-db-dump", help="Skip the database dump and import an existing dump file."),
    ] = False,
    skip_db_import: Annotated[bool, typer.Option("--skip-db-import", help="Skip the database import.")] = False,
    yes: bool = YES_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Sync the local site from another environment.

    Example: sitekit sync www remote_prod local
    """
    runtime = build_runtime(ctx, verbose=verbose)
    options = SyncOptions(
        dump_dir=dump_dir,
        skip_composer=skip_composer,
        skip_config=skip_config,
        skip_db_dump=skip_db_dump,
        skip_db_import=skip_db_import,
    )
    try:
        result = SyncWorkflow(runtime).run(site, environment_from, environment_as, options, assume_yes=yes)
    except SitekitError as exc:
        exit_error(str(exc))

    finish_pipeline(result, "Sync completed.")


__all__ = ["sync"]
