"""Sitekit command-line application."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from sitekit import meta
from sitekit.cli.commands import check_url, conf, sync
from sitekit.cli.common import console

app = typer.Typer(
    name="sitekit",
    help="Sync, import and health-check multi-environment site deployments.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{meta.__app_name__} {meta.__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a sitekit.conf.yml file."),
    ] = None,
) -> None:
    """Sitekit: environment-aware site operations."""
    ctx.obj = {"config_path": config}


app.command("conf")(conf)
app.command("sync")(sync)
app.command("check-url")(check_url)


@app.command("version")
def version() -> None:
    """Show the sitekit version."""
    console.print(f"{meta.__app_name__} {meta.__version__}")


def main() -> None:
    """Run the sitekit CLI."""
    app()


if __name__ == "__main__":
    main()
