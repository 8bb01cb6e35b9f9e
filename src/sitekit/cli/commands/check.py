"""Check HTTP status codes of URLs and the site logs."""

from __future__ import annotations

from typing import Annotated

import typer

from sitekit.cli.common import CommandResult, CommandStatus, exit_error, render_result
from sitekit.config import SitekitError
from sitekit.health.urls import DEFAULT_TIMEOUT, build_client
from sitekit.workflows.check import CheckOptions, UrlCheckWorkflow
from sitekit.workflows.runtime import config_section

from .common import VERBOSE_OPTION, build_runtime


def check_url(
    ctx: typer.Context,
    urls: Annotated[
        str | None,
        typer.Option("--urls", help="Comma-separated URLs to check, optionally suffixed with |code (/path|404)."),
    ] = None,
    file: Annotated[
        str | None,
        typer.Option("--file", "--url-file", help="YAML file mapping URLs to desired HTTP codes."),
    ] = None,
    file_key: Annotated[
        str | None,
        typer.Option("--file-key", help="Dotted key path of the URL mapping inside --file."),
    ] = None,
    uri: Annotated[str | None, typer.Option("--uri", help="Base URI for URLs without a host.")] = None,
    site: Annotated[str | None, typer.Option("--site", help="Site whose local alias provides the base URI.")] = None,
    url_threshold: Annotated[
        int,
        typer.Option("--url-threshold", min=0, help="Number of URL mismatches allowed while still passing."),
    ] = 0,
    log_error_threshold: Annotated[
        int | None,
        typer.Option("--log-error-threshold", min=0, help="Number of error log entries allowed."),
    ] = None,
    log_warning_threshold: Annotated[
        int | None,
        typer.Option("--log-warning-threshold", min=0, help="Number of warning log entries allowed."),
    ] = None,
    fail_500: Annotated[
        bool | None,
        typer.Option("--fail-500/--no-fail-500", help="Fail on any 5xx response regardless of the threshold."),
    ] = None,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Check response status codes on a list of URLs.

    Example: sitekit check-url --urls='/,/user/login|200,/old|301'
    """
    runtime = build_runtime(ctx, verbose=verbose)
    check_config = config_section(runtime.config, "check")
    options = CheckOptions(
        urls=urls,
        file=file,
        file_key=file_key or str(check_config.get("file_key") or "urls"),
        uri=uri,
        url_threshold=url_threshold,
        log_error_threshold=log_error_threshold,
        log_warning_threshold=log_warning_threshold,
        fail_500=bool(check_config.get("fail_500", False)) if fail_500 is None else fail_500,
    )
    timeout = float(check_config.get("timeout") or DEFAULT_TIMEOUT)

    try:
        if site is not None:
            site = runtime.resolver.resolve_site(site, purpose="check")
        context = runtime.builder.local_context(runtime.registry, site or runtime.default_site)
        with build_client(timeout=timeout) as client:
            report = UrlCheckWorkflow(runtime, client=client).run(options, context)
        report.raise_for_failure()
    except SitekitError as exc:
        exit_error(str(exc))

    render_result(CommandResult(status=CommandStatus.OK, message=f"Checked {len(report.observations)} URL(s)."))


__all__ = ["check_url"]
