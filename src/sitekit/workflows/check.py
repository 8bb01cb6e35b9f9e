"""URL and site log health check.

Every URL is probed and compared with its desired status; the mismatch
count is evaluated against the URL threshold, with any 5xx response
forcing failure when ``fail_500`` is set. When log thresholds are given,
the site logs are cleared before probing and the warning and error
entries produced meanwhile are evaluated as two independent checks.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sitekit.health.exceptions import ThresholdExceededError
from sitekit.health.logs import LogProbe
from sitekit.health.models import LogEntry, ThresholdCheck, UrlObservation
from sitekit.health.thresholds import ThresholdEvaluator, server_error, url_mismatch
from sitekit.health.urls import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT,
    UrlProbe,
    build_client,
    load_url_file,
    parse_url_list,
)
from sitekit.reporting import MessageKind
from sitekit.workflows.runtime import config_section

if TYPE_CHECKING:
    import httpx

    from sitekit.targets.models import ExecutionContext
    from sitekit.workflows.runtime import Runtime

logger = logging.getLogger(__name__)

MISMATCH_HEADERS = ("URL", "HTTP code", "Desired HTTP code")
LOG_HEADERS = ("Type", "Severity", "Message")

#: ``(check name, severity label)`` of the two log checks.
LOG_SEVERITIES = (("log-warnings", "Warning"), ("log-errors", "Error"))


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Inputs of one health check.

    Attributes:
        urls: Comma-separated ``path|code`` entries.
        file: YAML file with a ``url -> code`` mapping.
        file_key: Dotted key path to the mapping inside ``file``.
        uri: Base URI overriding the one derived from the context.
        url_threshold: Mismatches allowed while still passing.
        log_error_threshold: Error log entries allowed (None disables the check).
        log_warning_threshold: Warning log entries allowed (None disables the check).
        fail_500: Fail on any 5xx response regardless of the threshold.
    """

    urls: str | None = None
    file: str | None = None
    file_key: str = "urls"
    uri: str | None = None
    url_threshold: int = 0
    log_error_threshold: int | None = None
    log_warning_threshold: int | None = None
    fail_500: bool = False

    @property
    def checks_logs(self) -> bool:
        """Whether any log threshold is set."""
        return self.log_error_threshold is not None or self.log_warning_threshold is not None


@dataclass(slots=True)
class HealthReport:
    """Outcome of a health check.

    Attributes:
        observations: Every URL observation, in probe order.
        checks: Threshold checks, URL check first.
    """

    observations: list[UrlObservation] = field(default_factory=list)
    checks: list[ThresholdCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Whether every check passed."""
        return all(check.passed for check in self.checks)

    @property
    def failed_checks(self) -> list[ThresholdCheck]:
        """Checks that did not pass."""
        return [check for check in self.checks if not check.passed]

    @property
    def mismatches(self) -> list[UrlObservation]:
        """URL observations whose code differs from the desired one."""
        return [obs for obs in self.observations if obs.mismatch]

    def raise_for_failure(self) -> HealthReport:
        """Raise if any check failed.

        Raises:
            ThresholdExceededError: With the failing checks.
        """
        failed = self.failed_checks
        if failed:
            raise ThresholdExceededError(failed)
        return self


class UrlCheckWorkflow:
    """Probe URLs and site logs of one context and evaluate thresholds.

    Args:
        runtime: Shared collaborators.
        client: HTTP client override (a non-redirecting client is built otherwise).
        evaluator: Threshold evaluator.
    """

    def __init__(
        self,
        runtime: Runtime,
        *,
        client: httpx.Client | None = None,
        evaluator: ThresholdEvaluator | None = None,
    ) -> None:
        self._runtime = runtime
        self._client = client
        self._evaluator = evaluator or ThresholdEvaluator()
        self._log_probe = LogProbe(runtime.process_runner)

    def collect_urls(self, options: CheckOptions) -> dict[str, int]:
        """Merge URLs from the option list and the URL file (file entries last)."""
        urls = parse_url_list(options.urls)
        if options.file:
            urls.update(load_url_file(options.file, options.file_key))
        return urls

    def run(self, options: CheckOptions, context: ExecutionContext) -> HealthReport:
        """Run the health check against ``context``.

        Returns:
            HealthReport; call :meth:`HealthReport.raise_for_failure` to
            turn a failed check into an exception.

        Raises:
            UrlListError: If the URL list or file is malformed.
            HealthCheckError: If the site logs cannot be read.
        """
        rt = self._runtime
        urls = self.collect_urls(options)
        base_uri = rt.builder.resolve_base_uri(context, explicit=options.uri)
        logger.debug("Checking %d URL(s) against %s", len(urls), base_uri)

        if options.checks_logs:
            self._log_probe.clear(context)

        report = HealthReport(observations=self._probe(urls, base_uri))
        report.checks.append(self._url_check(report.observations, options))

        if options.checks_logs:
            limits = {"log-warnings": options.log_warning_threshold, "log-errors": options.log_error_threshold}
            for name, severity in LOG_SEVERITIES:
                limit = limits[name]
                if limit is not None:
                    report.checks.append(self._log_check(context, name, severity, limit))

        rt.reporter.newline()
        return report

    def _probe(self, urls: dict[str, int], base_uri: str | None) -> list[UrlObservation]:
        check_config = config_section(self._runtime.config, "check")
        max_redirects = int(check_config.get("max_redirects", DEFAULT_MAX_REDIRECTS))
        if self._client is not None:
            return UrlProbe(self._client, max_redirects=max_redirects).observe_all(urls, base_uri=base_uri)

        timeout = float(check_config.get("timeout") or DEFAULT_TIMEOUT)
        with build_client(timeout=timeout) as client:
            return UrlProbe(client, max_redirects=max_redirects).observe_all(urls, base_uri=base_uri)

    def _url_check(self, observations: Sequence[UrlObservation], options: CheckOptions) -> ThresholdCheck:
        reporter = self._runtime.reporter
        check = self._evaluator.evaluate(
            "urls",
            observations,
            options.url_threshold,
            url_mismatch,
            server_error if options.fail_500 else None,
        )

        if check.observed_count:
            reporter.write(f"{check.observed_count} HTTP code mismatches found.", MessageKind.WARNING)
            reporter.table(
                MISMATCH_HEADERS,
                [(obs.url, obs.actual_code, obs.desired_code) for obs in check.mismatches],
            )

        if check.hard_fail_triggered:
            reporter.write("Server error (5xx) responses found.", MessageKind.ERROR)
        if check.observed_count > check.limit:
            reporter.write("HTTP code mismatches exceeded threshold.", MessageKind.ERROR)
        if check.passed:
            reporter.write(
                f"Passed HTTP code check with {check.observed_count} mismatches.",
                MessageKind.SUCCESS,
            )
        return check

    def _log_check(self, context: ExecutionContext, name: str, severity: str, limit: int) -> ThresholdCheck:
        reporter = self._runtime.reporter
        entries = self._log_probe.entries(context, severity)
        check = self._evaluator.evaluate(name, entries, limit, lambda entry: entry.has_severity(severity))
        label = severity.lower()

        if check.observed_count:
            reporter.write(f"{check.observed_count} {label} log entries found.", MessageKind.WARNING)
            reporter.table(LOG_HEADERS, [_log_row(entry) for entry in check.mismatches])
        if check.passed:
            reporter.write(
                f"Passed {label} log check with {check.observed_count} entries.",
                MessageKind.SUCCESS,
            )
        else:
            reporter.write(f"{severity} log entries exceeded threshold.", MessageKind.ERROR)
        return check


def _log_row(entry: LogEntry) -> tuple[str, str, str]:
    return (entry.type, entry.severity, entry.message)


__all__ = [
    "LOG_HEADERS",
    "LOG_SEVERITIES",
    "MISMATCH_HEADERS",
    "CheckOptions",
    "HealthReport",
    "UrlCheckWorkflow",
]
