"""Tests for the sitekit.workflows.check module."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from sitekit.health.exceptions import ThresholdExceededError, UrlListError
from sitekit.health.logs import DELETE_OPERATION, SHOW_OPERATION
from sitekit.pipeline.models import ProcessOutcome
from sitekit.reporting import MessageKind, RecordingReporter
from sitekit.targets.models import ExecutionContext
from sitekit.workflows.check import MISMATCH_HEADERS, CheckOptions, HealthReport, UrlCheckWorkflow

STATUSES = {"/a": 200, "/b": 500, "/c": 404, "/old": 301}


@pytest.fixture
def requested() -> list[str]:
    """URLs requested through the mock transport."""
    return []


@pytest.fixture
def client(requested: list[str]) -> Iterator[httpx.Client]:
    """HTTP client answering from STATUSES."""

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(STATUSES.get(request.url.path, 404))

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        yield http_client


@pytest.fixture
def context(make_runtime: Callable[..., Any]) -> ExecutionContext:
    """Local context of the www site."""
    runtime = make_runtime()
    return runtime.builder.local_context(runtime.registry, "www")


class TestUrlCheck:
    """Tests for the URL part of the health check."""

    def test_hard_fail_on_server_error(
        self,
        make_runtime: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        reporter: RecordingReporter,
        requested: list[str],
    ) -> None:
        """A 5xx fails the check with fail_500 even below the threshold."""
        options = CheckOptions(urls="/a|200,/b|404", url_threshold=5, fail_500=True)

        report = UrlCheckWorkflow(make_runtime(), client=client).run(options, context)

        assert requested == ["http://www.docksal/a", "http://www.docksal/b"]
        assert reporter.tables == [(list(MISMATCH_HEADERS), [["/b", 500, 404]])]
        assert reporter.messages_of(MessageKind.WARNING) == ["1 HTTP code mismatches found."]
        assert reporter.messages_of(MessageKind.ERROR) == ["Server error (5xx) responses found."]
        assert report.passed is False
        with pytest.raises(ThresholdExceededError, match="Health check failed: urls"):
            report.raise_for_failure()

    def test_within_threshold(
        self,
        make_runtime: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        reporter: RecordingReporter,
    ) -> None:
        """Mismatches up to the threshold still pass."""
        options = CheckOptions(urls="/a,/b|404,/c|200", url_threshold=2)

        report = UrlCheckWorkflow(make_runtime(), client=client).run(options, context)

        assert report.passed is True
        assert [o.url for o in report.mismatches] == ["/b", "/c"]
        assert reporter.messages_of(MessageKind.SUCCESS) == ["Passed HTTP code check with 2 mismatches."]
        assert report.raise_for_failure() is report

    def test_over_threshold(
        self,
        make_runtime: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        reporter: RecordingReporter,
    ) -> None:
        """One mismatch over a zero threshold fails."""
        report = UrlCheckWorkflow(make_runtime(), client=client).run(CheckOptions(urls="/c"), context)

        assert [c.name for c in report.failed_checks] == ["urls"]
        assert reporter.messages_of(MessageKind.ERROR) == ["HTTP code mismatches exceeded threshold."]

    def test_explicit_uri(
        self,
        make_runtime: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        requested: list[str],
    ) -> None:
        """An explicit base URI overrides the context's."""
        options = CheckOptions(urls="/a", uri="https://www.example.com")
        UrlCheckWorkflow(make_runtime(), client=client).run(options, context)
        assert requested == ["https://www.example.com/a"]

    def test_url_file_merged(
        self,
        make_runtime: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        tmp_path: Path,
    ) -> None:
        """File entries are added after the option list."""
        path = tmp_path / "urls.yml"
        path.write_text("smoke:\n  urls:\n    /old: 301\n    /a: 200\n", encoding="utf-8")
        options = CheckOptions(urls="/c|404", file=str(path), file_key="smoke.urls")

        report = UrlCheckWorkflow(make_runtime(), client=client).run(options, context)

        assert [(o.url, o.actual_code) for o in report.observations] == [("/c", 404), ("/old", 301), ("/a", 200)]
        assert report.passed

    def test_no_base_uri(self, make_runtime: Callable[..., Any], client: httpx.Client) -> None:
        """Host-less URLs need a base URI."""
        with pytest.raises(UrlListError):
            UrlCheckWorkflow(make_runtime(), client=client).run(CheckOptions(urls="/a"), ExecutionContext(name="@self"))


class TestLogCheck:
    """Tests for the log part of the health check."""

    def test_logs_cleared_then_counted(
        self,
        make_runtime: Callable[..., Any],
        make_fake_runner: Callable[..., Any],
        client: httpx.Client,
        context: ExecutionContext,
        reporter: RecordingReporter,
    ) -> None:
        """Logs are cleared first and each severity is its own check."""
        entries = [
            {"wid": 1, "type": "php", "severity": "Error", "message": "Undefined index"},
            {"wid": 2, "type": "php", "severity": "Warning", "message": "Deprecated"},
        ]
        runner = make_fake_runner({SHOW_OPERATION: ProcessOutcome(0, json.dumps(entries))})
        options = CheckOptions(urls="/a", log_error_threshold=0, log_warning_threshold=5)

        report = UrlCheckWorkflow(make_runtime(runner=runner), client=client).run(options, context)

        assert [c.target for c in runner.calls] == [DELETE_OPERATION, SHOW_OPERATION, SHOW_OPERATION]
        assert [c.options["severity"] for c in runner.calls[1:]] == ["Warning", "Error"]
        assert [c.name for c in report.checks] == ["urls", "log-warnings", "log-errors"]
        assert [c.name for c in report.failed_checks] == ["log-errors"]
        assert report.checks[1].observed_count == 1
        assert "Error log entries exceeded threshold." in reporter.messages_of(MessageKind.ERROR)
        assert ["php", "Error", "Undefined index"] in reporter.tables[-1][1]

    def test_only_configured_severities(
        self,
        make_runtime: Callable[..., Any],
        fake_runner: Any,
        client: httpx.Client,
        context: ExecutionContext,
    ) -> None:
        """A single threshold checks a single severity."""
        options = CheckOptions(urls="/a", log_error_threshold=3)

        report = UrlCheckWorkflow(make_runtime(), client=client).run(options, context)

        assert [c.name for c in report.checks] == ["urls", "log-errors"]
        assert fake_runner.calls[-1].options["severity"] == "Error"

    def test_no_log_thresholds(
        self,
        make_runtime: Callable[..., Any],
        fake_runner: Any,
        client: httpx.Client,
        context: ExecutionContext,
    ) -> None:
        """Without log thresholds the logs are left alone."""
        UrlCheckWorkflow(make_runtime(), client=client).run(CheckOptions(urls="/a"), context)
        assert fake_runner.calls == []


class TestHealthReport:
    """Tests for HealthReport."""

    def test_empty_report_passes(self) -> None:
        """No checks, nothing failed."""
        assert HealthReport().passed is True
