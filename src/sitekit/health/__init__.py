"""URL and site log health checks evaluated against thresholds."""

from sitekit.health.exceptions import HealthCheckError, ThresholdExceededError, UrlFileError, UrlListError
from sitekit.health.logs import LogProbe
from sitekit.health.models import LogEntry, ThresholdCheck, UrlObservation
from sitekit.health.thresholds import ThresholdEvaluator, server_error, url_mismatch
from sitekit.health.urls import (
    REDIRECT_CODES,
    UrlProbe,
    build_client,
    load_url_file,
    parse_url_list,
    resolve_url,
)

__all__ = [
    "REDIRECT_CODES",
    "HealthCheckError",
    "LogEntry",
    "LogProbe",
    "ThresholdCheck",
    "ThresholdEvaluator",
    "ThresholdExceededError",
    "UrlFileError",
    "UrlListError",
    "UrlObservation",
    "UrlProbe",
    "build_client",
    "load_url_file",
    "parse_url_list",
    "resolve_url",
    "server_error",
    "url_mismatch",
]
