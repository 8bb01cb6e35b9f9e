"""Data models for the sitekit.health module.

- UrlObservation: desired vs. returned HTTP code of one URL
- LogEntry: one site log entry returned by the log probe
- ThresholdCheck: observed count vs. limit, with the hard-fail override
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class UrlObservation:
    """Result of probing one URL.

    Attributes:
        url: URL as supplied by the operator (path or absolute URL).
        desired_code: Expected HTTP status.
        actual_code: Returned HTTP status (0 on transport error).
        resolved_url: Absolute URL that was requested.

    Examples:
        >>> obs = UrlObservation("/b", desired_code=404, actual_code=500)
        >>> obs.mismatch, obs.is_server_error
        (True, True)
    """

    url: str
    desired_code: int
    actual_code: int
    resolved_url: str | None = None

    @property
    def mismatch(self) -> bool:
        """Whether the returned code differs from the desired one."""
        return self.actual_code != self.desired_code

    @property
    def is_server_error(self) -> bool:
        """Whether the returned code is a 5xx."""
        return 500 <= self.actual_code <= 599


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One site log entry.

    Attributes:
        severity: Severity label (``Error``, ``Warning``...).
        message: Log message.
        type: Log channel.
        wid: Entry identifier, if reported.
    """

    severity: str
    message: str = ""
    type: str = ""
    wid: str | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> LogEntry:
        """Build an entry from one record of the JSON log listing."""
        wid = data.get("wid")
        return cls(
            severity=str(data.get("severity", "")),
            message=str(data.get("message", "")),
            type=str(data.get("type", "")),
            wid=str(wid) if wid is not None else None,
        )

    def has_severity(self, severity: str) -> bool:
        """Case-insensitive severity match."""
        return self.severity.strip().lower() == severity.strip().lower()


@dataclass(frozen=True, slots=True)
class ThresholdCheck:
    """Outcome of one threshold evaluation.

    Attributes:
        name: Check name (``urls``, ``log-errors``...).
        observed_count: Number of observations matching the mismatch predicate.
        limit: Highest count that still passes.
        hard_fail_triggered: Whether the hard-fail predicate matched.
        mismatches: The observations that were counted.

    Examples:
        >>> ThresholdCheck("urls", observed_count=2, limit=3).passed
        True
        >>> ThresholdCheck("urls", observed_count=0, limit=5, hard_fail_triggered=True).passed
        False
    """

    name: str
    observed_count: int
    limit: int
    hard_fail_triggered: bool = False
    mismatches: tuple[Any, ...] = ()

    @property
    def passed(self) -> bool:
        """Pass iff the count is within the limit and no hard fail occurred."""
        return self.observed_count <= self.limit and not self.hard_fail_triggered


__all__ = [
    "LogEntry",
    "ThresholdCheck",
    "UrlObservation",
]
