"""Exceptions raised by the sitekit.health module.

Exception hierarchy::

    SitekitError
        HealthCheckError (base for all health check errors)
            ThresholdExceededError (one or more checks failed)
            UrlListError (malformed URL list entry, also ValueError)
                UrlFileError (URL file missing or malformed)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sitekit.config.exceptions import SitekitError

if TYPE_CHECKING:
    from sitekit.health.models import ThresholdCheck


class HealthCheckError(SitekitError):
    """Base exception for health check errors."""


class ThresholdExceededError(HealthCheckError):
    """One or more threshold checks failed.

    Attributes:
        checks: The failing checks.
    """

    def __init__(self, checks: Sequence[ThresholdCheck]) -> None:
        self.checks = tuple(checks)
        names = ", ".join(check.name for check in self.checks) or "unknown"
        super().__init__(f"Health check failed: {names}")


class UrlListError(HealthCheckError, ValueError):
    """A URL list entry could not be parsed or resolved."""


class UrlFileError(UrlListError):
    """The URL file is missing, unreadable or has the wrong shape.

    Attributes:
        path: Path of the URL file.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


__all__ = [
    "HealthCheckError",
    "ThresholdExceededError",
    "UrlFileError",
    "UrlListError",
]
