"""Site log probe.

Log entries are read through the site tool (``watchdog:show``) so the
probe works for remote targets as well as local ones.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from sitekit.health.exceptions import HealthCheckError
from sitekit.health.models import LogEntry

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)

SHOW_OPERATION = "watchdog:show"
DELETE_OPERATION = "watchdog:delete"

#: Number of entries requested per severity.
ENTRY_COUNT = 1000


class LogProbe:
    """Clear and count site log entries.

    Args:
        runner: Process runner used for the site-tool calls.
    """

    def __init__(self, runner: ProcessRunner) -> None:
        self._runner = runner

    def clear(self, context: ExecutionContext) -> None:
        """Delete all log entries of ``context``.

        Raises:
            HealthCheckError: If the logs could not be cleared.
        """
        outcome = self._runner.invoke(context, DELETE_OPERATION, ("all",), {"yes": True})
        if not outcome.success:
            raise HealthCheckError(f"Could not clear site logs: {outcome.stderr.strip() or outcome.return_code}")
        logger.debug("Cleared site logs on %s", context.name)

    def entries(self, context: ExecutionContext, severity: str) -> list[LogEntry]:
        """Return the log entries of one severity.

        Raises:
            HealthCheckError: If the listing fails or is not JSON.
        """
        outcome = self._runner.invoke(
            context,
            SHOW_OPERATION,
            (),
            {"severity": severity, "count": ENTRY_COUNT, "format": "json"},
        )
        if not outcome.success:
            raise HealthCheckError(f"Could not read {severity} log entries: {outcome.stderr.strip()}")
        if not outcome.stdout.strip():
            return []
        try:
            data = json.loads(outcome.stdout)
        except ValueError as exc:
            raise HealthCheckError(f"Unparsable {severity} log listing: {exc}") from exc

        if isinstance(data, dict):
            records = list(data.values())
        elif isinstance(data, list):
            records = data
        else:
            raise HealthCheckError(f"Unexpected {severity} log listing shape")
        entries = [LogEntry.from_mapping(record) for record in records if isinstance(record, dict)]
        logger.debug("%d %s log entries on %s", len(entries), severity, context.name)
        return entries


__all__ = [
    "DELETE_OPERATION",
    "ENTRY_COUNT",
    "SHOW_OPERATION",
    "LogProbe",
]
