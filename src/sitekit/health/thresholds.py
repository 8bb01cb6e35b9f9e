"""Aggregate observations against configured limits."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from sitekit.health.models import ThresholdCheck, UrlObservation

logger = logging.getLogger(__name__)

T = TypeVar("T")

Predicate = Callable[[T], bool]


def url_mismatch(observation: UrlObservation) -> bool:
    """Mismatch predicate for URL checks: returned code differs from desired."""
    return observation.mismatch


def server_error(observation: UrlObservation) -> bool:
    """Hard-fail predicate for URL checks: any 5xx response."""
    return observation.is_server_error


class ThresholdEvaluator:
    """Count mismatching observations and apply the hard-fail override.

    The same evaluator serves URL checks and log severity checks; only the
    predicates differ.

    Examples:
        >>> evaluator = ThresholdEvaluator()
        >>> obs = [UrlObservation("/a", 200, 200), UrlObservation("/b", 404, 500)]
        >>> check = evaluator.evaluate("urls", obs, 0, url_mismatch, server_error)
        >>> check.observed_count, check.hard_fail_triggered, check.passed
        (1, True, False)
    """

    def evaluate(
        self,
        name: str,
        observations: Sequence[T],
        limit: int,
        mismatch: Predicate[T],
        hard_fail: Predicate[T] | None = None,
    ) -> ThresholdCheck:
        """Evaluate ``observations`` against ``limit``.

        Args:
            name: Name of the check.
            observations: Everything that was observed.
            limit: Highest mismatch count that still passes.
            mismatch: Predicate selecting the counted observations.
            hard_fail: Predicate forcing failure when any observation matches.

        Returns:
            ThresholdCheck with the count, limit and hard-fail flag.
        """
        mismatches = tuple(obs for obs in observations if mismatch(obs))
        triggered = hard_fail is not None and any(hard_fail(obs) for obs in observations)
        check = ThresholdCheck(
            name=name,
            observed_count=len(mismatches),
            limit=limit,
            hard_fail_triggered=triggered,
            mismatches=mismatches,
        )
        logger.debug(
            "Threshold '%s': %d/%d (hard_fail=%s) -> %s",
            name,
            check.observed_count,
            limit,
            triggered,
            "pass" if check.passed else "fail",
        )
        return check


__all__ = [
    "Predicate",
    "ThresholdEvaluator",
    "server_error",
    "url_mismatch",
]
