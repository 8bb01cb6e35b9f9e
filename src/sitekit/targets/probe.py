"""Detect optional components enabled on a target.

The probe asks the site tool for its enabled components once per context
name and answers membership questions from that cached set. Any failure
(non-zero exit, unparsable output) means "nothing enabled": optional
steps are dropped, never fatal.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitekit.pipeline.base import ProcessRunner
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)

#: Site-tool operation listing components.
LIST_OPERATION = "pm:list"

#: Options restricting the listing to enabled components as JSON.
LIST_OPTIONS = {"status": "enabled", "format": "json"}


def parse_component_list(output: str) -> frozenset[str]:
    """Parse the JSON component listing into a set of names.

    Accepts an object keyed by component name or a list of names.

    Raises:
        ValueError: If the output is not valid JSON of either shape.

    Examples:
        >>> sorted(parse_component_list('{"node": {}, "structure_sync": {}}'))
        ['node', 'structure_sync']
    """
    data = json.loads(output)
    if isinstance(data, dict):
        return frozenset(str(key) for key in data)
    if isinstance(data, list):
        return frozenset(str(item) for item in data)
    raise ValueError(f"Unexpected component listing: {type(data).__name__}")


class CapabilityProbe:
    """Answer whether a component is enabled in a context.

    Args:
        runner: Process runner used to list components.

    Examples:
        >>> probe = CapabilityProbe(runner)  # doctest: +SKIP
        >>> probe.is_enabled(context, "structure_sync")  # doctest: +SKIP
        True
    """

    def __init__(self, runner: ProcessRunner) -> None:
        self._runner = runner
        self._cache: dict[str, frozenset[str]] = {}

    def enabled_components(self, context: ExecutionContext) -> frozenset[str]:
        """Return the enabled components of ``context`` (cached per context name)."""
        cached = self._cache.get(context.name)
        if cached is not None:
            return cached

        outcome = self._runner.invoke(context, LIST_OPERATION, (), LIST_OPTIONS)
        components: frozenset[str] = frozenset()
        if not outcome.success:
            logger.debug(
                "Component listing failed on %s (rc=%d): %s",
                context.name,
                outcome.return_code,
                outcome.stderr.strip(),
            )
        else:
            try:
                components = parse_component_list(outcome.stdout)
            except ValueError as exc:
                logger.debug("Component listing on %s is not parsable: %s", context.name, exc)

        self._cache[context.name] = components
        return components

    def is_enabled(self, context: ExecutionContext, component: str) -> bool:
        """Return whether ``component`` is enabled in ``context``."""
        return component in self.enabled_components(context)

    def clear(self) -> None:
        """Forget cached listings."""
        self._cache.clear()


__all__ = [
    "LIST_OPERATION",
    "LIST_OPTIONS",
    "CapabilityProbe",
    "parse_component_list",
]
