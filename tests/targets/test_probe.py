"""Tests for the sitekit.targets.probe module."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from sitekit.pipeline.models import ProcessOutcome
from sitekit.targets.models import ExecutionContext
from sitekit.targets.probe import LIST_OPERATION, LIST_OPTIONS, CapabilityProbe, parse_component_list


class TestParseComponentList:
    """Tests for parse_component_list."""

    def test_object_keys(self) -> None:
        """An object listing yields its keys."""
        assert parse_component_list('{"node": {"status": "Enabled"}, "structure_sync": {}}') == {
            "node",
            "structure_sync",
        }

    def test_list(self) -> None:
        """A plain list of names is accepted."""
        assert parse_component_list('["node", "default_content_deploy"]') == {"node", "default_content_deploy"}

    def test_scalar_rejected(self) -> None:
        """Any other JSON shape is a ValueError."""
        with pytest.raises(ValueError, match="Unexpected component listing"):
            parse_component_list("3")


class TestCapabilityProbe:
    """Tests for CapabilityProbe."""

    def test_enabled_component(self, make_fake_runner: Callable[..., Any], local_context: ExecutionContext) -> None:
        """A listed component is enabled; the listing asks for enabled JSON."""
        runner = make_fake_runner({LIST_OPERATION: ProcessOutcome(0, '{"structure_sync": {}}')})
        probe = CapabilityProbe(runner)

        assert probe.is_enabled(local_context, "structure_sync") is True
        assert probe.is_enabled(local_context, "default_content_deploy") is False
        assert runner.calls[0].options == LIST_OPTIONS

    def test_listing_cached_per_context(
        self, make_fake_runner: Callable[..., Any], local_context: ExecutionContext
    ) -> None:
        """The listing runs once per context name until cleared."""
        runner = make_fake_runner({LIST_OPERATION: ProcessOutcome(0, "[]")})
        probe = CapabilityProbe(runner)

        probe.is_enabled(local_context, "a")
        probe.is_enabled(local_context, "b")
        assert len(runner.calls) == 1

        probe.clear()
        probe.is_enabled(local_context, "a")
        assert len(runner.calls) == 2

    def test_failed_listing_means_absent(
        self, make_fake_runner: Callable[..., Any], local_context: ExecutionContext
    ) -> None:
        """A failing listing is treated as nothing enabled, not an error."""
        runner = make_fake_runner({LIST_OPERATION: ProcessOutcome(1, "", "Command pm:list not found")})
        assert CapabilityProbe(runner).enabled_components(local_context) == frozenset()

    def test_unparsable_listing_means_absent(
        self, make_fake_runner: Callable[..., Any], local_context: ExecutionContext
    ) -> None:
        """Garbage output is treated as nothing enabled."""
        runner = make_fake_runner({LIST_OPERATION: ProcessOutcome(0, "not json")})
        assert CapabilityProbe(runner).is_enabled(local_context, "structure_sync") is False
