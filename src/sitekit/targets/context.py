"""Derive execution contexts for a resolved target.

The builder never mutates its base context: every overlay copies the base
option and environment maps, applies the target's values and returns a new
:class:`ExecutionContext`.

Two URI overlay modes exist because workflows disagree on where a target's
``uri`` belongs:

- ``UriOverlay.OPTIONS``: only ``options["uri"]`` is set.
- ``UriOverlay.CONTEXT``: ``options["uri"]`` and the context ``uri`` are set.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from sitekit.targets.models import ExecutionContext, SiteAlias

if TYPE_CHECKING:
    from sitekit.targets.registry import TargetRegistry

#: Environment variable carrying the environment a site runs as.
SITE_ENVIRONMENT_VAR = "SITE_ENVIRONMENT"

#: Name of the context used when no local alias is registered.
SELF_CONTEXT_NAME = "@self"

HostStrategy = Callable[[ExecutionContext], str | None]


class UriOverlay(str, Enum):
    """Where a target's ``uri`` is overlaid.

    Attributes:
        OPTIONS: Only the ``uri`` option.
        CONTEXT: The ``uri`` option and the context's own ``uri``.
    """

    OPTIONS = "options"
    CONTEXT = "context"


def context_uri(context: ExecutionContext) -> str | None:
    """Host strategy: the context's own URI."""
    return context.uri


def options_uri(context: ExecutionContext) -> str | None:
    """Host strategy: the ``uri`` option of the context."""
    value = context.options.get("uri")
    return str(value) if value else None


def environment_variable(name: str = "SITE_URI") -> HostStrategy:
    """Host strategy factory reading a process environment variable."""

    def _strategy(context: ExecutionContext) -> str | None:
        return context.env_vars.get(name) or os.environ.get(name) or None

    _strategy.__name__ = f"environment_variable_{name.lower()}"
    return _strategy


#: Default host-resolution chain, first match wins.
DEFAULT_HOST_STRATEGIES: tuple[HostStrategy, ...] = (
    context_uri,
    options_uri,
    environment_variable("SITE_URI"),
)


class ExecutionContextBuilder:
    """Create base and derived execution contexts.

    Args:
        uri_overlay: Where a target's URI is overlaid.
        host_strategies: Ordered chain used by :meth:`resolve_base_uri`.

    Examples:
        >>> builder = ExecutionContextBuilder()
        >>> base = ExecutionContext(name="@www.local")
        >>> target = SiteAlias.from_mapping("www", "remote_prod", {"uri": "https://example.com"})
        >>> ctx = builder.build_overlay(base, target)
        >>> ctx.env_vars["SITE_ENVIRONMENT"], ctx.options["uri"], ctx.uri
        ('remote_prod', 'https://example.com', None)
        >>> dict(base.env_vars)
        {}
    """

    def __init__(
        self,
        *,
        uri_overlay: UriOverlay = UriOverlay.OPTIONS,
        host_strategies: Sequence[HostStrategy] = DEFAULT_HOST_STRATEGIES,
    ) -> None:
        self._uri_overlay = UriOverlay(uri_overlay)
        self._host_strategies = tuple(host_strategies)

    @property
    def uri_overlay(self) -> UriOverlay:
        """Return the configured URI overlay mode."""
        return self._uri_overlay

    def base_context(self, alias: SiteAlias | None) -> ExecutionContext:
        """Return the context of the local alias, or an empty ``@self`` context."""
        if alias is None:
            return ExecutionContext(name=SELF_CONTEXT_NAME)

        options = dict(alias.options)
        if alias.uri:
            options.setdefault("uri", alias.uri)
        return ExecutionContext(name=alias.name, uri=alias.uri, options=options, root=alias.root)

    def local_context(self, registry: TargetRegistry, site: str, *, local_key: str = "local") -> ExecutionContext:
        """Return the base context of ``site`` built from its local alias.

        Falls back to an empty ``@self`` context when the site has no
        local alias registered.
        """
        return self.base_context(registry.find(f"{site}.{local_key}"))

    def build_overlay(
        self,
        base: ExecutionContext,
        target: SiteAlias,
        *,
        uri_overlay: UriOverlay | None = None,
    ) -> ExecutionContext:
        """Return a copy of ``base`` running as ``target``.

        Args:
            base: Context to derive from; left untouched.
            target: Alias whose environment and URI are overlaid.
            uri_overlay: Per-call override of the overlay mode.

        Returns:
            A new context with SITE_ENVIRONMENT always set.
        """
        mode = UriOverlay(uri_overlay) if uri_overlay is not None else self._uri_overlay

        options = dict(base.options)
        env_vars = dict(base.env_vars)
        env_vars[SITE_ENVIRONMENT_VAR] = str(target.site_env or target.key)

        uri = base.uri
        if target.uri:
            options["uri"] = target.uri
            if mode is UriOverlay.CONTEXT:
                uri = target.uri

        return ExecutionContext(name=base.name, uri=uri, options=options, env_vars=env_vars, root=base.root)

    def resolve_base_uri(self, context: ExecutionContext, *, explicit: str | None = None) -> str | None:
        """Walk the host strategies and return the first URI found.

        Args:
            context: Context to inspect.
            explicit: Operator-supplied URI, tried before the chain.
        """
        if explicit:
            return explicit
        for strategy in self._host_strategies:
            uri = strategy(context)
            if uri:
                return uri
        return None


__all__ = [
    "DEFAULT_HOST_STRATEGIES",
    "SELF_CONTEXT_NAME",
    "SITE_ENVIRONMENT_VAR",
    "ExecutionContextBuilder",
    "HostStrategy",
    "UriOverlay",
    "context_uri",
    "environment_variable",
    "options_uri",
]
