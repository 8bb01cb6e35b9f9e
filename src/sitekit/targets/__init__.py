"""Target registry, resolution and execution contexts.

Examples:
    >>> from sitekit.targets import TargetRegistry
    >>> registry = TargetRegistry.from_mapping({"www": {"local": {}, "remote_prod": {}}})
    >>> sorted(registry.list_sites())
    ['www']
"""

from sitekit.targets.context import (
    DEFAULT_HOST_STRATEGIES,
    SELF_CONTEXT_NAME,
    SITE_ENVIRONMENT_VAR,
    ExecutionContextBuilder,
    HostStrategy,
    UriOverlay,
    context_uri,
    environment_variable,
    options_uri,
)
from sitekit.targets.exceptions import (
    AmbiguousTargetError,
    TargetError,
    TargetNotFoundError,
    TargetValidationError,
)
from sitekit.targets.models import ExecutionContext, SiteAlias, Target
from sitekit.targets.probe import CapabilityProbe
from sitekit.targets.registry import TargetRegistry
from sitekit.targets.resolver import DEFAULT_ENVIRONMENT, DEFAULT_SITE, AliasResolver

__all__ = [
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_HOST_STRATEGIES",
    "DEFAULT_SITE",
    "SELF_CONTEXT_NAME",
    "SITE_ENVIRONMENT_VAR",
    "AliasResolver",
    "AmbiguousTargetError",
    "CapabilityProbe",
    "ExecutionContext",
    "ExecutionContextBuilder",
    "HostStrategy",
    "SiteAlias",
    "Target",
    "TargetError",
    "TargetNotFoundError",
    "TargetRegistry",
    "TargetValidationError",
    "UriOverlay",
    "context_uri",
    "environment_variable",
    "options_uri",
]
