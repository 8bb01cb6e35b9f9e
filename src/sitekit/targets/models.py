"""Data models for targets and execution contexts.

- SiteAlias: one registered endpoint (``site.key``) with its options
- Target: the validated (site, environment) pair chosen for a run
- ExecutionContext: read-only "run as this target" view handed to steps
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sitekit.config.exceptions import ConfigFormatError

#: Option keys lifted out of an alias definition into dedicated fields.
_ALIAS_FIELDS = ("label", "site-env", "uri", "root", "host", "user")


@dataclass(frozen=True, slots=True)
class SiteAlias:
    """A registered site endpoint.

    Attributes:
        alias_id: Identifier ``site.key``.
        site: Site name.
        key: Environment key, the part of the alias id after the site.
        label: Display label (defaults to ``key``); not necessarily unique.
        site_env: Declared ``site-env`` value exported as SITE_ENVIRONMENT.
        uri: Base URI of the site in this environment.
        root: Docroot path of the site in this environment.
        host: Remote host, if any.
        user: Remote user, if any.
        options: Remaining options passed through to the site tool.

    Examples:
        >>> alias = SiteAlias.from_mapping("www", "prod", {"uri": "https://example.com"})
        >>> alias.alias_id, alias.label, alias.name
        ('www.prod', 'prod', '@www.prod')
    """

    alias_id: str
    site: str
    key: str
    label: str
    site_env: str | None = None
    uri: str | None = None
    root: str | None = None
    host: str | None = None
    user: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Alias name as passed to the site tool (``@site.key``)."""
        return f"@{self.alias_id}"

    @classmethod
    def from_mapping(cls, site: str, key: str, data: Mapping[str, Any] | None) -> SiteAlias:
        """Build an alias from one environment entry of a site file.

        Args:
            site: Site name.
            key: Environment key.
            data: Option mapping (may be empty or None).

        Raises:
            ConfigFormatError: If ``data`` is not a mapping.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigFormatError(f"Alias '{site}.{key}' must be a mapping, got {type(data).__name__}")

        extra = data.get("options") or {}
        if not isinstance(extra, Mapping):
            raise ConfigFormatError(f"Alias '{site}.{key}': 'options' must be a mapping")
        options = {k: v for k, v in data.items() if k not in _ALIAS_FIELDS and k != "options"}
        options.update(extra)

        return cls(
            alias_id=f"{site}.{key}",
            site=site,
            key=key,
            label=str(data.get("label") or key),
            site_env=data.get("site-env"),
            uri=data.get("uri"),
            root=data.get("root"),
            host=data.get("host"),
            user=data.get("user"),
            options=options,
        )


@dataclass(frozen=True, slots=True)
class Target:
    """The (site, environment) pair an operation runs against.

    Attributes:
        site: Site name.
        environment: Environment display label.
        alias_id: Alias id the label resolved to.
    """

    site: str
    environment: str
    alias_id: str

    def __str__(self) -> str:
        return f"{self.site}:{self.environment}"


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Read-only context a step runs under.

    ``options`` and ``env_vars`` are copied into read-only mappings on
    construction, so a context never shares mutable storage with the
    mappings it was built from.

    Attributes:
        name: Alias name used for invocations (``@www.local`` or ``@self``).
        uri: Context URI.
        options: Options forwarded to the site tool.
        env_vars: Environment variables overlaid on the child process.
        root: Docroot of the context, if known.

    Examples:
        >>> env = {"A": "1"}
        >>> ctx = ExecutionContext(name="@self", env_vars=env)
        >>> env["A"] = "2"
        >>> ctx.env_vars["A"]
        '1'
    """

    name: str
    uri: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    env_vars: Mapping[str, str] = field(default_factory=dict)
    root: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        object.__setattr__(self, "env_vars", MappingProxyType(dict(self.env_vars)))


__all__ = [
    "ExecutionContext",
    "SiteAlias",
    "Target",
]
