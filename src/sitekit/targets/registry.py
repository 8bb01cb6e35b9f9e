"""Read-only registry of known site aliases.

Aliases are declared per site, in a ``<site>.site.yml`` file whose top-level
keys are environment keys:

.. code-block:: yaml

    # drush/sites/www.site.yml
    local:
      root: /var/www/docroot
      uri: http://www.docksal
      site-env: local
    remote_prod:
      label: prod
      host: prod.example.com
      uri: https://www.example.com

Registration order is preserved: environments are listed in the order
they were declared, sites in file order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from sitekit.config.exceptions import ConfigFormatError
from sitekit.targets.exceptions import TargetError, TargetNotFoundError
from sitekit.targets.models import SiteAlias

if TYPE_CHECKING:
    from box import Box

log = logging.getLogger(__name__)

#: Suffix of alias files inside the alias directory.
SITE_FILE_SUFFIX = ".site.yml"


class TargetRegistry:
    """Enumerate registered (site, environment) aliases.

    Args:
        aliases: Aliases in registration order.

    Raises:
        TargetError: If two aliases share the same alias id.

    Examples:
        >>> registry = TargetRegistry.from_mapping(
        ...     {"www": {"local": {}, "remote_prod": {"label": "prod"}}}
        ... )
        >>> registry.list_environments("www")
        ['local', 'prod']
        >>> registry.resolve_alias_id("www", "prod")
        'www.remote_prod'
    """

    def __init__(self, aliases: Iterable[SiteAlias] = ()) -> None:
        self._aliases: dict[str, SiteAlias] = {}
        for alias in aliases:
            if alias.alias_id in self._aliases:
                raise TargetError(f"Duplicate alias id: {alias.alias_id!r}")
            self._aliases[alias.alias_id] = alias

    @classmethod
    def from_mapping(cls, sites: Mapping[str, Mapping[str, Any]]) -> TargetRegistry:
        """Build a registry from ``{site: {environment_key: options}}``."""
        return cls(_aliases_from_mapping(sites))

    @classmethod
    def from_directory(cls, directory: str | Path) -> TargetRegistry:
        """Build a registry from the ``*.site.yml`` files of a directory.

        Args:
            directory: Alias directory.

        Raises:
            ConfigFormatError: If a site file is not a YAML mapping.
        """
        return cls(_aliases_from_directory(Path(directory)))

    @classmethod
    def from_config(cls, config: Box) -> TargetRegistry:
        """Build a registry from the ``targets`` config section.

        Aliases from ``targets.directory`` come first, followed by inline
        ``targets.sites`` definitions.
        """
        section = config.get("targets") or {}
        aliases: list[SiteAlias] = []

        directory = section.get("directory")
        if directory:
            path = Path(str(directory)).expanduser()
            if path.is_dir():
                aliases.extend(_aliases_from_directory(path))
            else:
                log.debug("Alias directory %s does not exist", path)

        aliases.extend(_aliases_from_mapping(section.get("sites") or {}))
        return cls(aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def __contains__(self, alias_id: object) -> bool:
        return isinstance(alias_id, str) and alias_id.lstrip("@") in self._aliases

    def list_sites(self) -> set[str]:
        """Return every registered site."""
        return {alias.site for alias in self._aliases.values()}

    def ordered_sites(self) -> list[str]:
        """Return sites in registration order (for prompts)."""
        return list(dict.fromkeys(alias.site for alias in self._aliases.values()))

    def aliases(self, site: str) -> list[SiteAlias]:
        """Return the aliases of a site in registration order."""
        return [alias for alias in self._aliases.values() if alias.site == site]

    def environment_map(self, site: str) -> dict[str, str]:
        """Return ``alias_id -> label`` for a site, in registration order."""
        return {alias.alias_id: alias.label for alias in self.aliases(site)}

    def list_environments(self, site: str) -> list[str]:
        """Return the environment labels of a site in registration order.

        Duplicate labels are kept; see :meth:`resolve_alias_id`.
        """
        return [alias.label for alias in self.aliases(site)]

    def matching_alias_ids(self, site: str, label: str) -> list[str]:
        """Return every alias id of ``site`` carrying ``label``."""
        return [alias.alias_id for alias in self.aliases(site) if alias.label == label]

    def resolve_alias_id(self, site: str, label: str) -> str:
        """Return the first alias id of ``site`` whose label is ``label``.

        Raises:
            TargetNotFoundError: If no alias of the site has that label.
        """
        matches = self.matching_alias_ids(site, label)
        if not matches:
            raise TargetNotFoundError(site, label)
        return matches[0]

    def find(self, alias_id: str) -> SiteAlias | None:
        """Return an alias by id (leading ``@`` accepted), or None."""
        return self._aliases.get(alias_id.lstrip("@"))

    def get(self, alias_id: str) -> SiteAlias:
        """Return an alias by id.

        Raises:
            TargetNotFoundError: If the alias id is unknown.
        """
        alias = self.find(alias_id)
        if alias is None:
            site, _, key = alias_id.lstrip("@").partition(".")
            raise TargetNotFoundError(site, key or alias_id)
        return alias


def _aliases_from_mapping(sites: Mapping[str, Any]) -> list[SiteAlias]:
    aliases: list[SiteAlias] = []
    for site, environments in sites.items():
        if not isinstance(environments, Mapping):
            raise ConfigFormatError(f"Site '{site}' must map environment keys to options")
        for key, data in environments.items():
            aliases.append(SiteAlias.from_mapping(str(site), str(key), data))
    return aliases


def _aliases_from_directory(directory: Path) -> list[SiteAlias]:
    aliases: list[SiteAlias] = []
    for path in sorted(directory.glob(f"*{SITE_FILE_SUFFIX}")):
        site = path.name[: -len(SITE_FILE_SUFFIX)]
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigFormatError(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            continue
        if not isinstance(data, Mapping):
            raise ConfigFormatError(f"Site file {path} must contain a mapping")
        log.debug("Loaded %d alias(es) for site '%s' from %s", len(data), site, path)
        aliases.extend(_aliases_from_mapping({site: data}))
    return aliases


__all__ = [
    "SITE_FILE_SUFFIX",
    "TargetRegistry",
]
