"""Turn partial or invalid user input into a validated target.

Each field follows the same two phases: accept the supplied value if it is
valid, otherwise emit a notice (when a value was supplied) and prompt for
it. The environment phase is scoped to the already-resolved site.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from sitekit.reporting import MessageKind
from sitekit.targets.exceptions import AmbiguousTargetError, TargetValidationError
from sitekit.targets.models import Target

if TYPE_CHECKING:
    from sitekit.prompts import Prompter
    from sitekit.reporting import Reporter
    from sitekit.targets.registry import TargetRegistry

log = logging.getLogger(__name__)

DEFAULT_SITE = "www"
DEFAULT_ENVIRONMENT = "local"


class AliasResolver:
    """Resolve raw site/environment strings against a registry.

    Args:
        registry: Registered aliases.
        prompter: Interactive prompt primitive.
        reporter: Sink for notices about ignored values.
        default_site: Default offered by the site prompt.
        strict_labels: Fail on duplicate environment labels instead of
            picking the first registered alias.
    """

    def __init__(
        self,
        registry: TargetRegistry,
        prompter: Prompter,
        reporter: Reporter,
        *,
        default_site: str = DEFAULT_SITE,
        strict_labels: bool = False,
    ) -> None:
        self._registry = registry
        self._prompter = prompter
        self._reporter = reporter
        self._default_site = default_site
        self._strict_labels = strict_labels

    def resolve_operation(self, raw: str | None, operations: Mapping[str, str]) -> str:
        """Resolve an operation key such as ``import`` or ``export``.

        Args:
            raw: Operation supplied by the user, possibly None or invalid.
            operations: ``key -> display label`` of the valid operations.

        Raises:
            TargetValidationError: If no operation was chosen.
        """
        if raw in operations:
            return raw

        answer = self._prompter.choice("Please select an operation to perform", list(operations.values()))
        by_label = {label.lower(): key for key, label in operations.items()}
        operation = by_label.get((answer or "").lower()) or (answer if answer in operations else None)
        if not operation:
            raise TargetValidationError("Operation required.", field="operation")
        return operation

    def resolve_site(self, raw: str | None, *, purpose: str = "use") -> str:
        """Resolve a site name.

        Raises:
            TargetValidationError: If no site was chosen.
        """
        sites = self._registry.list_sites()
        if raw and raw in sites:
            return raw
        if raw:
            self._reporter.write(f"Site {raw} is not an available option.", MessageKind.NOTICE)

        choices = self._registry.ordered_sites()
        default = self._default_site if self._default_site in sites else None
        site = self._prompter.choice(f"Please select the site to {purpose}", choices, default)
        if not site or site not in sites:
            raise TargetValidationError("Site required.", field="site")
        return site

    def resolve_environment(
        self,
        site: str,
        raw: str | None,
        *,
        purpose: str = "use",
        default: str = DEFAULT_ENVIRONMENT,
    ) -> Target:
        """Resolve an environment label of ``site`` into a target.

        Raises:
            TargetValidationError: If no environment was chosen.
            AmbiguousTargetError: If the label is duplicated and strict mode is on.
        """
        labels = self._registry.list_environments(site)
        label = raw if raw and raw in labels else None
        if raw and label is None:
            self._reporter.write(
                f"Environment {raw} is not an available option for site {site}.",
                MessageKind.NOTICE,
            )

        if label is None:
            choices = list(dict.fromkeys(labels))
            label = self._prompter.choice(
                f"Please select the environment to {purpose}",
                choices,
                default if default in labels else None,
            )
            if not label or label not in labels:
                raise TargetValidationError("Environment required.", field="environment")

        matches = self._registry.matching_alias_ids(site, label)
        if len(matches) > 1:
            if self._strict_labels:
                raise AmbiguousTargetError(site, label, matches)
            log.debug("Label '%s' of site '%s' matches %s, using the first", label, site, matches)

        return Target(site=site, environment=label, alias_id=matches[0])

    def resolve(
        self,
        raw_site: str | None,
        raw_environment: str | None,
        *,
        purpose: str = "use",
        default_environment: str = DEFAULT_ENVIRONMENT,
    ) -> Target:
        """Resolve site then environment into a target."""
        site = self.resolve_site(raw_site, purpose=purpose)
        return self.resolve_environment(site, raw_environment, purpose=purpose, default=default_environment)


__all__ = [
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_SITE",
    "AliasResolver",
]
