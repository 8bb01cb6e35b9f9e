"""Exceptions raised while resolving targets.

Exception hierarchy::

    SitekitError
        TargetError (base for all target errors)
            TargetValidationError (no valid operation/site/environment chosen)
            TargetNotFoundError (no alias with that label under that site)
            AmbiguousTargetError (label maps to several aliases in strict mode)
"""

from __future__ import annotations

from sitekit.config.exceptions import SitekitError


class TargetError(SitekitError):
    """Base exception for target resolution errors."""


class TargetValidationError(TargetError, ValueError):
    """No valid value was chosen for a required field.

    Attributes:
        field: Name of the missing field (``operation``, ``site``, ``environment``).
    """

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


class TargetNotFoundError(TargetError, KeyError):
    """No registered alias matches the requested site/label.

    Attributes:
        site: Site searched.
        label: Environment label or alias id that was not found.
    """

    def __init__(self, site: str, label: str) -> None:
        self.message = f"No environment '{label}' registered for site '{site}'"
        super().__init__(self.message)
        self.site = site
        self.label = label

    def __str__(self) -> str:
        return self.message


class AmbiguousTargetError(TargetError):
    """An environment label maps to more than one alias id.

    Attributes:
        site: Site searched.
        label: The duplicated label.
        alias_ids: Every alias id carrying the label, in registration order.
    """

    def __init__(self, site: str, label: str, alias_ids: list[str]) -> None:
        super().__init__(
            f"Environment label '{label}' is ambiguous for site '{site}', found in: {', '.join(alias_ids)}"
        )
        self.site = site
        self.label = label
        self.alias_ids = alias_ids


__all__ = [
    "AmbiguousTargetError",
    "TargetError",
    "TargetNotFoundError",
    "TargetValidationError",
]
