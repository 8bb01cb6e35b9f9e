"""Package metadata for sitekit."""

__app_name__ = "sitekit"
__version__ = "0.4.0"
__description__ = "Operator tooling to sync, import and health-check multi-environment site deployments."
__license_type__ = "MIT"

__all__ = [
    "__app_name__",
    "__description__",
    "__license_type__",
    "__version__",
]
