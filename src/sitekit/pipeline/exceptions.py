"""Specialized exceptions raised by the sitekit.pipeline module.

Exception hierarchy::

    SitekitError
        PipelineError (base for all pipeline errors)
            PipelineConfigError (invalid steps or pipeline, also ValueError)
            PipelineAbortedError (a required step failed)
            ResourceAccessError (dump directory/file could not be prepared)
"""

from __future__ import annotations

from sitekit.config.exceptions import SitekitError


class PipelineError(SitekitError):
    """Base exception for all pipeline module errors."""


class PipelineConfigError(PipelineError, ValueError):
    """Pipeline or step definition is invalid.

    Raised when a step has an invalid name, is missing the field its kind
    requires, or when the pipeline holds no steps or duplicate names.
    """


class PipelineAbortedError(PipelineError):
    """Pipeline execution stopped because a required step failed.

    Attributes:
        step_name: Name of the step that caused the abort.
        reason: Description of why the step failed.
    """

    def __init__(self, step_name: str, reason: str) -> None:
        """Initialize PipelineAbortedError.

        Args:
            step_name: Name of the step that caused the abort.
            reason: Description of why the step failed.
        """
        super().__init__(f"Pipeline aborted at step '{step_name}': {reason}")
        self.step_name = step_name
        self.reason = reason


class ResourceAccessError(PipelineError):
    """A filesystem resource needed by a step could not be prepared.

    Attributes:
        path: The directory or file involved.
        reason: Description of the failure.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


__all__ = [
    "PipelineAbortedError",
    "PipelineConfigError",
    "PipelineError",
    "ResourceAccessError",
]
