"""Input validation for the sitekit.pipeline module."""

from __future__ import annotations

import re
from collections.abc import Mapping

from sitekit.pipeline.exceptions import PipelineConfigError

# ============================================================================
# Constants - Hard Limits
# ============================================================================

#: Maximum step name length.
MAX_STEP_NAME_LENGTH = 64

#: Pattern for valid step names.
STEP_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")

#: Maximum number of steps in a single pipeline.
MAX_PIPELINE_STEPS = 50

#: Maximum number of arguments for a step.
MAX_STEP_ARGS = 50

#: Pattern for site-tool operation names (``cr``, ``config:import``, ``pm-list``).
OPERATION_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_.:-]*$")

#: Maximum length of an operation name.
MAX_OPERATION_LENGTH = 128

#: Maximum length of a shell command.
MAX_COMMAND_LENGTH = 4096

#: Pattern for environment variable names.
ENV_VAR_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# ============================================================================
# Validation Functions
# ============================================================================


def validate_step_name(name: str) -> str:
    """Validate and return a step name.

    Rules:
    - Cannot be empty
    - Max 64 characters (hard limit)
    - Must start with a letter
    - Only alphanumeric, underscore, hyphen allowed

    Raises:
        PipelineConfigError: If name is invalid.

    Examples:
        >>> validate_step_name("db-dump")
        'db-dump'
        >>> validate_step_name("")
        Traceback (most recent call last):
            ...
        sitekit.pipeline.exceptions.PipelineConfigError: Step name cannot be empty
    """
    if not name:
        raise PipelineConfigError("Step name cannot be empty")
    if len(name) > MAX_STEP_NAME_LENGTH:
        raise PipelineConfigError(f"Step name too long (max {MAX_STEP_NAME_LENGTH} chars)")
    if not STEP_NAME_PATTERN.match(name):
        raise PipelineConfigError(
            "Step name must start with a letter and contain only alphanumeric, underscore, or hyphen characters"
        )
    return name


def validate_operation(operation: str) -> str:
    """Validate a site-tool operation name.

    Examples:
        >>> validate_operation("config:import")
        'config:import'
    """
    if not operation:
        raise PipelineConfigError("Operation cannot be empty")
    if len(operation) > MAX_OPERATION_LENGTH:
        raise PipelineConfigError(f"Operation too long (max {MAX_OPERATION_LENGTH} chars)")
    if not OPERATION_PATTERN.match(operation):
        raise PipelineConfigError(f"Invalid operation name: {operation!r}")
    return operation


def validate_command(command: str) -> str:
    """Validate a shell command string.

    Shell steps legitimately use pipes and redirections, so only
    emptiness, length and NUL bytes are checked.
    """
    if not command or not command.strip():
        raise PipelineConfigError("Command cannot be empty")
    if len(command) > MAX_COMMAND_LENGTH:
        raise PipelineConfigError(f"Command too long (max {MAX_COMMAND_LENGTH} chars)")
    if "\x00" in command:
        raise PipelineConfigError("Command cannot contain NUL bytes")
    return command


def validate_env(env: Mapping[str, str]) -> Mapping[str, str]:
    """Validate environment variable names and values."""
    for key, value in env.items():
        if not ENV_VAR_NAME_PATTERN.match(key):
            raise PipelineConfigError(f"Invalid environment variable name: {key!r}")
        if not isinstance(value, str):
            raise PipelineConfigError(f"Environment variable {key!r} must be a string, got {type(value).__name__}")
    return env


def validate_pipeline_config(*, step_count: int) -> None:
    """Validate pipeline-level configuration.

    Raises:
        PipelineConfigError: If the pipeline holds no steps or too many.
    """
    if step_count == 0:
        raise PipelineConfigError("Pipeline must have at least one step")
    if step_count > MAX_PIPELINE_STEPS:
        raise PipelineConfigError(f"Too many steps (max {MAX_PIPELINE_STEPS})")


__all__ = [
    "ENV_VAR_NAME_PATTERN",
    "MAX_COMMAND_LENGTH",
    "MAX_OPERATION_LENGTH",
    "MAX_PIPELINE_STEPS",
    "MAX_STEP_ARGS",
    "MAX_STEP_NAME_LENGTH",
    "OPERATION_PATTERN",
    "STEP_NAME_PATTERN",
    "validate_command",
    "validate_env",
    "validate_operation",
    "validate_pipeline_config",
    "validate_step_name",
]
