"""Export the exception hierarchy used across configuration, loading and execution paths."""

from .exceptions import (
    ScriptToolError,
    ConfigurationError,
    ToolLoadError,
    ToolFetchError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    ModelTimeoutError,
)

__all__ = [
    "ScriptToolError",
    "ConfigurationError",
    "ToolLoadError",
    "ToolFetchError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "ModelTimeoutError",
]
