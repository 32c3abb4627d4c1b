"""
Custom exception classes for the script tool system.

This module defines the exceptions raised while configuring an adapter,
loading or fetching tool catalogs, and talking to model providers. Tool
execution itself never raises to callers; failures there are folded into
``ExecutionResult`` values instead.
"""


class ScriptToolError(Exception):
    """Base exception for all script-tool related errors."""

    pass


class ConfigurationError(ScriptToolError, ValueError):
    """Raised when an adapter or registry is configured with invalid values."""

    pass


class ToolLoadError(ScriptToolError):
    """Raised when a tool catalog cannot be loaded."""

    pass


class ToolFetchError(ToolLoadError):
    """Raised when the remote tool registry returns an error or a malformed body."""

    pass


class ToolNotFoundError(ScriptToolError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ToolExecutionError(ScriptToolError):
    """Raised internally when a tool script cannot be launched."""

    pass


class ToolValidationError(ScriptToolError):
    """Raised when a tool input schema is invalid."""

    pass


class ModelTimeoutError(ScriptToolError, TimeoutError):
    """Raised when a model request exceeds the configured timeout."""

    pass
