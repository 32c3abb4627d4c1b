"""Tool-related data models."""

from .models import (
    SUPPORTED_SCRIPT_KINDS,
    Tool,
    ToolSelector,
    ToolSelectorLike,
    ExecutionResult,
    EnvironmentCheck,
    ToolCallStatus,
    ChatbotResult,
)
from .tool_call import ToolCallRequest

__all__ = [
    "SUPPORTED_SCRIPT_KINDS",
    "Tool",
    "ToolSelector",
    "ToolSelectorLike",
    "ExecutionResult",
    "EnvironmentCheck",
    "ToolCallStatus",
    "ChatbotResult",
    "ToolCallRequest",
]
