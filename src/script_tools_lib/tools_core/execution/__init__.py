"""Tool execution and the conversation loop."""

from .process_executor import ProcessExecutor
from .tool_invoker import ToolInvoker, ToolExecutor, ToolHandler
from .adapter import ConversationAdapter
from .conversation import ConversationDriver, ConversationState

__all__ = [
    "ProcessExecutor",
    "ToolInvoker",
    "ToolExecutor",
    "ToolHandler",
    "ConversationAdapter",
    "ConversationDriver",
    "ConversationState",
]
