"""Script Tools Library - run catalog-defined bash and python tools from LLM conversations."""

from .tools_core import (
    BaseToolsAdapter,
    ConversationDriver,
    ChatbotResult,
    ExecutionResult,
    Tool,
    ToolSelector,
    ScriptToolError,
    ConfigurationError,
    ToolLoadError,
    ToolFetchError,
    get_logger,
    setup_logging,
)
from .tools_impl import (
    OpenAIAdapter,
    OpenAIChatbotOptions,
    AnthropicAdapter,
    AnthropicChatbotOptions,
    LangChainAdapter,
)

__all__ = [
    "BaseToolsAdapter",
    "ConversationDriver",
    "ChatbotResult",
    "ExecutionResult",
    "Tool",
    "ToolSelector",
    "ScriptToolError",
    "ConfigurationError",
    "ToolLoadError",
    "ToolFetchError",
    "get_logger",
    "setup_logging",
    "OpenAIAdapter",
    "OpenAIChatbotOptions",
    "AnthropicAdapter",
    "AnthropicChatbotOptions",
    "LangChainAdapter",
]
