"""Collect the provider bindings built on the shared tools core."""

from .openai_api import OpenAIAdapter, OpenAIChatbotOptions
from .anthropic_api import AnthropicAdapter, AnthropicChatbotOptions
from .langchain_api import LangChainAdapter

__all__ = [
    "OpenAIAdapter",
    "OpenAIChatbotOptions",
    "AnthropicAdapter",
    "AnthropicChatbotOptions",
    "LangChainAdapter",
]
