"""Expose the Anthropic tool adapter and its chatbot options."""

from .core import AnthropicAdapter
from .adapter import AnthropicConversationAdapter
from .models import AnthropicChatbotOptions

__all__ = ["AnthropicAdapter", "AnthropicConversationAdapter", "AnthropicChatbotOptions"]
