"""Expose the OpenAI tool adapter and its chatbot options."""

from .core import OpenAIAdapter
from .adapter import OpenAIConversationAdapter
from .models import OpenAIChatbotOptions

__all__ = ["OpenAIAdapter", "OpenAIConversationAdapter", "OpenAIChatbotOptions"]
