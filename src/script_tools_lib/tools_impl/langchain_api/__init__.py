"""Expose the LangChain tool adapter."""

from .core import LangChainAdapter
from .adapter import LangChainConversationAdapter
from .schema import JsonSchemaModelFactory

__all__ = ["LangChainAdapter", "LangChainConversationAdapter", "JsonSchemaModelFactory"]
