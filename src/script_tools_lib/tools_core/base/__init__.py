"""Re-export the adapter base class shared by all provider bindings."""

from .base import BaseToolsAdapter

__all__ = [
    "BaseToolsAdapter",
]
