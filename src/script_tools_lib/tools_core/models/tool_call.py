"""Data models for tool call requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ToolCallRequest:
    """Represents a normalized tool call request from a model response.

    ``arguments`` is whatever the provider supplied: a mapping, a JSON encoded
    string (OpenAI) or None.
    """

    name: str
    arguments: Any
    call_id: Optional[str] = None
