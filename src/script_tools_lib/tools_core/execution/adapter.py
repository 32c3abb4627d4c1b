"""Protocol for adapting provider-specific conversation handling."""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence

from ..models import ExecutionResult, ToolCallRequest


class ConversationAdapter(Protocol):
    """
    Protocol for adapting a provider's message and response shapes to the generic driver.
    """

    provider_label: str

    def build_user_message(self, user_input: Any) -> Any:
        """Wraps user input into a provider-specific user message."""
        ...

    async def create(self, messages: List[Any]) -> Any:
        """Sends the messages plus the tool catalog to the model and returns its response."""
        ...

    def get_tool_calls(self, response: Any) -> Sequence[ToolCallRequest]:
        """Extracts generic tool calls from a provider-specific response."""
        ...

    def get_text(self, response: Any) -> str:
        """Extracts the text content of a provider-specific response."""
        ...

    def build_assistant_message(self, response: Any) -> Any:
        """Converts a response containing tool calls into a history message."""
        ...

    def build_text_message(self, text: str) -> Any:
        """Builds an assistant history message holding plain text."""
        ...

    def build_tool_result_message(self, request: ToolCallRequest, result: ExecutionResult) -> Any:
        """Converts a tool result into a provider-specific tool-result message."""
        ...
