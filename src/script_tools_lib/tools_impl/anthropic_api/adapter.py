import inspect
from typing import Any, Dict, List, Sequence

from anthropic.types import Message

from script_tools_lib.tools_core.models import ExecutionResult, ToolCallRequest
from .models import AnthropicChatbotOptions


class AnthropicConversationAdapter:
    """Adapter between the conversation driver and the Anthropic messages API."""

    provider_label = "Anthropic"

    def __init__(self, client: Any, options: AnthropicChatbotOptions, tools: List[Dict[str, Any]]):
        """Initialize the Anthropic conversation adapter.

        Args:
            client: An ``AsyncAnthropic`` (or ``Anthropic``) client.
            options: Model and request options.
            tools: Tool definitions in Anthropic format.
        """
        self.client = client
        self.options = options
        self.tools = tools

    def build_user_message(self, user_input: Any) -> Dict[str, Any]:
        return {"role": "user", "content": user_input}

    async def create(self, messages: List[Any]) -> Message:
        kwargs = self.options.request_options()
        if self.tools:
            kwargs["tools"] = self.tools

        response = self.client.messages.create(messages=list(messages), **kwargs)
        if inspect.isawaitable(response):
            response = await response
        return response

    def get_tool_calls(self, response: Message) -> Sequence[ToolCallRequest]:
        """Extract ``tool_use`` blocks from an Anthropic message.

        Args:
            response: The message returned by the API.

        Returns:
            A sequence of tool call requests in block order.
        """
        return [
            ToolCallRequest(name=block.name, arguments=block.input, call_id=block.id)
            for block in response.content
            if block.type == "tool_use"
        ]

    def get_text(self, response: Message) -> str:
        return "".join(block.text for block in response.content if block.type == "text")

    def build_assistant_message(self, response: Message) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "content": [block.model_dump(exclude_none=True) for block in response.content],
        }

    def build_text_message(self, text: str) -> Dict[str, Any]:
        return {"role": "assistant", "content": text}

    def build_tool_result_message(self, request: ToolCallRequest, result: ExecutionResult) -> Dict[str, Any]:
        return {
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": request.call_id,
                    "content": result.to_content(),
                }
            ],
        }
