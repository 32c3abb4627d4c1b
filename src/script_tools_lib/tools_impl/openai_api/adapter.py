import inspect
from typing import Any, Dict, List, Sequence

from openai.types.chat import ChatCompletion

from script_tools_lib.tools_core.models import ExecutionResult, ToolCallRequest
from .models import OpenAIChatbotOptions


class OpenAIConversationAdapter:
    """Adapter between the conversation driver and the OpenAI chat completions API."""

    provider_label = "OpenAI"

    def __init__(self, client: Any, options: OpenAIChatbotOptions, tools: List[Dict[str, Any]]):
        """Initialize the OpenAI conversation adapter.

        Args:
            client: An ``AsyncOpenAI`` (or ``OpenAI``) client.
            options: Model and request options.
            tools: Tool definitions in OpenAI format.
        """
        self.client = client
        self.options = options
        self.tools = tools

    def build_user_message(self, user_input: Any) -> Dict[str, Any]:
        return {"role": "user", "content": user_input}

    async def create(self, messages: List[Any]) -> ChatCompletion:
        """Send the history to the model.

        The system prompt is prepended to every request and never stored in the history.
        """
        request = list(messages)
        if self.options.system and (not request or request[0].get("role") != "system"):
            request.insert(0, {"role": "system", "content": self.options.system})

        kwargs = self.options.request_options()
        if self.tools:
            kwargs["tools"] = self.tools

        response = self.client.chat.completions.create(messages=request, **kwargs)
        if inspect.isawaitable(response):
            response = await response
        return response

    def get_tool_calls(self, response: ChatCompletion) -> Sequence[ToolCallRequest]:
        """Extract tool calls from an OpenAI chat completion response.

        Args:
            response: The chat completion response from OpenAI.

        Returns:
            A sequence of tool call requests extracted from the response.
        """
        if not response.choices:
            return []

        tool_calls = response.choices[0].message.tool_calls
        if not tool_calls:
            return []

        return [
            ToolCallRequest(
                name=tool_call.function.name,
                arguments=tool_call.function.arguments,
                call_id=tool_call.id,
            )
            for tool_call in tool_calls
            if tool_call.type == "function"
        ]

    def get_text(self, response: ChatCompletion) -> str:
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def build_assistant_message(self, response: ChatCompletion) -> Dict[str, Any]:
        return response.choices[0].message.model_dump(exclude_none=True)

    def build_text_message(self, text: str) -> Dict[str, Any]:
        return {"role": "assistant", "content": text}

    def build_tool_result_message(self, request: ToolCallRequest, result: ExecutionResult) -> Dict[str, Any]:
        """Build a tool response message for the OpenAI API.

        Args:
            request: The tool call being answered.
            result: The result of the tool call.

        Returns:
            A dictionary representing the tool response message.
        """
        return {
            "role": "tool",
            "tool_call_id": request.call_id,
            "name": request.name,
            "content": result.to_content(),
        }
