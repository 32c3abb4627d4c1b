from typing import Any, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage

from script_tools_lib.tools_core.models import ExecutionResult, ToolCallRequest


class LangChainConversationAdapter:
    """Adapter between the conversation driver and a LangChain chat model."""

    provider_label = "LangChain"

    def __init__(self, chat_model: BaseChatModel, tools: Sequence[Any], system_prompt: Optional[str] = None):
        """Initialize the LangChain conversation adapter.

        Args:
            chat_model: The chat model; it is bound to the tools when there are any.
            tools: LangChain tools offered to the model.
            system_prompt: System prompt sent ahead of every request.
        """
        self.chat_model = chat_model
        self.tools = list(tools)
        self.system_prompt = system_prompt
        self.runnable: Any = chat_model.bind_tools(self.tools) if self.tools else chat_model

    def build_user_message(self, user_input: Any) -> BaseMessage:
        return HumanMessage(content=user_input)

    async def create(self, messages: List[Any]) -> BaseMessage:
        request = list(messages)
        if self.system_prompt:
            request.insert(0, SystemMessage(content=self.system_prompt))
        return await self.runnable.ainvoke(request)

    def get_tool_calls(self, response: BaseMessage) -> Sequence[ToolCallRequest]:
        return [
            ToolCallRequest(name=call["name"], arguments=call.get("args"), call_id=call.get("id"))
            for call in getattr(response, "tool_calls", None) or []
        ]

    def get_text(self, response: BaseMessage) -> str:
        content = response.content
        if isinstance(content, str):
            return content

        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)

    def build_assistant_message(self, response: BaseMessage) -> BaseMessage:
        return response

    def build_text_message(self, text: str) -> BaseMessage:
        return AIMessage(content=text)

    def build_tool_result_message(self, request: ToolCallRequest, result: ExecutionResult) -> BaseMessage:
        return ToolMessage(content=result.to_content(), tool_call_id=request.call_id or "", name=request.name)
