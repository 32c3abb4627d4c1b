from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from script_tools_lib.tools_core.base import BaseToolsAdapter
from script_tools_lib.tools_core.execution import ConversationDriver
from script_tools_lib.tools_core.logger import get_logger, progress_level
from script_tools_lib.tools_core.models import ExecutionResult, ToolCallRequest, ToolSelectorLike
from .adapter import OpenAIConversationAdapter
from .models import OpenAIChatbotOptions

logger = get_logger(__name__)

OpenAIToolHandler = Callable[[Any], Awaitable[ExecutionResult]]


class OpenAIAdapter(BaseToolsAdapter):
    """
    Exposes the tool catalog to the OpenAI chat completions API.
    Formats tools as function definitions, executes OpenAI tool calls and
    builds chatbots that run the tool-use loop automatically.
    """

    async def get_openai_tools(self, tool_names: Optional[Iterable[ToolSelectorLike]] = None) -> List[Dict[str, Any]]:
        """
        Returns the selected tools as OpenAI function definitions.

        Args:
            tool_names: Tool names or ``{"name", "version"}`` selectors; all tools when omitted.

        Returns:
            A list of ``{"type": "function", "function": {...}}`` definitions.
        """
        selected = await self.get_tools_by_names(tool_names or ())
        tools = [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.input_schema,
                },
            }
            for tool in selected.values()
        ]
        logger.log(progress_level(self.verbose), "Formatted %d tools for OpenAI", len(tools))
        return tools

    async def create_openai_tool_handler(
        self, tool_names: Optional[Iterable[ToolSelectorLike]] = None
    ) -> OpenAIToolHandler:
        """
        Creates a handler executing OpenAI tool calls.

        The handler accepts a tool call from the SDK or its dict form
        (``{"id", "function": {"name", "arguments"}}``) and never raises.

        Args:
            tool_names: Tools the handler may run; all tools when omitted.

        Returns:
            An async callable returning an ``ExecutionResult``.
        """
        handler = await self.create_tool_handler(tool_names or ())

        async def handle(tool_call: Any) -> ExecutionResult:
            return await handler(self._to_request(tool_call))

        return handle

    async def create_openai_chatbot(
        self,
        client: Any,
        llm_config: Union[OpenAIChatbotOptions, Mapping[str, Any], None] = None,
        tool_names: Optional[Iterable[ToolSelectorLike]] = None,
        *,
        max_tool_turns: int = 10,
        api_timeout: Optional[float] = None,
        max_retries: int = 0,
        parallel_tool_calls: bool = False,
    ) -> ConversationDriver:
        """
        Creates a chatbot that automatically executes the tools the model asks for.

        Args:
            client: An ``AsyncOpenAI`` client.
            llm_config: Model options; ``model`` defaults to ``gpt-4o``.
            tool_names: Tools offered to the model; all tools when omitted.
            max_tool_turns: Maximum tool-calling rounds per invocation.
            api_timeout: Timeout in seconds for one completion request.
            max_retries: Retries for a failed completion request.
            parallel_tool_calls: Run the tool calls of one turn concurrently.

        Returns:
            The conversation driver; call ``invoke`` to chat.
        """
        await self.ensure_initialized()
        logger.info("Creating OpenAI chatbot...")

        selectors = list(tool_names or ())
        tools = await self.get_openai_tools(selectors)
        tool_handler = await self.create_tool_handler(selectors)
        options = (
            llm_config
            if isinstance(llm_config, OpenAIChatbotOptions)
            else OpenAIChatbotOptions.model_validate(dict(llm_config or {}))
        )

        logger.info("Chatbot initialized with %d tools", len(tools))
        logger.info("Chatbot configured with model: %s", options.model)

        return self._create_driver(
            OpenAIConversationAdapter(client, options, tools),
            tool_handler,
            max_tool_turns=max_tool_turns,
            api_timeout=api_timeout,
            max_retries=max_retries,
            parallel_tool_calls=parallel_tool_calls,
        )

    @staticmethod
    def _to_request(tool_call: Any) -> ToolCallRequest:
        if isinstance(tool_call, Mapping):
            function = tool_call.get("function") or {}
            return ToolCallRequest(
                name=function.get("name") or "",
                arguments=function.get("arguments"),
                call_id=tool_call.get("id"),
            )

        return ToolCallRequest(
            name=tool_call.function.name,
            arguments=tool_call.function.arguments,
            call_id=tool_call.id,
        )
