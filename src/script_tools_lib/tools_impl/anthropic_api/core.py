from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from script_tools_lib.tools_core.base import BaseToolsAdapter
from script_tools_lib.tools_core.execution import ConversationDriver
from script_tools_lib.tools_core.logger import get_logger, progress_level
from script_tools_lib.tools_core.models import ExecutionResult, ToolCallRequest, ToolSelectorLike
from .adapter import AnthropicConversationAdapter
from .models import AnthropicChatbotOptions

logger = get_logger(__name__)

AnthropicToolHandler = Callable[[Any], Awaitable[ExecutionResult]]


class AnthropicAdapter(BaseToolsAdapter):
    """
    Exposes the tool catalog to the Anthropic messages API.
    """

    async def get_anthropic_tools(
        self, tool_names: Optional[Iterable[ToolSelectorLike]] = None
    ) -> List[Dict[str, Any]]:
        """
        Returns the selected tools in Anthropic format.

        Args:
            tool_names: Tool names or ``{"name", "version"}`` selectors; all tools when omitted.

        Returns:
            A list of ``{"name", "description", "input_schema"}`` definitions.
        """
        selected = await self.get_tools_by_names(tool_names or ())
        tools = [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_schema,
            }
            for tool in selected.values()
        ]
        logger.log(progress_level(self.verbose), "Formatted %d tools for Anthropic", len(tools))
        return tools

    async def create_anthropic_tool_handler(
        self, tool_names: Optional[Iterable[ToolSelectorLike]] = None
    ) -> AnthropicToolHandler:
        """
        Creates a handler executing Anthropic ``tool_use`` blocks.

        The handler accepts an SDK block or a dict with ``id``, ``name`` and ``input``.
        """
        handler = await self.create_tool_handler(tool_names or ())

        async def handle(tool_use: Any) -> ExecutionResult:
            return await handler(self._to_request(tool_use))

        return handle

    async def create_anthropic_chatbot(
        self,
        client: Any,
        llm_config: Union[AnthropicChatbotOptions, Mapping[str, Any], None] = None,
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
            client: An ``AsyncAnthropic`` client.
            llm_config: Model options; defaults to ``claude-3-7-sonnet-20250219`` at temperature 0.7.
            tool_names: Tools offered to the model; all tools when omitted.
            max_tool_turns: Maximum tool-calling rounds per invocation.
            api_timeout: Timeout in seconds for one messages request.
            max_retries: Retries for a failed messages request.
            parallel_tool_calls: Run the tool calls of one turn concurrently.

        Returns:
            The conversation driver; call ``invoke`` to chat.
        """
        await self.ensure_initialized()
        logger.info("Creating Anthropic chatbot...")

        selectors = list(tool_names or ())
        tools = await self.get_anthropic_tools(selectors)
        tool_handler = await self.create_tool_handler(selectors)
        options = (
            llm_config
            if isinstance(llm_config, AnthropicChatbotOptions)
            else AnthropicChatbotOptions.model_validate(dict(llm_config or {}))
        )

        logger.info("Chatbot initialized with %d tools", len(tools))
        logger.info("Chatbot configured with model: %s", options.model)

        return self._create_driver(
            AnthropicConversationAdapter(client, options, tools),
            tool_handler,
            max_tool_turns=max_tool_turns,
            api_timeout=api_timeout,
            max_retries=max_retries,
            parallel_tool_calls=parallel_tool_calls,
        )

    @staticmethod
    def _to_request(tool_use: Any) -> ToolCallRequest:
        if isinstance(tool_use, Mapping):
            return ToolCallRequest(
                name=tool_use.get("name") or "",
                arguments=tool_use.get("input"),
                call_id=tool_use.get("id"),
            )
        return ToolCallRequest(name=tool_use.name, arguments=tool_use.input, call_id=tool_use.id)
