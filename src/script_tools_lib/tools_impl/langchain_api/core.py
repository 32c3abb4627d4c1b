import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.tools import StructuredTool, ToolException
from pydantic import TypeAdapter

from script_tools_lib.tools_core.base import BaseToolsAdapter
from script_tools_lib.tools_core.execution import ConversationDriver
from script_tools_lib.tools_core.logger import get_logger, progress_level
from script_tools_lib.tools_core.models import ExecutionResult, Tool, ToolCallRequest, ToolSelectorLike
from .adapter import LangChainConversationAdapter
from .schema import JsonSchemaModelFactory

logger = get_logger(__name__)

LangChainToolHandler = Callable[[Mapping[str, Any]], Awaitable[ExecutionResult]]

_JSON_ARGS = TypeAdapter(Dict[str, Any])


class LangChainAdapter(BaseToolsAdapter):
    """
    Exposes the tool catalog as LangChain ``StructuredTool`` objects.

    Tool failures are raised as ``ToolException``; the tools are built with
    ``handle_tool_error=True`` so agents receive the message as the tool output.
    """

    async def get_langchain_tools(self, tool_names: Optional[Iterable[ToolSelectorLike]] = None) -> List[StructuredTool]:
        """
        Converts the selected tools to LangChain tools.

        Args:
            tool_names: Tool names or ``{"name", "version"}`` selectors; all tools when omitted.

        Returns:
            One ``StructuredTool`` per selected tool.

        Raises:
            ToolValidationError: If a tool schema contains recursive references.
        """
        logger.log(progress_level(self.verbose), "Converting tools to LangChain format...")
        selected = await self.get_tools_by_names(tool_names or ())

        tools = [self._to_structured_tool(tool) for tool in selected.values()]
        logger.log(progress_level(self.verbose), "Converted %d tools to LangChain format", len(tools))
        return tools

    def _to_structured_tool(self, tool: Tool) -> StructuredTool:
        executor = self.create_tool_executor(tool)
        args_schema = JsonSchemaModelFactory.build_model(tool.input_schema, self._model_name(tool.name))

        async def run(**kwargs: Any) -> str:
            # validated values may hold datetimes or nested models
            result = await executor(_JSON_ARGS.dump_python(kwargs, mode="json"))
            if result.error:
                raise ToolException(result.error)
            return result.output or ""

        logger.debug("Converted tool to LangChain format: %s", tool.name)
        return StructuredTool.from_function(
            coroutine=run,
            name=tool.name,
            description=tool.description or tool.name,
            args_schema=args_schema,
            handle_tool_error=True,
        )

    async def create_langchain_tool_handler(
        self, tool_names: Optional[Iterable[ToolSelectorLike]] = None
    ) -> LangChainToolHandler:
        """
        Creates a handler executing LangChain tool calls (``{"name", "args", "id"}``).
        """
        handler = await self.create_tool_handler(tool_names or ())

        async def handle(tool_call: Mapping[str, Any]) -> ExecutionResult:
            request = ToolCallRequest(
                name=tool_call.get("name") or "",
                arguments=tool_call.get("args"),
                call_id=tool_call.get("id"),
            )
            return await handler(request)

        return handle

    async def create_langchain_chatbot(
        self,
        chat_model: BaseChatModel,
        system_prompt: Optional[str] = None,
        tool_names: Optional[Iterable[ToolSelectorLike]] = None,
        *,
        max_tool_turns: int = 10,
        api_timeout: Optional[float] = None,
        max_retries: int = 0,
        parallel_tool_calls: bool = False,
    ) -> ConversationDriver:
        """
        Creates a chatbot driving a LangChain chat model bound to the tools.

        Args:
            chat_model: Any chat model implementing ``bind_tools``.
            system_prompt: System prompt sent ahead of every request.
            tool_names: Tools offered to the model; all tools when omitted.
            max_tool_turns: Maximum tool-calling rounds per invocation.
            api_timeout: Timeout in seconds for one model call.
            max_retries: Retries for a failed model call.
            parallel_tool_calls: Run the tool calls of one turn concurrently.

        Returns:
            The conversation driver; call ``invoke`` to chat.
        """
        await self.ensure_initialized()
        logger.info("Creating LangChain chatbot...")

        selectors = list(tool_names or ())
        tools = await self.get_langchain_tools(selectors)
        tool_handler = await self.create_tool_handler(selectors)
        logger.info("Chatbot initialized with %d tools", len(tools))

        return self._create_driver(
            LangChainConversationAdapter(chat_model, tools, system_prompt),
            tool_handler,
            max_tool_turns=max_tool_turns,
            api_timeout=api_timeout,
            max_retries=max_retries,
            parallel_tool_calls=parallel_tool_calls,
        )

    @staticmethod
    def _model_name(tool_name: str) -> str:
        parts = [p for p in re.split(r"[^0-9A-Za-z]+", tool_name) if p]
        return "".join(p[:1].upper() + p[1:] for p in parts) + "Args"
