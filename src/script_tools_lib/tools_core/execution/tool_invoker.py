"""Provider-independent entry point for executing tools."""

import json
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping

from ..exceptions import ToolExecutionError, ToolNotFoundError
from ..logger import get_logger, progress_level
from ..models import ExecutionResult, Tool, ToolCallRequest, ToolSelectorLike
from ..registry import ToolRegistry
from .process_executor import ProcessExecutor

logger = get_logger(__name__)

ToolExecutor = Callable[[Mapping[str, Any]], Awaitable[ExecutionResult]]
ToolHandler = Callable[[ToolCallRequest], Awaitable[ExecutionResult]]


class ToolInvoker:
    """
    Binds the registry and the process executor behind a single callable per tool.

    Callers never branch on script kind: ``create_executor`` handles the
    auto-refresh bookkeeping and dispatches to the process executor, and
    ``create_tool_handler`` resolves a normalized tool call to the matching
    executor.
    """

    def __init__(self, registry: ToolRegistry, executor: ProcessExecutor, verbose: bool = False):
        self.registry = registry
        self.executor = executor
        self.verbose = verbose

    def create_executor(self, tool: Tool) -> ToolExecutor:
        """Create the execution callable for one tool.

        Args:
            tool: The tool to bind.

        Returns:
            An async callable taking the argument object and returning an ``ExecutionResult``.
        """

        async def execute(args: Mapping[str, Any]) -> ExecutionResult:
            try:
                await self.registry.record_call()
                logger.log(progress_level(self.verbose), "Executing tool: %s", tool.name)
                if self.verbose:
                    logger.info("Tool inputs: %s", json.dumps(args, default=str))
                return await self.executor.execute(tool, args)
            except Exception as e:
                msg = f"Error executing tool {tool.name}: {e}"
                logger.error(msg)
                return ExecutionResult(error=msg)

        return execute

    async def create_tool_handler(self, selectors: Iterable[ToolSelectorLike] = ()) -> ToolHandler:
        """Create a handler resolving tool call requests to tool executors.

        Args:
            selectors: Tools the handler may run; empty means every tool.

        Returns:
            An async callable taking a ``ToolCallRequest``.
        """
        tools = await self.registry.get_by_names(selectors)
        executors: Dict[str, ToolExecutor] = {}
        for key, tool in tools.items():
            executors[key] = self.create_executor(tool)
            logger.debug("Created executor for tool: %s", tool.name)

        logger.log(progress_level(self.verbose), "Tool handler created for %d tools", len(executors))

        async def handle(request: ToolCallRequest) -> ExecutionResult:
            logger.log(progress_level(self.verbose), "Model requested tool: %s", request.name)
            try:
                args = self._normalize_arguments(request.arguments)
                executor = self._resolve(executors, request.name)
            except (ToolExecutionError, ToolNotFoundError) as exc:
                msg = str(exc)
                logger.error(msg)
                return ExecutionResult(error=msg)

            result = await executor(args)
            if result.error:
                logger.error("Tool %s execution failed: %s", request.name, result.error)
                return ExecutionResult(
                    error=f"Something went wrong with the tool execution. Details: {result.error}"
                )

            logger.log(progress_level(self.verbose), "Tool %s executed successfully", request.name)
            return result

        return handle

    @staticmethod
    def _resolve(executors: Mapping[str, ToolExecutor], name: str) -> ToolExecutor:
        executor = executors.get(name.lower())
        if executor is None:
            raise ToolNotFoundError(f"Tool {name} not found in available tools")
        return executor

    @staticmethod
    def _normalize_arguments(raw_args: Any) -> Dict[str, Any]:
        """Normalize tool arguments into a dictionary.

        Handles JSON strings, mappings, or None values.

        Raises:
            ToolExecutionError: If arguments cannot be parsed or are not an object.
        """
        if raw_args is None or raw_args == "":
            return {}

        if isinstance(raw_args, Mapping):
            return dict(raw_args)

        if isinstance(raw_args, str):
            try:
                parsed = json.loads(raw_args)
            except json.JSONDecodeError as exc:
                raise ToolExecutionError(f"Failed to parse tool arguments: {exc}") from exc

            if parsed is None:
                return {}
            if not isinstance(parsed, dict):
                raise ToolExecutionError("Failed to parse tool arguments: arguments must decode to a JSON object.")
            return parsed

        raise ToolExecutionError(f"Failed to parse tool arguments: unsupported type {type(raw_args).__name__}")
