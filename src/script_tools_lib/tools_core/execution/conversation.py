"""Conversation state machine shared by all provider bindings."""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, Callable, Coroutine, List, Optional, Sequence, Tuple

from ..exceptions import ModelTimeoutError
from ..logger import get_logger, progress_level
from ..models import ChatbotResult, ExecutionResult, ToolCallRequest
from .adapter import ConversationAdapter
from .tool_invoker import ToolHandler

logger = get_logger(__name__)


class ConversationState(str, Enum):
    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    INSPECTING_RESPONSE = "inspecting_response"
    EXECUTING_TOOLS = "executing_tools"
    FAILED = "failed"


class ConversationDriver:
    """Drives a multi-turn conversation in which the model may call tools.

    The driver owns a linear message history. Each ``invoke`` appends the user
    message, asks the model, executes every requested tool call, appends the
    results tagged with their call id and asks again, until the model answers
    with plain text. Model failures never escape ``invoke``: they are rendered
    as an assistant message and returned as the answer.

    Invocations on one driver are serialized; use one driver per conversation.
    """

    def __init__(
        self,
        adapter: ConversationAdapter,
        tool_handler: ToolHandler,
        *,
        max_tool_turns: int = 10,
        api_timeout: Optional[float] = None,
        max_retries: int = 0,
        base_retry_delay: float = 1.0,
        parallel_tool_calls: bool = False,
        verbose: bool = False,
    ) -> None:
        """Initialize the conversation driver.

        Args:
            adapter: Provider-specific message and response translation.
            tool_handler: Executes normalized tool call requests.
            max_tool_turns: Maximum number of tool-calling rounds per ``invoke``.
            api_timeout: Timeout in seconds for one model request, None waits indefinitely.
            max_retries: Retries for a failed model request.
            base_retry_delay: Initial backoff delay in seconds, doubled per retry.
            parallel_tool_calls: Run the tool calls of one turn concurrently.
            verbose: Log routine progress at INFO level.
        """
        self.adapter = adapter
        self.tool_handler = tool_handler
        self.max_tool_turns = max_tool_turns
        self.api_timeout = api_timeout
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay
        self.parallel_tool_calls = parallel_tool_calls
        self.verbose = verbose
        self.state = ConversationState.IDLE
        self._messages: List[Any] = []
        self._lock = asyncio.Lock()

    async def invoke(self, user_input: Any) -> ChatbotResult:
        """Send a user message and run the tool-use loop until a text answer arrives.

        Args:
            user_input: A plain string or a provider-specific content structure.

        Returns:
            The answer text and a copy of the conversation history.
        """
        async with self._lock:
            logger.log(progress_level(self.verbose), "Processing user message")
            self._messages.append(self.adapter.build_user_message(user_input))
            snapshot = list(self._messages)

            try:
                response = await self._call_model(snapshot)
                text, exceeded = await self._process_response(response)
            except Exception as e:
                self.state = ConversationState.FAILED
                error_message = self._format_api_error(e)
                logger.error(error_message)
                self._messages.append(self.adapter.build_text_message(error_message))
                return ChatbotResult(text=error_message, messages=list(self._messages))

            self.state = ConversationState.IDLE
            return ChatbotResult(text=text, messages=list(self._messages), max_depth_exceeded=exceeded)

    def reset_conversation(self) -> None:
        """Clear the conversation history in place."""
        logger.log(progress_level(self.verbose), "Conversation history reset")
        self._messages.clear()
        self.state = ConversationState.IDLE

    def get_conversation_history(self) -> List[Any]:
        """Return a copy of the conversation history."""
        logger.debug("Retrieved conversation history (%d messages)", len(self._messages))
        return list(self._messages)

    async def _process_response(self, response: Any) -> Tuple[str, bool]:
        """Run the inspect → execute → continue loop.

        Returns:
            The collected text and whether the tool-use depth limit was hit.
        """
        collected: List[str] = []
        tool_turns = 0

        while True:
            self.state = ConversationState.INSPECTING_RESPONSE
            tool_calls = list(self.adapter.get_tool_calls(response))
            text = self.adapter.get_text(response)

            if not tool_calls:
                self._messages.append(self.adapter.build_text_message(text))
                collected.append(text)
                logger.log(progress_level(self.verbose), "Received text response (%d chars)", len(text))
                return "".join(collected), False

            if tool_turns >= self.max_tool_turns:
                msg = f"Max tool-use depth exceeded ({self.max_tool_turns} turns)."
                logger.warning(msg)
                self._messages.append(self.adapter.build_text_message(msg))
                collected.append(msg)
                return "".join(collected), True

            tool_turns += 1
            if text:
                collected.append(text)
            logger.log(
                progress_level(self.verbose),
                "Turn %d/%d: detected %d tool call(s)",
                tool_turns,
                self.max_tool_turns,
                len(tool_calls),
            )

            self._messages.append(self.adapter.build_assistant_message(response))

            self.state = ConversationState.EXECUTING_TOOLS
            results = await self._execute_tool_calls(tool_calls)
            for request, result in zip(tool_calls, results):
                self._messages.append(self.adapter.build_tool_result_message(request, result))

            logger.log(progress_level(self.verbose), "Requesting continuation after tool use")
            response = await self._call_model(list(self._messages))

    async def _execute_tool_calls(self, tool_calls: Sequence[ToolCallRequest]) -> List[ExecutionResult]:
        if self.parallel_tool_calls:
            # gather keeps request order
            return list(await asyncio.gather(*(self._handle_tool_call(tc) for tc in tool_calls)))
        return [await self._handle_tool_call(tc) for tc in tool_calls]

    async def _handle_tool_call(self, tool_call: ToolCallRequest) -> ExecutionResult:
        logger.log(progress_level(self.verbose), "Executing tool call: %s", tool_call.name)
        try:
            return await self.tool_handler(tool_call)
        except Exception as e:
            logger.error("Tool handler error: %s", e)
            return ExecutionResult(error=f"Failed to execute tool: {e}")

    async def _call_model(self, messages: List[Any]) -> Any:
        self.state = ConversationState.AWAITING_MODEL
        logger.log(progress_level(self.verbose), "Calling %s API", self.adapter.provider_label)
        return await self._execute_with_retry(self._create_with_timeout, messages)

    async def _create_with_timeout(self, messages: List[Any]) -> Any:
        if self.api_timeout is None:
            return await self.adapter.create(messages)
        try:
            return await asyncio.wait_for(self.adapter.create(messages), timeout=self.api_timeout)
        except asyncio.TimeoutError as exc:
            raise ModelTimeoutError(f"request timed out after {self.api_timeout} seconds") from exc

    async def _execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
    ) -> Any:
        """
        Executes a function with retry logic.

        Args:
            func: The asynchronous function to execute.
            *args: Positional arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            Exception: The last encountered exception if all retries fail.
        """
        delay = self.base_retry_delay
        for attempt in range(self.max_retries + 1):
            try:
                return await func(*args)
            except Exception as e:
                if attempt == self.max_retries:
                    raise

                logger.warning(f"API Error (Retry: {attempt + 1}/{self.max_retries}): {e}. Waiting {delay}s...")
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

    def _format_api_error(self, error: Exception) -> str:
        label = self.adapter.provider_label
        status = getattr(error, "status_code", None) or getattr(error, "status", None)
        message = getattr(error, "message", None) or str(error)

        if isinstance(status, int):
            formatted = f"{label} API Error ({status}): {message}"
            details = getattr(error, "body", None)
            if details:
                formatted += f"\nDetails: {json.dumps(details, default=str)}"
            return formatted

        return f"Error in {label} API: {message}"
