"""Run tool scripts in a child process."""

import asyncio
import contextlib
import json
import os
from typing import Any, Dict, List, Mapping, Optional

from ..environment import EnvironmentProber
from ..exceptions import ToolExecutionError
from ..logger import get_logger, progress_level
from ..models import ExecutionResult, Tool

logger = get_logger(__name__)

_KIND_LABELS = {"python": "Python", "bash": "Bash"}


class ProcessExecutor:
    """
    Executes a tool script with JSON encoded arguments.

    The caller's arguments are merged with an ``openv`` field holding the
    configured environment values. Bash scripts read that JSON from stdin,
    Python scripts receive it as their first positional argument. Whatever
    happens, ``execute`` returns an ``ExecutionResult`` and never raises.
    """

    def __init__(
        self,
        prober: EnvironmentProber,
        environment_variables: Optional[Mapping[str, Any]] = None,
        tool_timeout: float = 180.0,
        verbose: bool = False,
    ):
        """Initialize the executor.

        Args:
            prober: Resolves the runtime command per script kind.
            environment_variables: Values injected into every call as ``openv``.
            tool_timeout: Seconds after which a running script is killed.
            verbose: Log tool inputs and outputs at INFO level.
        """
        self.prober = prober
        self.environment_variables: Dict[str, Any] = dict(environment_variables or {})
        self.tool_timeout = tool_timeout
        self.verbose = verbose

    async def execute(self, tool: Tool, args: Mapping[str, Any]) -> ExecutionResult:
        """Run ``tool`` with ``args``.

        Args:
            tool: The tool to run.
            args: Validated argument object supplied by the model.

        Returns:
            The execution result. Script failures are reported in ``output``,
            an unsupported script kind in ``error``.
        """
        if tool.script_kind not in _KIND_LABELS:
            return ExecutionResult(error=f"Unsupported script type: {tool.script_kind}")

        label = _KIND_LABELS[tool.script_kind]
        try:
            check = await self.prober.probe(tool.script_kind)
            if not check.valid:
                msg = f"Environment error: {check.error}"
                logger.error(msg)
                return ExecutionResult(output=msg)

            payload = json.dumps({**args, "openv": dict(self.environment_variables)})
            if tool.script_kind == "python":
                command, stdin_data = self._python_command(tool, check.executor, payload), None
            else:
                command, stdin_data = self._bash_command(tool, check.executor), payload

            return await self._run(tool, label, command, stdin_data)
        except Exception as e:
            msg = f"Error executing {label} tool {tool.name}: {e}"
            logger.error(msg)
            return ExecutionResult(output=msg)

    def _python_command(self, tool: Tool, executor: str, payload: str) -> List[str]:
        if tool.script_path and os.path.exists(tool.script_path):
            logger.log(progress_level(self.verbose), "Executing Python script from: %s", tool.script_path)
            return [executor, tool.script_path, payload]
        if tool.script:
            return [executor, "-c", tool.script, payload]
        if tool.script_path:
            raise ToolExecutionError(f"Script file not found: {tool.script_path}")
        raise ToolExecutionError("No script content or valid script path provided")

    def _bash_command(self, tool: Tool, executor: str) -> List[str]:
        if tool.script_path and os.path.exists(tool.script_path):
            logger.log(progress_level(self.verbose), "Executing bash script from: %s", tool.script_path)
            return [executor, tool.script_path]
        if tool.script_path and not tool.script:
            raise ToolExecutionError(f"Script file not found: {tool.script_path}")
        return [executor, "-c", tool.script]

    async def _run(self, tool: Tool, label: str, command: List[str], stdin_data: Optional[str]) -> ExecutionResult:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(stdin_data.encode("utf-8") if stdin_data is not None else None),
                timeout=self.tool_timeout,
            )
        except asyncio.TimeoutError:
            raise ToolExecutionError(f"timed out after {self.tool_timeout} seconds")
        finally:
            # Also reached on cancellation; the child must not outlive the call.
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        output = stdout.strip()
        if stderr.strip():
            if output:
                output += "\n\n"
            output += stderr.strip()

        if process.returncode != 0:
            reason = stderr.strip() or f"Process exited with code {process.returncode}"
            logger.error("Tool %s error: %s execution failed. %s", tool.name, label, reason)

        if stderr:
            logger.log(progress_level(self.verbose), "Tool %s stderr: %s", tool.name, stderr)
        logger.log(progress_level(self.verbose), "Tool %s output: %s", tool.name, stdout)

        # Non-zero exits still report through output.
        return ExecutionResult(output=output)
