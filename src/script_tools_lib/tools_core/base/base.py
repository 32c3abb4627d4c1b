"""Shared composition root for all provider bindings."""

import asyncio
from types import TracebackType
from typing import Any, Dict, Iterable, Optional, Type

from ..config import AdapterConfig, SourceMode
from ..environment import EnvironmentProber
from ..execution import ConversationAdapter, ConversationDriver, ProcessExecutor, ToolExecutor, ToolHandler, ToolInvoker
from ..logger import get_logger, progress_level
from ..models import EnvironmentCheck, Tool, ToolCallStatus, ToolSelectorLike
from ..registry import CatalogFetcher, HttpCatalogFetcher, LocalFolderSource, RemoteApiSource, ToolRegistry, ToolSource

logger = get_logger(__name__)


class BaseToolsAdapter:
    """
    Base class of the provider bindings.

    Owns one tool registry, one environment prober and one process executor.
    Nothing is shared between adapter instances, so independent adapters can
    point at different catalogs. Provider subclasses add the tool formatting,
    tool-call handling and chatbot factories for their API.
    """

    def __init__(
        self,
        source_locator: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        folder_path: Optional[str] = None,
        auto_refresh_count: Optional[int] = None,
        skip_environment_check: Optional[bool] = None,
        verbose: Optional[bool] = None,
        tool_timeout: Optional[float] = None,
        api_timeout: Optional[float] = None,
        fetcher: Optional[CatalogFetcher] = None,
        prober: Optional[EnvironmentProber] = None,
    ):
        """
        Initializes the adapter. Loading happens lazily or through ``initialize()``.

        Args:
            source_locator: An API key starting with ``apik_`` or a tools folder path.
            api_url: Base URL of the remote registry.
            folder_path: Explicit tools folder; wins over a key-shaped locator.
            auto_refresh_count: Tool calls before the catalog is reloaded, 0 disables.
            skip_environment_check: Skip probing runtimes during initialization.
            verbose: Log routine progress at INFO instead of DEBUG.
            tool_timeout: Maximum seconds a single tool script may run.
            api_timeout: Maximum seconds for a remote catalog request.
            fetcher: Custom transport for the remote registry.
            prober: Custom environment prober.

        Raises:
            ConfigurationError: If no locator is given or an option is out of range.
        """
        self.config = AdapterConfig.build(
            source_locator=source_locator,
            api_url=api_url,
            folder_path=folder_path,
            auto_refresh_count=auto_refresh_count,
            skip_environment_check=skip_environment_check,
            verbose=verbose,
            tool_timeout=tool_timeout,
            api_timeout=api_timeout,
        )
        self.verbose = self.config.verbose
        self.prober = prober or EnvironmentProber()
        self.registry = ToolRegistry(
            self._build_source(fetcher),
            auto_refresh_count=self.config.auto_refresh_count,
            verbose=self.verbose,
        )
        self.executor = ProcessExecutor(self.prober, tool_timeout=self.config.tool_timeout, verbose=self.verbose)
        self.invoker = ToolInvoker(self.registry, self.executor, verbose=self.verbose)
        self.initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def mode(self) -> SourceMode:
        return self.config.mode

    def _build_source(self, fetcher: Optional[CatalogFetcher]) -> ToolSource:
        if self.config.mode is SourceMode.LOCAL_FOLDER:
            return LocalFolderSource(self.config.resolved_folder or "")
        if fetcher is None:
            fetcher = HttpCatalogFetcher(self.config.api_url, self.config.api_key or "", self.config.api_timeout)
        return RemoteApiSource(fetcher)

    async def __aenter__(self) -> "BaseToolsAdapter":
        await self.initialize()
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        return None

    async def initialize(self) -> None:
        """Load the tool catalog and probe the runtimes the tools need.

        Calling this more than once is a no-op.

        Raises:
            ToolLoadError: If the catalog cannot be loaded.
        """
        async with self._init_lock:
            if self.initialized:
                return

            try:
                logger.info("Initializing tools adapter...")
                await self.registry.initialize()

                if not self.config.skip_environment_check:
                    await self.recheck_environment()
                    self._log_environment_status()

                self.initialized = True
                logger.info("Initialization complete. %d tools available.", len(self.registry.tools))
            except Exception as e:
                logger.error(f"Failed to initialize tools: {e}")
                raise

    async def ensure_initialized(self) -> None:
        if not self.initialized:
            await self.initialize()

    async def refresh_tools(self) -> None:
        """Reload the catalog from the folder or the API and reset the call counter."""
        try:
            await self.registry.refresh()
        except Exception as e:
            logger.error(f"Failed to refresh tools: {e}")
            raise

    async def get_tools_by_names(self, tool_names: Iterable[ToolSelectorLike] = ()) -> Dict[str, Tool]:
        """Return the selected tools, or every tool when no names are given.

        Args:
            tool_names: Tool names or ``{"name", "version"}`` selectors.

        Returns:
            Matching tools keyed by lower-cased tool name.
        """
        await self.ensure_initialized()
        return await self.registry.get_by_names(tool_names)

    async def check_environment(self, script_kind: str) -> EnvironmentCheck:
        return await self.prober.probe(script_kind)

    async def check_all_environments(self) -> Dict[str, EnvironmentCheck]:
        return await self.prober.probe_all()

    async def recheck_environment(self, force_refresh: bool = True) -> Dict[str, EnvironmentCheck]:
        """Probe every script kind used by the loaded tools plus the built-in kinds.

        Args:
            force_refresh: Drop cached results before probing.

        Returns:
            Environment checks by script kind.
        """
        kinds = self.registry.script_kinds()
        if force_refresh:
            return await self.prober.force_reprobe(kinds)

        wanted = list(dict.fromkeys([*kinds, *self.prober.builtin_kinds]))
        return {kind: await self.prober.probe(kind) for kind in wanted}

    def get_environment_status(self) -> Dict[str, EnvironmentCheck]:
        return self.prober.status()

    def _log_environment_status(self) -> None:
        logger.info("=== Environment Status ===")
        for check in self.prober.status().values():
            if check.valid:
                logger.info("%s: Available (using %s)", check.script_kind, check.executor)
            else:
                logger.warning("%s: Not available - %s", check.script_kind, check.error)
        logger.info("==========================")

    def set_environment_variables(self, variables: Dict[str, Any]) -> None:
        """Replace the values injected into every tool call as ``openv``."""
        self.executor.environment_variables = dict(variables)
        logger.log(
            progress_level(self.verbose), "Set %d environment variables for tool execution", len(variables)
        )

    def add_environment_variable(self, name: str, value: Any) -> None:
        self.executor.environment_variables[name] = value
        logger.log(progress_level(self.verbose), "Added environment variable: %s", name)

    def get_tool_call_status(self) -> ToolCallStatus:
        return self.registry.get_call_status()

    def set_auto_refresh_count(self, count: int) -> None:
        """Set the number of tool calls before an automatic refresh (0 disables).

        Raises:
            ConfigurationError: If ``count`` is negative.
        """
        self.registry.set_auto_refresh_threshold(count)
        self.config.auto_refresh_count = count

    def set_verbose(self, enabled: bool) -> None:
        self.verbose = enabled
        self.config.verbose = enabled
        for component in (self.registry, self.executor, self.invoker):
            component.verbose = enabled
        logger.info("Verbose logging %s", "enabled" if enabled else "disabled")

    def create_tool_executor(self, tool: Tool) -> ToolExecutor:
        """Create the execution callable for one tool."""
        return self.invoker.create_executor(tool)

    async def create_tool_handler(self, tool_names: Iterable[ToolSelectorLike] = ()) -> ToolHandler:
        """Create a provider-independent handler for normalized tool call requests."""
        await self.ensure_initialized()
        return await self.invoker.create_tool_handler(tool_names)

    def _create_driver(
        self, adapter: ConversationAdapter, tool_handler: ToolHandler, **driver_options: Any
    ) -> ConversationDriver:
        return ConversationDriver(adapter, tool_handler, verbose=self.verbose, **driver_options)
