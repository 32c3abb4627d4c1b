"""In-memory tool catalog with refresh and auto-refresh bookkeeping."""

import asyncio
from typing import Dict, Iterable, List

from ..config import DEFAULT_AUTO_REFRESH_COUNT, SourceMode
from ..exceptions import ConfigurationError
from ..logger import get_logger, progress_level
from ..models import Tool, ToolCallStatus, ToolSelector, ToolSelectorLike
from .sources import ToolSource

logger = get_logger(__name__)


class ToolRegistry:
    """
    A central registry holding the tools available to a model.

    The catalog is populated by ``initialize()``, replaced wholesale by
    ``refresh()`` and only read by lookups. Every executed tool call is counted
    through ``record_call()``; once ``auto_refresh_count`` calls have been
    made the catalog is reloaded so registry-side changes are picked up.
    """

    def __init__(self, source: ToolSource, auto_refresh_count: int = DEFAULT_AUTO_REFRESH_COUNT, verbose: bool = False):
        """Initialize the ToolRegistry.

        Args:
            source: Where tools are loaded from. Fixes the registry mode.
            auto_refresh_count: Tool calls before an automatic refresh, 0 disables.
            verbose: Log routine progress at INFO level.

        Raises:
            ConfigurationError: If ``auto_refresh_count`` is negative.
        """
        self._source = source
        self.tools: Dict[str, Tool] = {}
        self.call_count = 0
        self.auto_refresh_count = 0
        self.verbose = verbose
        self.initialized = False
        self._lock = asyncio.Lock()
        self.set_auto_refresh_threshold(auto_refresh_count)

    @property
    def mode(self) -> SourceMode:
        return self._source.mode

    async def initialize(self) -> None:
        """Load the catalog once. Later calls are no-ops."""
        async with self._lock:
            if self.initialized:
                return
            self.tools = await self._source.load_all()
            self.initialized = True

    async def refresh(self) -> None:
        """Reload the complete catalog and reset the call counter.

        Raises:
            ToolLoadError: If the source fails; the previous catalog is kept.
        """
        async with self._lock:
            await self._reload_locked()

    async def _reload_locked(self) -> None:
        # Caller holds self._lock.
        logger.log(progress_level(self.verbose), "Refreshing tools...")
        self.tools = await self._source.load_all()
        self.initialized = True
        self.call_count = 0
        logger.log(progress_level(self.verbose), "Tools refreshed successfully. %d tools available.", len(self.tools))

    def get_all(self) -> Dict[str, Tool]:
        """Returns a copy of the catalog keyed by lower-cased tool name."""
        return dict(self.tools)

    async def get_by_names(self, selectors: Iterable[ToolSelectorLike] = ()) -> Dict[str, Tool]:
        """Look up tools by name and optional version.

        An empty selector list returns the whole catalog. Selective loads go
        to the source; when that fails, whatever is cached for the requested
        names is returned instead of raising.

        Args:
            selectors: Tool names, ``{"name", "version"}`` mappings or selectors.

        Returns:
            The matching tools keyed by lower-cased tool name.
        """
        normalized: List[ToolSelector] = [ToolSelector.coerce(selector) for selector in selectors]
        if not normalized:
            return self.get_all()

        try:
            return await self._source.load_selected(normalized)
        except Exception as e:
            logger.error("Failed to load specific tools: %s", e)
            logger.warning("Falling back to cached tools")
            cached = {}
            for selector in normalized:
                tool = self.tools.get(selector.key)
                if tool is not None:
                    cached[selector.key] = tool
                    logger.debug("Using cached tool: %s", tool.name)
            return cached

    async def record_call(self) -> None:
        """Count one tool call and refresh the catalog when the threshold is reached.

        The increment, the threshold check and the reload happen under the
        registry lock, so parallel calls trigger exactly one reload.
        """
        async with self._lock:
            self.call_count += 1
            if self.auto_refresh_count > 0 and self.call_count >= self.auto_refresh_count:
                logger.log(
                    progress_level(self.verbose), "Auto-refreshing tools after %d tool calls", self.call_count
                )
                await self._reload_locked()

    def set_auto_refresh_threshold(self, count: int) -> None:
        """Set the number of tool calls between automatic refreshes.

        Args:
            count: Number of calls, 0 disables auto-refresh.

        Raises:
            ConfigurationError: If ``count`` is negative.
        """
        if count < 0:
            raise ConfigurationError("Auto-refresh count must be a non-negative number")
        self.auto_refresh_count = count
        if count == 0:
            logger.log(progress_level(self.verbose), "Tool auto-refresh disabled")
        else:
            logger.log(progress_level(self.verbose), "Tool auto-refresh set to occur every %d tool calls", count)

    def get_call_status(self) -> ToolCallStatus:
        next_refresh_in = max(0, self.auto_refresh_count - self.call_count) if self.auto_refresh_count > 0 else -1
        return ToolCallStatus(
            call_count=self.call_count,
            auto_refresh_count=self.auto_refresh_count,
            next_refresh_in=next_refresh_in,
        )

    def script_kinds(self) -> List[str]:
        """Script kinds referenced by the loaded tools."""
        return list(dict.fromkeys(tool.script_kind for tool in self.tools.values()))
