"""HTTP access to the remote tool registry."""

import asyncio
from typing import Any, Dict, List, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from ..exceptions import ToolFetchError
from ..logger import get_logger

logger = get_logger(__name__)


class CatalogFetcher(Protocol):
    """
    Protocol for the transport that talks to a remote tool registry.
    """

    async def fetch_all(self) -> Any:
        """Returns the decoded body of the bulk "list tools" call."""
        ...

    async def fetch_by_names(self, selectors: Sequence[Dict[str, str]]) -> Any:
        """Returns the decoded body of the "get individual tools" call."""
        ...


class HttpCatalogFetcher:
    """Default ``CatalogFetcher`` backed by an aiohttp client session per request."""

    def __init__(self, api_url: str, api_key: str, timeout: float = 30.0):
        """Initialize the fetcher.

        Args:
            api_url: Base URL of the registry.
            api_key: Key sent in the ``x-api-key`` header.
            timeout: Total timeout in seconds for one request.
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    @property
    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key or ""}

    async def fetch_all(self) -> List[Any]:
        """Fetch the full tool catalog.

        Returns:
            The list found under the body's ``data`` key (empty when absent).

        Raises:
            ToolFetchError: On transport failures, non-2xx responses or malformed bodies.
        """
        body = await self._request("GET", "/api/get-tools")
        if not isinstance(body, dict):
            raise ToolFetchError("Invalid response format from API")
        return body.get("data") or []

    async def fetch_by_names(self, selectors: Sequence[Dict[str, str]]) -> Any:
        """Fetch a batch of tools by name and optional version.

        Args:
            selectors: ``{"name": ..., "version": ...}`` entries.

        Returns:
            The decoded response body.
        """
        return await self._request("POST", "/api/get-individual-tools", json={"tools": list(selectors)})

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.api_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            async with ClientSession(timeout=ClientTimeout(total=self.timeout)) as session:
                async with session.request(method, url, headers=self._headers, **kwargs) as response:
                    if not 200 <= response.status < 300:
                        raise ToolFetchError(f"API request failed with status {response.status}")
                    return await response.json(content_type=None)
        except ToolFetchError:
            raise
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise ToolFetchError(f"Request to {url} failed: {exc}") from exc
