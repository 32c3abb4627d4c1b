"""Tool catalog, its sources and the remote registry transport."""

from .base import ToolRegistry
from .fetcher import CatalogFetcher, HttpCatalogFetcher
from .sources import ToolSource, LocalFolderSource, RemoteApiSource, ToolsMap

__all__ = [
    "ToolRegistry",
    "CatalogFetcher",
    "HttpCatalogFetcher",
    "ToolSource",
    "LocalFolderSource",
    "RemoteApiSource",
    "ToolsMap",
]
