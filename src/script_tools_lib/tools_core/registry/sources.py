"""Tool catalog sources: a local manifest folder or a remote registry."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import MANIFEST_FILENAME, SourceMode
from ..exceptions import ToolFetchError, ToolLoadError
from ..logger import get_logger
from ..models import Tool, ToolSelector
from .fetcher import CatalogFetcher

logger = get_logger(__name__)

ToolsMap = Dict[str, Tool]


class ToolSource(Protocol):
    """
    Protocol for loading tool definitions into a registry.
    """

    mode: SourceMode

    async def load_all(self) -> ToolsMap:
        """Loads the complete catalog, keyed by lower-cased tool name."""
        ...

    async def load_selected(self, selectors: Sequence[ToolSelector]) -> ToolsMap:
        """Loads only the selected tools, keyed by lower-cased tool name."""
        ...


class ManifestVersion(BaseModel):
    """One version entry of a tool in ``tools.json``."""

    model_config = ConfigDict(extra="ignore")

    description: Optional[str] = ""
    input_schema: Optional[Dict[str, Any]] = None
    script_type: Optional[str] = "bash"


class ManifestEntry(BaseModel):
    """One tool record of ``tools.json``."""

    model_config = ConfigDict(extra="ignore")

    name: str
    id: Any = ""
    production_version_name: Optional[str] = ""
    versions: Dict[str, ManifestVersion] = Field(default_factory=dict)

    @field_validator("versions", mode="before")
    @classmethod
    def _versions_default(cls, value: Any) -> Any:
        return {} if value is None else value


class LocalFolderSource:
    """
    Loads tools from a folder holding a ``tools.json`` manifest and script files.

    File system access runs in a worker thread so loading never blocks the
    event loop.

    Script files are not read; each tool records the path of
    ``<name>-<version>.py`` (python) or ``<name>-<version>.sh`` (anything else)
    next to the manifest. Tools with a malformed version map, a missing
    version or a missing script file are logged and skipped.
    """

    mode = SourceMode.LOCAL_FOLDER

    def __init__(self, folder_path: str | Path):
        """
        Args:
            folder_path: Folder containing ``tools.json`` and the scripts.
        """
        self.folder_path = Path(folder_path)

    async def load_all(self) -> ToolsMap:
        """Load the production version of every tool in the manifest.

        Raises:
            ToolLoadError: If the folder or the manifest is missing or unreadable.
        """
        return await asyncio.to_thread(self._load_all_sync)

    def _load_all_sync(self) -> ToolsMap:
        logger.debug("Loading tools from folder: %s", self.folder_path)
        tools: ToolsMap = {}
        for raw in self._read_manifest():
            entry = self._parse_entry(raw)
            if entry is None:
                continue

            version_name = entry.production_version_name or ""
            version = entry.versions.get(version_name)
            if version is None:
                logger.error("Production version %s not found for tool %s", version_name, entry.name)
                continue

            tool = self._build_tool(entry, version_name, version)
            if tool is not None:
                tools[tool.key] = tool
        return tools

    async def load_selected(self, selectors: Sequence[ToolSelector]) -> ToolsMap:
        """Load the requested tools, honouring an explicit version when given.

        Raises:
            ToolLoadError: If the folder or the manifest is missing or unreadable.
        """
        return await asyncio.to_thread(self._load_selected_sync, selectors)

    def _load_selected_sync(self, selectors: Sequence[ToolSelector]) -> ToolsMap:
        logger.debug("Loading %d specific tools from folder...", len(selectors))
        manifest = self._read_manifest()
        tools: ToolsMap = {}

        for selector in selectors:
            raw = next(
                (item for item in manifest if isinstance(item, dict) and str(item.get("name", "")).lower() == selector.key),
                None,
            )
            if raw is None:
                logger.error("Tool not found: %s", selector.name)
                continue

            entry = self._parse_entry(raw)
            if entry is None:
                continue

            if selector.version:
                version_name = selector.version
                version = entry.versions.get(version_name)
                if version is None:
                    logger.error("Version %s not found for tool %s", version_name, selector.name)
                    continue
            else:
                version_name = entry.production_version_name or ""
                version = entry.versions.get(version_name) if version_name else None
                if version is None:
                    logger.error("Production version not found for tool %s", selector.name)
                    continue

            tool = self._build_tool(entry, version_name, version)
            if tool is not None:
                tools[tool.key] = tool
        return tools

    def _read_manifest(self) -> List[Any]:
        if not self.folder_path.exists():
            raise ToolLoadError(f"Folder path does not exist: {self.folder_path}")

        manifest_path = self.folder_path / MANIFEST_FILENAME
        if not manifest_path.exists():
            raise ToolLoadError(f"{MANIFEST_FILENAME} file not found in {self.folder_path}")

        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ToolLoadError(f"Could not read {manifest_path}: {exc}") from exc

        if not isinstance(data, list):
            raise ToolLoadError(f"{MANIFEST_FILENAME} must contain a list of tools")
        return data

    @staticmethod
    def _parse_entry(raw: Any) -> Optional[ManifestEntry]:
        name = raw.get("name", "<unnamed>") if isinstance(raw, dict) else "<unnamed>"
        if isinstance(raw, dict) and raw.get("versions") is not None and not isinstance(raw["versions"], dict):
            logger.error("Versions for tool %s is not a dictionary", name)
            return None
        try:
            return ManifestEntry.model_validate(raw)
        except ValidationError as exc:
            logger.error("Skipping malformed manifest entry for tool %s: %s", name, exc)
            return None

    def _build_tool(self, entry: ManifestEntry, version_name: str, version: ManifestVersion) -> Optional[Tool]:
        extension = ".py" if version.script_type == "python" else ".sh"
        script_path = self.folder_path / f"{entry.name}-{version_name}{extension}"
        if not script_path.exists():
            logger.error("Script file not found: %s", script_path)
            return None

        logger.debug("Loaded tool reference: %s (version: %s)", entry.name, version_name)
        return Tool(
            id=entry.id,
            name=entry.name,
            description=version.description,
            input_schema=version.input_schema,
            script="",
            script_path=str(script_path),
            script_kind=version.script_type,
            version_name=version_name,
        )


class RemoteApiSource:
    """
    Loads tools from a remote registry through a ``CatalogFetcher``.

    Bulk records carry the tool fields at the top level, selective records
    nest them under ``version``. Malformed bodies raise ``ToolFetchError``.
    """

    mode = SourceMode.REMOTE_API

    def __init__(self, fetcher: CatalogFetcher):
        """
        Args:
            fetcher: Transport used to reach the registry.
        """
        self.fetcher = fetcher

    async def load_all(self) -> ToolsMap:
        logger.debug("Fetching tools from API...")
        records = await self.fetcher.fetch_all()
        if not isinstance(records, list):
            raise ToolFetchError("Invalid response format from API")

        tools: ToolsMap = {}
        for record in records:
            tool = self._validate(record)
            tools[tool.key] = tool
        return tools

    async def load_selected(self, selectors: Sequence[ToolSelector]) -> ToolsMap:
        logger.debug("Fetching %d specific tools from API...", len(selectors))
        body = await self.fetcher.fetch_by_names([selector.to_request() for selector in selectors])
        if not isinstance(body, dict) or not isinstance(body.get("tools"), list):
            raise ToolFetchError("Invalid response format from API")

        tools: ToolsMap = {}
        for record in body["tools"]:
            if not isinstance(record, dict):
                raise ToolFetchError("Invalid response format from API")
            version = record.get("version") or {}
            tool = self._validate(
                {
                    "id": record.get("id"),
                    "name": record.get("name"),
                    "description": version.get("description"),
                    "input_schema": version.get("input_schema"),
                    "script": version.get("script"),
                    "script_type": version.get("script_type"),
                    "version_name": version.get("version_name"),
                }
            )
            tools[tool.key] = tool
            logger.debug("Tool fetched: %s (version: %s)", tool.name, tool.version_name or "latest")
        return tools

    @staticmethod
    def _validate(record: Any) -> Tool:
        try:
            return Tool.model_validate(record)
        except ValidationError as exc:
            raise ToolFetchError(f"Malformed tool record from API: {exc}") from exc
