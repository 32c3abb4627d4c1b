"""Adapter configuration and tool source mode resolution."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError

API_KEY_PREFIX = "apik_"
DEFAULT_API_URL = "https://s8ka4ekkbp.us-east-1.awsapprunner.com"
DEFAULT_AUTO_REFRESH_COUNT = 100
MANIFEST_FILENAME = "tools.json"


class SourceMode(str, Enum):
    """Where the tool catalog comes from. Chosen once at construction."""

    LOCAL_FOLDER = "local-folder"
    REMOTE_API = "remote-api"


class AdapterConfig(BaseModel):
    """
    Validated construction options of a tools adapter.

    ``source_locator`` is either an API key (recognised by the ``apik_`` prefix)
    or a folder path. An explicit ``folder_path`` always wins over a key-shaped
    locator and switches the adapter to local mode.

    Attributes:
        source_locator: API key or folder path.
        api_url: Base URL of the remote tool registry.
        folder_path: Explicit local tools folder, overrides the locator.
        auto_refresh_count: Tool calls before the catalog is reloaded, 0 disables.
        skip_environment_check: Skip probing runtimes during initialization.
        verbose: Log routine progress at INFO instead of DEBUG.
        tool_timeout: Maximum seconds a single tool script may run.
        api_timeout: Maximum seconds for a remote catalog request.
    """

    source_locator: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    folder_path: Optional[str] = None
    auto_refresh_count: int = Field(default=DEFAULT_AUTO_REFRESH_COUNT, ge=0)
    skip_environment_check: bool = False
    verbose: bool = False
    tool_timeout: float = Field(default=180.0, gt=0)
    api_timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _require_locator(self) -> "AdapterConfig":
        if not self.folder_path and not self.source_locator:
            raise ValueError("Either apiKey or folderPath must be provided")
        return self

    @property
    def mode(self) -> SourceMode:
        if self.folder_path:
            return SourceMode.LOCAL_FOLDER
        if self.source_locator and self.source_locator.startswith(API_KEY_PREFIX):
            return SourceMode.REMOTE_API
        return SourceMode.LOCAL_FOLDER

    @property
    def api_key(self) -> Optional[str]:
        if self.mode is SourceMode.REMOTE_API:
            return self.source_locator
        return None

    @property
    def resolved_folder(self) -> Optional[str]:
        if self.mode is SourceMode.LOCAL_FOLDER:
            return self.folder_path or self.source_locator
        return None

    @classmethod
    def build(cls, **options: Any) -> "AdapterConfig":
        """Validate options, converting validation failures to ``ConfigurationError``.

        ``None`` values are treated as "not given" so callers can forward
        optional keyword arguments untouched.
        """
        given = {key: value for key, value in options.items() if value is not None}
        try:
            return cls(**given)
        except ValidationError as exc:
            messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())
            raise ConfigurationError(f"Invalid adapter configuration: {messages}") from exc
