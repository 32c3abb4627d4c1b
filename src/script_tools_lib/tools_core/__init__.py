"""Public exports for the provider-independent tool loading and execution core."""

from .base import BaseToolsAdapter
from .config import AdapterConfig, SourceMode, API_KEY_PREFIX, DEFAULT_API_URL, DEFAULT_AUTO_REFRESH_COUNT
from .environment import EnvironmentProber
from .exceptions import (
    ScriptToolError,
    ConfigurationError,
    ToolLoadError,
    ToolFetchError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    ModelTimeoutError,
)
from .execution import (
    ProcessExecutor,
    ToolInvoker,
    ToolExecutor,
    ToolHandler,
    ConversationAdapter,
    ConversationDriver,
    ConversationState,
)
from .logger import get_logger, setup_logging
from .models import (
    Tool,
    ToolSelector,
    ToolSelectorLike,
    ExecutionResult,
    EnvironmentCheck,
    ToolCallStatus,
    ChatbotResult,
    ToolCallRequest,
)
from .registry import ToolRegistry, CatalogFetcher, HttpCatalogFetcher, LocalFolderSource, RemoteApiSource
from .schema import SchemaValidator

__all__ = [
    "BaseToolsAdapter",
    "AdapterConfig",
    "SourceMode",
    "API_KEY_PREFIX",
    "DEFAULT_API_URL",
    "DEFAULT_AUTO_REFRESH_COUNT",
    "EnvironmentProber",
    "ScriptToolError",
    "ConfigurationError",
    "ToolLoadError",
    "ToolFetchError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "ModelTimeoutError",
    "ProcessExecutor",
    "ToolInvoker",
    "ToolExecutor",
    "ToolHandler",
    "ConversationAdapter",
    "ConversationDriver",
    "ConversationState",
    "get_logger",
    "setup_logging",
    "Tool",
    "ToolSelector",
    "ToolSelectorLike",
    "ExecutionResult",
    "EnvironmentCheck",
    "ToolCallStatus",
    "ChatbotResult",
    "ToolCallRequest",
    "ToolRegistry",
    "CatalogFetcher",
    "HttpCatalogFetcher",
    "LocalFolderSource",
    "RemoteApiSource",
    "SchemaValidator",
]
