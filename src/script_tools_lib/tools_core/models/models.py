"""Data models shared by the registry, the executor and the provider bindings."""

import json
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_SCRIPT_KINDS = ("python", "bash")


class Tool(BaseModel):
    """
    Represents a single externally defined tool.

    A tool is immutable once loaded and is addressed by its lower-cased name.
    Local-folder catalogs set ``script_path`` and leave ``script`` empty, remote
    catalogs ship the inline ``script`` source.

    Attributes:
        id: Identifier assigned by the registry, may be empty.
        name: Tool name as declared by the registry.
        description: Human readable description sent to the model.
        input_schema: JSON schema describing the accepted arguments.
        script: Inline script source.
        script_path: Path of the script file on disk.
        script_kind: Runtime needed to run the script (``bash`` or ``python``).
        version_name: Name of the loaded version.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict)
    script: str = ""
    script_path: Optional[str] = None
    script_kind: str = Field(default="bash", alias="script_type")
    version_name: str = ""

    @field_validator("id", "description", "script", "version_name", mode="before")
    @classmethod
    def _empty_string_default(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("script_kind", mode="before")
    @classmethod
    def _bash_default(cls, value: Any) -> Any:
        return value or "bash"

    @field_validator("input_schema", mode="before")
    @classmethod
    def _schema_default(cls, value: Any) -> Any:
        return value or {}

    @property
    def key(self) -> str:
        """Case-insensitive lookup key of the tool."""
        return self.name.lower()


class ToolSelector(BaseModel):
    """Selects a tool by name, optionally pinned to a specific version."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: Optional[str] = None

    @classmethod
    def coerce(cls, value: "ToolSelectorLike") -> "ToolSelector":
        """Build a selector from a plain name, a mapping or an existing selector."""
        if isinstance(value, ToolSelector):
            return value
        if isinstance(value, str):
            return cls(name=value)
        return cls.model_validate(value)

    @property
    def key(self) -> str:
        return self.name.lower()

    def to_request(self) -> Dict[str, str]:
        """Serialize the selector the way the remote registry expects it."""
        payload = {"name": self.name}
        if self.version:
            payload["version"] = self.version
        return payload


ToolSelectorLike = Union[str, ToolSelector, Mapping[str, Any]]


class ExecutionResult(BaseModel):
    """
    Outcome of running a tool.

    The two fields are NOT a success/failure pair. ``output`` carries the
    script output, and also environment errors, non-zero exits and spawn
    failures rendered as text. ``error`` is reserved for structural faults such
    as an unknown tool, an unsupported script kind or unparsable arguments.
    Client code must therefore read ``output`` even when a script failed.

    Attributes:
        output: Textual result of the run.
        error: Structural error message, if any.
    """

    output: Optional[str] = None
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Optional[str]]:
        """Return the payload fed back to the model for this result."""
        if self.error:
            return {"error": self.error}
        return {"output": self.output}

    def to_content(self) -> str:
        """Return the JSON encoded payload for tool-result messages."""
        return json.dumps(self.to_payload())


class EnvironmentCheck(BaseModel):
    """Availability of the runtime for one script kind.

    Attributes:
        script_kind: The probed script kind.
        valid: Whether a usable runtime was found.
        executor: The command resolved for the runtime (e.g. ``python3``).
        error: Why the runtime is unusable, if it is.
    """

    script_kind: str
    valid: bool
    executor: str = ""
    error: Optional[str] = None


class ToolCallStatus(BaseModel):
    """Tool call counter and auto-refresh settings of a registry."""

    call_count: int
    auto_refresh_count: int
    next_refresh_in: int


class ChatbotResult(BaseModel):
    """
    Result of a single conversation turn.

    Attributes:
        text: Final text answer, including text emitted alongside tool calls.
        messages: Copy of the provider-shaped conversation history.
        max_depth_exceeded: True when the turn stopped at the tool-use depth limit.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str
    messages: List[Any] = Field(default_factory=list)
    max_depth_exceeded: bool = False
