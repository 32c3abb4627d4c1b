from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class OpenAIChatbotOptions(BaseModel):
    """
    Request options of an OpenAI chatbot.

    Unknown fields are kept and forwarded to ``client.chat.completions.create``.

    Attributes:
        model: The model to use.
        temperature: Sampling temperature, the API default when unset.
        max_tokens: Maximum number of tokens to generate.
        system: System prompt sent ahead of every request.
    """

    model_config = ConfigDict(extra="allow")

    model: str = Field(default="gpt-4o")
    temperature: Optional[float] = Field(default=None)
    max_tokens: Optional[int] = Field(default=None)
    system: Optional[str] = Field(default=None)

    def request_options(self) -> Dict[str, Any]:
        """Return the keyword arguments for the completion request."""
        return self.model_dump(exclude={"system"}, exclude_none=True)
