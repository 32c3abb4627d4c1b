from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class AnthropicChatbotOptions(BaseModel):
    """
    Request options of an Anthropic chatbot.

    Unknown fields are kept and forwarded to ``client.messages.create``.
    """

    model_config = ConfigDict(extra="allow")

    model: str = Field(default="claude-3-7-sonnet-20250219")
    temperature: Optional[float] = Field(default=0.7)
    max_tokens: int = Field(default=4096, gt=0)
    system: Optional[str] = Field(default=None)

    def request_options(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
