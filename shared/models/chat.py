"""Chat message model sent to LLM backends."""

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """A single OpenAI-format chat message."""

    role: Literal["system", "user", "assistant"]
    content: str
