"""Message model for chat history."""

from enum import Enum
from typing import Dict

from pydantic import Field

from models.base import BaseDocument, PydanticUUID


class MessageRole(str, Enum):
    """Enum for message roles."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseDocument):
    """Model representing a single immutable chat turn."""

    chat_id: PydanticUUID = Field(..., description="ID of the conversation this message belongs to")
    role: MessageRole = Field(..., description="Role of the message sender")
    content: str = Field(..., description="Text content of the message")

    model_config = {**BaseDocument.model_config, "frozen": True}

    def to_transcript_entry(self) -> Dict[str, str]:
        """Project the message onto the ``{role, content}`` pair sent upstream."""
        return {"role": self.role.value, "content": self.content}
