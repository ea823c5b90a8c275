"""Conversation model for chat history."""

from datetime import datetime

from pydantic import Field

from constants import DEFAULT_CONVERSATION_TITLE
from models.base import BaseDocument, utc_now


class Conversation(BaseDocument):
    """Model representing a chat conversation."""

    title: str = Field(default=DEFAULT_CONVERSATION_TITLE, description="Title of the conversation")
    updated_at: datetime = Field(default_factory=utc_now, description="Last activity timestamp")

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_CONVERSATION_TITLE
