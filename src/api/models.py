"""API request and response models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from constants import DEFAULT_CONVERSATION_TITLE
from conversation_store.models.conversation import Conversation
from conversation_store.models.message import Message
from conversation_store.models.profile import Profile, Theme


class ConversationCreate(BaseModel):
    """Request model for creating a conversation."""

    title: str = Field(default=DEFAULT_CONVERSATION_TITLE, min_length=1, description="Title of the conversation")


class ConversationUpdate(BaseModel):
    """Request model for renaming a conversation."""

    title: str = Field(..., min_length=1, description="New title for the conversation")


class ConversationResponse(BaseModel):
    """Response model for conversation operations."""

    id: str = Field(..., description="Conversation identifier")
    title: str = Field(..., description="Title of the conversation")
    user_id: str = Field(..., description="User identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationResponse":
        return cls(
            id=str(conversation.id),
            title=conversation.title,
            user_id=conversation.user_id,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationResponse] = Field(..., description="Conversations, most recently updated first")
    total: int = Field(..., description="Total number of conversations")


class MessageResponse(BaseModel):
    """Response model for a stored message."""

    id: str = Field(..., description="Message identifier")
    chat_id: str = Field(..., description="Conversation identifier")
    role: str = Field(..., description="Role of the message sender")
    content: str = Field(..., description="Content of the message")
    created_at: datetime = Field(..., description="Creation timestamp")

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(
            id=str(message.id),
            chat_id=str(message.chat_id),
            role=message.role.value,
            content=message.content,
            created_at=message.created_at,
        )


class MessageListResponse(BaseModel):
    """Response model for listing messages."""

    messages: List[MessageResponse] = Field(..., description="Messages, oldest first")
    total: int = Field(..., description="Total number of messages")


class SendRequest(BaseModel):
    """Request model for sending a user message."""

    content: str = Field(..., description="The message text")


class SendResponse(BaseModel):
    """Response model for a send, successful or refused."""

    state: str = Field(..., description="Terminal state of the send")
    user_message: Optional[MessageResponse] = Field(default=None, description="The stored user turn")
    assistant_message: Optional[MessageResponse] = Field(default=None, description="The stored assistant turn")
    title: Optional[str] = Field(default=None, description="Conversation title after the send")
    empty_reply: bool = Field(default=False, description="Whether the completion service returned no text")


class ProfileUpdate(BaseModel):
    """Request model for a settings update."""

    api_key: Optional[str] = Field(default=None, description="Completion service credential, empty to clear")
    selected_model: Optional[str] = Field(default=None, description="Model identifier")
    theme: Optional[Theme] = Field(default=None, description="Theme preference")


class ProfileResponse(BaseModel):
    """Response model for profile settings; the credential itself is never returned."""

    user_id: str
    has_api_key: bool
    selected_model: str
    theme: Theme
    updated_at: datetime

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            user_id=profile.user_id,
            has_api_key=profile.has_api_key,
            selected_model=profile.selected_model,
            theme=profile.theme,
            updated_at=profile.updated_at,
        )


class ModelInfo(BaseModel):
    """A selectable completion model."""

    id: str
    name: str
