"""Models for conversation store."""

from conversation_store.models.conversation import Conversation
from conversation_store.models.message import Message, MessageRole
from conversation_store.models.profile import Profile, Theme

__all__ = ["Conversation", "Message", "MessageRole", "Profile", "Theme"]
