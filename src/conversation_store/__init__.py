"""Conversation, message and profile persistence."""

from conversation_store.conversation_manager import ConversationManager
from conversation_store.profile_manager import ProfileManager

__all__ = ["ConversationManager", "ProfileManager"]
