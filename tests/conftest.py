"""Shared fixtures: an in-memory conversation store and a scripted completion client."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import pytest

from api.context import UserContext
from completion.exceptions import CompletionError
from constants import DEFAULT_CONVERSATION_TITLE
from conversation_store.exceptions import ConversationNotFoundError, InvalidMessageError
from conversation_store.models.conversation import Conversation
from conversation_store.models.message import Message, MessageRole
from conversation_store.models.profile import Profile


class FakeClock:
    """Strictly increasing timestamps, one millisecond apart."""

    def __init__(self):
        self._now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(milliseconds=1)
        return self._now


class InMemoryConversationManager:
    """Implements the ConversationManager interface over dictionaries."""

    def __init__(self):
        self.clock = FakeClock()
        self.conversations: Dict[str, Conversation] = {}
        self.messages: List[Message] = []
        self.fail_on: Optional[str] = None
        self.calls: List[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_on == operation:
            raise InvalidMessageError(f"{operation} failed")

    def _owned(self, user_id: str, conversation_id: UUID) -> Conversation:
        conversation = self.conversations.get(str(conversation_id))
        if conversation is None or conversation.user_id != user_id:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    async def create_conversation(self, user_id: str, title: str = DEFAULT_CONVERSATION_TITLE) -> Conversation:
        self._check("create_conversation")
        now = self.clock()
        conversation = Conversation(user_id=user_id, title=title, created_at=now, updated_at=now)
        self.conversations[str(conversation.id)] = conversation
        return conversation

    async def get_conversation(self, user_id: str, conversation_id: UUID) -> Conversation:
        self._check("get_conversation")
        return self._owned(user_id, conversation_id).model_copy()

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        self._check("list_conversations")
        owned = [c for c in self.conversations.values() if c.user_id == user_id]
        return sorted(owned, key=lambda c: c.updated_at, reverse=True)

    async def update_conversation(self, user_id: str, conversation_id: UUID, title: Optional[str] = None) -> None:
        self._check("update_conversation")
        conversation = self._owned(user_id, conversation_id)
        conversation.updated_at = self.clock()
        if title is not None:
            conversation.title = title

    async def delete_conversation(self, user_id: str, conversation_id: UUID) -> None:
        self._check("delete_conversation")
        self._owned(user_id, conversation_id)
        del self.conversations[str(conversation_id)]
        self.messages = [m for m in self.messages if str(m.chat_id) != str(conversation_id)]

    async def append_message(self, user_id: str, conversation_id: UUID, role: MessageRole, content: str) -> Message:
        self._check("append_message")
        self._owned(user_id, conversation_id)
        message = Message(user_id=user_id, chat_id=conversation_id, role=role, content=content, created_at=self.clock())
        self.messages.append(message)
        return message

    async def append_messages(self, user_id: str, conversation_id: UUID, entries: Iterable[Tuple[MessageRole, str]]) -> List[Message]:
        self._check("append_messages")
        self._owned(user_id, conversation_id)
        created = [
            Message(user_id=user_id, chat_id=conversation_id, role=role, content=content, created_at=self.clock())
            for role, content in entries
        ]
        self.messages.extend(created)
        return created

    async def list_messages(self, user_id: str, conversation_id: UUID) -> List[Message]:
        self._check("list_messages")
        self._owned(user_id, conversation_id)
        owned = [m for m in self.messages if str(m.chat_id) == str(conversation_id)]
        return sorted(owned, key=lambda m: m.created_at)


class ScriptedCompletionClient:
    """Returns queued replies and records every transcript it was given."""

    def __init__(self, replies: Sequence[str] = ("Hi there!",)):
        self.replies = list(replies)
        self.error: Optional[CompletionError] = None
        self.requests: List[Tuple[str, str, List[dict]]] = []

    async def complete(self, api_key: str, model: str, transcript) -> str:
        self.requests.append((api_key, model, [dict(entry) for entry in transcript]))
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture
def user_id() -> str:
    """Test user ID."""
    return "test_user"


@pytest.fixture
def store() -> InMemoryConversationManager:
    return InMemoryConversationManager()


@pytest.fixture
def completion_client() -> ScriptedCompletionClient:
    return ScriptedCompletionClient()


@pytest.fixture
def profile(user_id: str) -> Profile:
    return Profile(user_id=user_id, api_key="gsk_test", selected_model="llama-3.1-8b-instant")


@pytest.fixture
def context(user_id: str, profile: Profile) -> UserContext:
    return UserContext(user_id=user_id, profile=profile)
