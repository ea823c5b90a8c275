"""Tests for the conversation manager against mocked motor collections."""

from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from conversation_store.conversation_manager import ConversationManager
from conversation_store.exceptions import (
    ConversationNotFoundError,
    InvalidConversationError,
    InvalidMessageError,
    PersistenceError,
)
from conversation_store.models.conversation import Conversation
from conversation_store.models.message import Message, MessageRole


def make_cursor(docs: List[dict]) -> MagicMock:
    """A motor-like cursor: ``sort`` is chainable and the cursor is async-iterable."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.__aiter__.return_value = docs
    return cursor


def make_collection() -> MagicMock:
    """Mock MongoDB collection; motor's awaitable methods are replaced by AsyncMocks."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.create_indexes = AsyncMock(return_value=[])
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.insert_many = AsyncMock()
    collection.delete_many = AsyncMock()
    collection.find = MagicMock(return_value=make_cursor([]))

    result_update = MagicMock()
    result_update.matched_count = 1
    collection.update_one = AsyncMock(return_value=result_update)

    result_delete = MagicMock()
    result_delete.deleted_count = 1
    collection.delete_one = AsyncMock(return_value=result_delete)
    return collection


@pytest.fixture
def sample_conversation(user_id: str) -> Conversation:
    return Conversation(user_id=user_id, title="Sample")


@pytest.fixture
def conversations_collection() -> MagicMock:
    return make_collection()


@pytest.fixture
def messages_collection() -> MagicMock:
    return make_collection()


@pytest.fixture
def mock_client(conversations_collection: MagicMock, messages_collection: MagicMock) -> MagicMock:
    """Mock MongoDB client whose database hands out the two collections."""
    db = MagicMock(spec=AsyncIOMotorDatabase)
    db.get_collection.side_effect = lambda name: {
        ConversationManager.COLLECTION_CONVERSATIONS: conversations_collection,
        ConversationManager.COLLECTION_MESSAGES: messages_collection,
    }[name]

    client = MagicMock(spec=AsyncIOMotorClient)
    client.get_database.return_value = db

    class MockTransaction:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            return False

    class MockSession:
        def start_transaction(self):
            return MockTransaction()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            return False

    client.start_session = AsyncMock(return_value=MockSession())
    return client


@pytest_asyncio.fixture
async def manager(mock_client: MagicMock, conversations_collection: MagicMock, messages_collection: MagicMock) -> ConversationManager:
    return await ConversationManager.setup(mock_client, "test_db")


@pytest.mark.asyncio
async def test_setup_creates_indexes(manager, conversations_collection, messages_collection, mock_client):
    mock_client.get_database.assert_called_once_with("test_db")
    conversations_collection.create_indexes.assert_awaited_once()
    messages_collection.create_indexes.assert_awaited_once()


@pytest.mark.asyncio
async def test_setup_failure_is_wrapped(mock_client, conversations_collection):
    conversations_collection.create_indexes.side_effect = RuntimeError("no server")

    with pytest.raises(InvalidConversationError, match="Failed to setup indexes"):
        await ConversationManager.setup(mock_client, "test_db")


@pytest.mark.asyncio
async def test_create_conversation_defaults_title(manager, conversations_collection, user_id):
    conversation = await manager.create_conversation(user_id)

    assert conversation.title == "New Chat"
    assert conversation.user_id == user_id
    inserted = conversations_collection.insert_one.await_args.args[0]
    assert inserted["_id"] == str(conversation.id)
    assert inserted["user_id"] == user_id
    assert inserted["title"] == "New Chat"
    assert "updated_at" in inserted


@pytest.mark.asyncio
async def test_get_conversation_filters_on_owner(manager, conversations_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)

    conversation = await manager.get_conversation(user_id, sample_conversation.id)

    assert conversation.id == sample_conversation.id
    conversations_collection.find_one.assert_awaited_once_with({"_id": str(sample_conversation.id), "user_id": user_id})


@pytest.mark.asyncio
async def test_get_conversation_not_found(manager, user_id):
    with pytest.raises(ConversationNotFoundError):
        await manager.get_conversation(user_id, uuid4())


@pytest.mark.asyncio
async def test_list_conversations_sorts_by_updated_at_desc(manager, conversations_collection, user_id):
    now = datetime.now(timezone.utc)
    docs = [
        Conversation(user_id=user_id, title="newer", updated_at=now).model_dump(by_alias=True),
        Conversation(user_id=user_id, title="older", updated_at=now - timedelta(hours=1)).model_dump(by_alias=True),
    ]
    cursor = make_cursor(docs)
    conversations_collection.find.return_value = cursor

    conversations = await manager.list_conversations(user_id)

    assert [c.title for c in conversations] == ["newer", "older"]
    conversations_collection.find.assert_called_once_with({"user_id": user_id})
    cursor.sort.assert_called_once_with([("updated_at", -1)])


@pytest.mark.asyncio
async def test_update_conversation_touches_timestamp_only(manager, conversations_collection, user_id):
    conversation_id = uuid4()

    await manager.update_conversation(user_id, conversation_id)

    query, update = conversations_collection.update_one.await_args.args
    assert query == {"_id": str(conversation_id), "user_id": user_id}
    assert set(update["$set"]) == {"updated_at"}


@pytest.mark.asyncio
async def test_update_conversation_sets_title_and_timestamp(manager, conversations_collection, user_id):
    await manager.update_conversation(user_id, uuid4(), title="Renamed")

    _, update = conversations_collection.update_one.await_args.args
    assert update["$set"]["title"] == "Renamed"
    assert "updated_at" in update["$set"]


@pytest.mark.asyncio
async def test_update_missing_conversation(manager, conversations_collection, user_id):
    conversations_collection.update_one.return_value.matched_count = 0

    with pytest.raises(ConversationNotFoundError):
        await manager.update_conversation(user_id, uuid4(), title="x")


@pytest.mark.asyncio
async def test_delete_conversation_removes_messages_first(
    manager, conversations_collection, messages_collection, sample_conversation, user_id
):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)

    await manager.delete_conversation(user_id, sample_conversation.id)

    messages_filter = messages_collection.delete_many.await_args.args[0]
    assert messages_filter == {"user_id": user_id, "chat_id": str(sample_conversation.id)}
    conversations_collection.delete_one.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_missing_conversation(manager, messages_collection, user_id):
    with pytest.raises(ConversationNotFoundError):
        await manager.delete_conversation(user_id, uuid4())

    messages_collection.delete_many.assert_not_awaited()


@pytest.mark.asyncio
async def test_append_message_requires_conversation(manager, messages_collection, user_id):
    with pytest.raises(ConversationNotFoundError):
        await manager.append_message(user_id, uuid4(), MessageRole.USER, "Hello")

    messages_collection.insert_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_append_message_inserts_record(manager, conversations_collection, messages_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)

    message = await manager.append_message(user_id, sample_conversation.id, MessageRole.USER, "Hello")

    assert message.role == MessageRole.USER
    inserted = messages_collection.insert_one.await_args.args[0]
    assert inserted["chat_id"] == str(sample_conversation.id)
    assert inserted["role"] == "user"
    assert inserted["content"] == "Hello"
    # Appending does not touch conversation metadata
    conversations_collection.update_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_append_message_store_failure_is_persistence_error(manager, conversations_collection, messages_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)
    messages_collection.insert_one.side_effect = RuntimeError("write concern error")

    with pytest.raises(InvalidMessageError) as exc_info:
        await manager.append_message(user_id, sample_conversation.id, MessageRole.USER, "Hello")

    assert isinstance(exc_info.value, PersistenceError)


@pytest.mark.asyncio
async def test_append_messages_keeps_order_with_increasing_timestamps(
    manager, conversations_collection, messages_collection, sample_conversation, user_id
):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)
    entries = [(MessageRole.USER, "a"), (MessageRole.ASSISTANT, "b"), (MessageRole.USER, "c")]

    messages = await manager.append_messages(user_id, sample_conversation.id, entries)

    assert [(m.role, m.content) for m in messages] == entries
    assert messages[0].created_at < messages[1].created_at < messages[2].created_at
    inserted = messages_collection.insert_many.await_args.args[0]
    assert [doc["content"] for doc in inserted] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_append_messages_are_not_stamped_in_the_future(
    manager, conversations_collection, messages_collection, sample_conversation, user_id
):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)
    entries = [(MessageRole.USER, f"message {index}") for index in range(500)]

    messages = await manager.append_messages(user_id, sample_conversation.id, entries)
    after = datetime.now(timezone.utc)

    assert messages[-1].created_at < after
    assert all(earlier.created_at < later.created_at for earlier, later in zip(messages, messages[1:]))


@pytest.mark.asyncio
async def test_append_messages_empty_does_not_insert(manager, conversations_collection, messages_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)

    assert await manager.append_messages(user_id, sample_conversation.id, []) == []
    messages_collection.insert_many.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_messages_sorted_oldest_first(manager, conversations_collection, messages_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)
    doc = Message(user_id=user_id, chat_id=sample_conversation.id, role=MessageRole.USER, content="Hi").model_dump(by_alias=True)
    cursor = make_cursor([doc])
    messages_collection.find.return_value = cursor

    messages = await manager.list_messages(user_id, sample_conversation.id)

    assert [m.content for m in messages] == ["Hi"]
    messages_collection.find.assert_called_once_with({"user_id": user_id, "chat_id": str(sample_conversation.id)})
    cursor.sort.assert_called_once_with([("created_at", 1)])


@pytest.mark.asyncio
async def test_list_messages_empty(manager, conversations_collection, sample_conversation, user_id):
    conversations_collection.find_one.return_value = sample_conversation.model_dump(by_alias=True)

    assert await manager.list_messages(user_id, sample_conversation.id) == []
