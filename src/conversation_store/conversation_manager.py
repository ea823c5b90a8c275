"""Manager for conversation and message operations."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

import pymongo
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from constants import DEFAULT_CONVERSATION_TITLE
from conversation_store.exceptions import (
    ConversationNotFoundError,
    InvalidConversationError,
    InvalidMessageError,
)
from conversation_store.models.conversation import Conversation
from conversation_store.models.message import Message, MessageRole
from settings import settings
from utils.logging import logger


class ConversationManager:
    """Manager for conversation and message operations.

    Every query is scoped on ``user_id``; a record owned by another user is
    indistinguishable from a missing one.
    """

    COLLECTION_CONVERSATIONS: str = "chats"
    COLLECTION_MESSAGES: str = "messages"

    def __init__(self, mongodb_client: AsyncIOMotorClient, database_name: Optional[str] = None) -> None:
        """Initialize manager with MongoDB client.
        Note: Use ConversationManager.setup() to create a properly initialized instance."""
        self.client = mongodb_client
        self._db: AsyncIOMotorDatabase = self.client.get_database(database_name or settings.database_name)
        self._conversations: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_CONVERSATIONS)
        self._messages: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_MESSAGES)

    @classmethod
    async def setup(cls, mongodb_client: AsyncIOMotorClient, database_name: Optional[str] = None) -> "ConversationManager":
        """Factory method to create and setup a ConversationManager instance."""
        try:
            manager = cls(mongodb_client, database_name)

            await manager._conversations.create_indexes(
                [
                    # Listing a user's conversations, most recent first
                    pymongo.IndexModel([("user_id", 1), ("updated_at", -1)], background=True),
                    pymongo.IndexModel([("user_id", 1), ("_id", 1)], background=True),
                ]
            )

            await manager._messages.create_indexes(
                [
                    # Transcript reconstruction
                    pymongo.IndexModel([("user_id", 1), ("chat_id", 1), ("created_at", 1)], background=True),
                ]
            )

            return manager

        except Exception as e:
            raise InvalidConversationError(f"Failed to setup indexes: {str(e)}")

    async def create_conversation(self, user_id: str, title: str = DEFAULT_CONVERSATION_TITLE) -> Conversation:
        """Creates a new, empty conversation."""
        try:
            logger.info(f"Creating conversation '{title}' for user {user_id}")

            conversation = Conversation(user_id=user_id, title=title)
            await self._conversations.insert_one(conversation.model_dump(by_alias=True))

            logger.info(f"Conversation created with ID: {conversation.id}")
            return conversation

        except Exception as e:
            raise InvalidConversationError(f"Failed to create conversation: {str(e)}")

    async def get_conversation(self, user_id: str, conversation_id: UUID) -> Conversation:
        """Retrieves a specific conversation."""
        try:
            logger.debug(f"Getting conversation {conversation_id} for user {user_id}")
            doc = await self._conversations.find_one({"_id": str(conversation_id), "user_id": user_id})
            if not doc:
                raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
            return Conversation.model_validate(doc)

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidConversationError(f"Failed to get conversation: {str(e)}")

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        """Lists all conversations for a user, most recently updated first."""
        try:
            logger.debug(f"Listing conversations for user {user_id}")
            cursor = self._conversations.find({"user_id": user_id})
            cursor = cursor.sort([("updated_at", -1)])

            conversations = []
            async for doc in cursor:
                conversations.append(Conversation.model_validate(doc))
            return conversations

        except Exception as e:
            raise InvalidConversationError(f"Failed to list conversations: {str(e)}")

    async def update_conversation(
        self,
        user_id: str,
        conversation_id: UUID,
        title: Optional[str] = None,
    ) -> None:
        """Touches the last-updated timestamp, and sets the title when one is given."""
        try:
            logger.info(f"Updating conversation {conversation_id} for user {user_id}")

            update_data = {"updated_at": datetime.now(tz=timezone.utc)}
            if title is not None:
                update_data["title"] = title

            result = await self._conversations.update_one(
                {"_id": str(conversation_id), "user_id": user_id},
                {"$set": update_data},
            )

            if result.matched_count == 0:
                raise ConversationNotFoundError(f"Conversation {conversation_id} not found")

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidConversationError(f"Failed to update conversation: {str(e)}")

    async def delete_conversation(self, user_id: str, conversation_id: UUID) -> None:
        """Deletes a conversation and all its messages."""
        try:
            logger.info(f"Deleting conversation {conversation_id} and its messages for user {user_id}")
            await self.get_conversation(user_id, conversation_id)

            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    await self._messages.delete_many(
                        {
                            "user_id": user_id,
                            "chat_id": str(conversation_id),
                        },
                        session=session,
                    )

                    result = await self._conversations.delete_one(
                        {
                            "_id": str(conversation_id),
                            "user_id": user_id,
                        },
                        session=session,
                    )

                    if result.deleted_count == 0:
                        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
                    logger.info("Conversation and messages deleted successfully")

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidConversationError(f"Failed to delete conversation: {str(e)}")

    async def append_message(self, user_id: str, conversation_id: UUID, role: MessageRole, content: str) -> Message:
        """Inserts one message into a conversation."""
        try:
            logger.info(f"Appending {MessageRole(role).value} message to conversation {conversation_id} for user {user_id}")
            await self.get_conversation(user_id, conversation_id)

            message = Message(user_id=user_id, chat_id=conversation_id, role=role, content=content)
            await self._messages.insert_one(message.model_dump(by_alias=True))

            logger.debug(f"Message created with ID: {message.id}")
            return message

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidMessageError(f"Failed to create message: {str(e)}")

    async def append_messages(
        self,
        user_id: str,
        conversation_id: UUID,
        entries: Iterable[Tuple[MessageRole, str]],
    ) -> List[Message]:
        """Bulk-inserts messages, keeping the given order.

        Consecutive messages get creation times 1 ms apart, the resolution
        MongoDB keeps for dates, so that the transcript order survives. They
        end before the current time, so later appends still sort after them.
        """
        try:
            await self.get_conversation(user_id, conversation_id)

            entries = list(entries)
            base = datetime.now(tz=timezone.utc) - timedelta(milliseconds=len(entries))
            messages = [
                Message(
                    user_id=user_id,
                    chat_id=conversation_id,
                    role=role,
                    content=content,
                    created_at=base + timedelta(milliseconds=index),
                )
                for index, (role, content) in enumerate(entries)
            ]
            logger.info(f"Appending {len(messages)} messages to conversation {conversation_id} for user {user_id}")

            if messages:
                await self._messages.insert_many([message.model_dump(by_alias=True) for message in messages])
            return messages

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidMessageError(f"Failed to create messages: {str(e)}")

    async def list_messages(self, user_id: str, conversation_id: UUID) -> List[Message]:
        """Lists all messages in a conversation, oldest first."""
        try:
            logger.debug(f"Listing messages for conversation {conversation_id}")
            await self.get_conversation(user_id, conversation_id)

            cursor = self._messages.find({"user_id": user_id, "chat_id": str(conversation_id)})
            cursor = cursor.sort([("created_at", 1)])

            messages = []
            async for doc in cursor:
                messages.append(Message.model_validate(doc))
            return messages

        except ConversationNotFoundError:
            raise
        except Exception as e:
            raise InvalidMessageError(f"Failed to list messages: {str(e)}")
