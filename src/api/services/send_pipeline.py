"""Send pipeline: one user turn in, one assistant turn out."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
from uuid import UUID

from api.context import UserContext
from completion.client import CompletionClient, TranscriptEntry
from completion.exceptions import CompletionError
from conversation_store.conversation_manager import ConversationManager
from conversation_store.exceptions import PersistenceError
from conversation_store.models.message import Message, MessageRole
from utils.logging import logger
from utils.text import derive_title


class SendState(str, Enum):
    """States of a single send.

    The happy path runs IDLE through METADATA_UPDATED in order. REFUSED and
    PARTIALLY_FAILED are terminal.
    """

    IDLE = "idle"
    USER_APPENDED = "user_appended"
    TRANSCRIPT_FETCHED = "transcript_fetched"
    COMPLETION_REQUESTED = "completion_requested"
    ASSISTANT_APPENDED = "assistant_appended"
    METADATA_UPDATED = "metadata_updated"
    PARTIALLY_FAILED = "partially_failed"
    REFUSED = "refused"


@dataclass
class SendResult:
    """Outcome of a send, including how far it got."""

    state: SendState = SendState.IDLE
    failed_at: Optional[SendState] = None
    error: Optional[Union[PersistenceError, CompletionError]] = None
    user_message: Optional[Message] = None
    assistant_message: Optional[Message] = None
    title: Optional[str] = None
    empty_reply: bool = False
    history: List[SendState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == SendState.METADATA_UPDATED

    @property
    def has_orphan_user_message(self) -> bool:
        """A user turn was stored but no assistant turn followed it."""
        return self.user_message is not None and self.assistant_message is None

    def advance(self, state: SendState) -> None:
        self.history.append(state)
        self.state = state

    def fail(self, error: Union[PersistenceError, CompletionError]) -> None:
        self.failed_at = self.state
        self.error = error
        self.advance(SendState.PARTIALLY_FAILED)


class SendPipeline:
    """Runs the send steps strictly in sequence, with no rollback.

    Every step reads the store again instead of trusting in-memory copies, so
    the only state carried between steps is the conversation id and the
    caller's credentials.
    """

    def __init__(self, conversation_db: ConversationManager, completion_client: CompletionClient):
        self.conversation_db = conversation_db
        self.completion_client = completion_client

    async def send(self, context: UserContext, conversation_id: Optional[UUID], content: str) -> SendResult:
        """Send ``content`` as the next user turn of a conversation.

        Args:
            context: The caller and their profile
            conversation_id: Selected conversation, may be None
            content: The user's text

        Returns:
            A SendResult in state METADATA_UPDATED, REFUSED or PARTIALLY_FAILED
        """
        result = SendResult()

        if conversation_id is None or not context.api_key or not content:
            logger.info(f"Send refused for user {context.user_id}: conversation, credential or content missing")
            result.advance(SendState.REFUSED)
            return result

        user_id = context.user_id
        try:
            result.user_message = await self.conversation_db.append_message(user_id, conversation_id, MessageRole.USER, content)
            result.advance(SendState.USER_APPENDED)

            messages = await self.conversation_db.list_messages(user_id, conversation_id)
            transcript: List[TranscriptEntry] = [message.to_transcript_entry() for message in messages]
            result.advance(SendState.TRANSCRIPT_FETCHED)

            reply = await self.completion_client.complete(context.api_key, context.model, transcript)
            result.advance(SendState.COMPLETION_REQUESTED)
            if not reply:
                # Stored like any other reply; callers see the flag
                logger.warning(f"Empty completion reply for conversation {conversation_id}")
                result.empty_reply = True

            result.assistant_message = await self.conversation_db.append_message(user_id, conversation_id, MessageRole.ASSISTANT, reply)
            result.advance(SendState.ASSISTANT_APPENDED)

            conversation = await self.conversation_db.get_conversation(user_id, conversation_id)
            if conversation.has_default_title and content:
                title = derive_title(content)
                await self.conversation_db.update_conversation(user_id, conversation_id, title=title)
                result.title = title
            else:
                await self.conversation_db.update_conversation(user_id, conversation_id)
                result.title = conversation.title
            result.advance(SendState.METADATA_UPDATED)

        except (PersistenceError, CompletionError) as e:
            logger.error(f"Send failed for conversation {conversation_id} after state {result.state.value}: {str(e)}")
            result.fail(e)

        return result
