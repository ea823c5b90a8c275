"""Conversation export and import."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from constants import IMPORTED_CONVERSATION_TITLE
from conversation_store.conversation_manager import ConversationManager
from conversation_store.models.conversation import Conversation
from conversation_store.models.message import MessageRole
from utils.logging import logger
from utils.text import safe_filename_part


class ImportFormatError(Exception):
    """Raised when an import document is malformed or incomplete."""

    pass


class ExportDocument(BaseModel):
    """A conversation with its messages, as written to an export file."""

    chat: Dict[str, Any] = Field(..., description="The exported conversation record")
    messages: List[Dict[str, Any]] = Field(default_factory=list, description="Messages, oldest first")
    exported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="exportedAt")

    model_config = {"populate_by_name": True}


class ImportedChat(BaseModel):
    title: Optional[str] = None


class ImportedMessage(BaseModel):
    role: MessageRole
    content: str


class ImportDocument(BaseModel):
    """The parts of an export document that an import uses."""

    chat: Optional[ImportedChat] = None
    messages: List[ImportedMessage]


class TransferService:
    """Exports conversations to JSON documents and imports them back."""

    def __init__(self, conversation_db: ConversationManager):
        self.conversation_db = conversation_db

    async def export_conversation(self, user_id: str, conversation_id: UUID) -> ExportDocument:
        """Collect a conversation and its transcript into an export document."""
        conversation = await self.conversation_db.get_conversation(user_id, conversation_id)
        messages = await self.conversation_db.list_messages(user_id, conversation_id)
        logger.info(f"Exporting conversation {conversation_id} with {len(messages)} messages")

        return ExportDocument(
            chat=conversation.model_dump(mode="json"),
            messages=[message.model_dump(mode="json") for message in messages],
        )

    @staticmethod
    def dump_export(document: ExportDocument) -> str:
        return json.dumps(document.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)

    @staticmethod
    def export_filename(document: ExportDocument) -> str:
        title = document.chat.get("title") or "export"
        timestamp_ms = int(document.exported_at.timestamp() * 1000)
        return f"chat-{safe_filename_part(title)}-{timestamp_ms}.json"

    @staticmethod
    def parse_import(text: Union[str, bytes]) -> ImportDocument:
        """Validate an import document without touching the store.

        Raises:
            ImportFormatError: If the text is not UTF-8 JSON or lacks a valid
                ``messages`` list
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ImportFormatError(f"Import document is not valid JSON: {str(e)}")

        if not isinstance(data, dict):
            raise ImportFormatError("Import document must be a JSON object")

        try:
            return ImportDocument.model_validate(data)
        except ValidationError as e:
            raise ImportFormatError(f"Import document is incomplete: {e.errors()[0]['msg']} at {'.'.join(str(p) for p in e.errors()[0]['loc'])}")

    async def import_conversation(self, user_id: str, text: Union[str, bytes]) -> Conversation:
        """Create a new conversation from an export document.

        Only each message's role and content are kept; ids and timestamps of
        the original are discarded.
        """
        document = self.parse_import(text)
        title = (document.chat.title if document.chat else None) or IMPORTED_CONVERSATION_TITLE

        conversation = await self.conversation_db.create_conversation(user_id, title)
        await self.conversation_db.append_messages(
            user_id,
            conversation.id,
            [(message.role, message.content) for message in document.messages],
        )
        logger.info(f"Imported {len(document.messages)} messages into conversation {conversation.id}")
        return conversation
