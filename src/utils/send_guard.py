"""In-process registry of conversations with a send in flight."""

from typing import Set
from uuid import UUID

from utils.logging import logger


class SendGuard:
    """Keeps at most one outstanding send per conversation within this process.

    Sends for the same conversation never interleave; other processes are not
    coordinated.
    """

    def __init__(self):
        self._in_flight: Set[str] = set()

    def acquire(self, conversation_id: UUID) -> bool:
        """Mark a conversation busy.

        Returns:
            True if the caller now owns the slot, False if a send is already running
        """
        key = str(conversation_id)
        if key in self._in_flight:
            logger.info(f"Send already in progress for conversation {conversation_id}")
            return False
        self._in_flight.add(key)
        return True

    def release(self, conversation_id: UUID) -> None:
        self._in_flight.discard(str(conversation_id))

    def is_busy(self, conversation_id: UUID) -> bool:
        return str(conversation_id) in self._in_flight
