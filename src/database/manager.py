"""Database setup and initialization."""

import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from conversation_store.conversation_manager import ConversationManager
from conversation_store.profile_manager import ProfileManager
from settings import settings
from utils.logging import logger


class DatabaseManager:
    """Owns the MongoDB client and the store managers built on it."""

    def __init__(self, database_url: Optional[str] = None, database_name: Optional[str] = None):
        """Initialize the database manager."""
        logger.info("Initializing DatabaseManager")
        self._client = AsyncIOMotorClient(database_url or settings.database_url, tz_aware=True)
        self._client.get_io_loop = asyncio.get_running_loop
        self._database_name = database_name or settings.database_name
        self._conversation_manager = None
        self._profile_manager = None

    async def setup_conversation_manager(self) -> ConversationManager:
        """Initialize and return the conversation manager."""
        if self._conversation_manager is None:
            logger.info("Setting up conversation manager")
            self._conversation_manager = await ConversationManager.setup(self._client, self._database_name)
        return self._conversation_manager

    async def setup_profile_manager(self) -> ProfileManager:
        """Initialize and return the profile manager."""
        if self._profile_manager is None:
            logger.info("Setting up profile manager")
            self._profile_manager = ProfileManager(self._client, self._database_name)
        return self._profile_manager

    def close(self):
        """Close database connection."""
        logger.info("Closing database connection")
        if self._client:
            self._client.close()
