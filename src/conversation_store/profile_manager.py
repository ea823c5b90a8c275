"""Manager for per-user profile settings."""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ReturnDocument

from constants import AVAILABLE_MODELS
from conversation_store.exceptions import InvalidProfileError, UnknownModelError
from conversation_store.models.profile import Profile, Theme
from settings import settings
from utils.logging import logger


class ProfileManager:
    """Reads and updates the ``profiles`` collection, one document per user."""

    COLLECTION_PROFILES: str = "profiles"

    def __init__(self, mongodb_client: AsyncIOMotorClient, database_name: Optional[str] = None) -> None:
        self.client = mongodb_client
        self._db: AsyncIOMotorDatabase = self.client.get_database(database_name or settings.database_name)
        self._profiles: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_PROFILES)

    async def get_profile(self, user_id: str) -> Profile:
        """Returns the user's profile, creating it with defaults on first access."""
        try:
            logger.debug(f"Getting profile for user {user_id}")
            defaults = Profile(user_id=user_id).model_dump(by_alias=True, mode="json", exclude={"user_id"})
            defaults["created_at"] = defaults["updated_at"] = datetime.now(tz=timezone.utc)
            doc = await self._profiles.find_one_and_update(
                {"_id": user_id},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            return Profile.model_validate(doc)

        except Exception as e:
            raise InvalidProfileError(f"Failed to get profile: {str(e)}")

    async def update_profile(
        self,
        user_id: str,
        api_key: Optional[str] = None,
        selected_model: Optional[str] = None,
        theme: Optional[Theme] = None,
    ) -> Profile:
        """Applies an explicit settings update.

        Fields left as ``None`` are not changed; an empty ``api_key`` clears
        the stored credential.
        """
        if selected_model is not None and selected_model not in AVAILABLE_MODELS:
            raise UnknownModelError(f"Unknown model: {selected_model}")

        update_data = {"updated_at": datetime.now(tz=timezone.utc)}
        if api_key is not None:
            update_data["api_key"] = api_key or None
        if selected_model is not None:
            update_data["selected_model"] = selected_model
        if theme is not None:
            update_data["theme"] = Theme(theme).value

        try:
            logger.info(f"Updating profile for user {user_id}: {sorted(k for k in update_data if k != 'updated_at')}")
            # Make sure the document exists so that defaults are filled in
            await self.get_profile(user_id)
            doc = await self._profiles.find_one_and_update(
                {"_id": user_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
            return Profile.model_validate(doc)

        except InvalidProfileError:
            raise
        except Exception as e:
            raise InvalidProfileError(f"Failed to update profile: {str(e)}")

    async def toggle_theme(self, user_id: str) -> Profile:
        """Switches the theme between light and dark."""
        profile = await self.get_profile(user_id)
        return await self.update_profile(user_id, theme=profile.theme.toggled())
