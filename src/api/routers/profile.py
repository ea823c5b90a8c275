"""Profile router for per-user settings."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_profile_db, get_user_id
from api.models import ModelInfo, ProfileResponse, ProfileUpdate
from constants import AVAILABLE_MODELS
from conversation_store.exceptions import InvalidProfileError, UnknownModelError
from conversation_store.profile_manager import ProfileManager
from utils.logging import logger

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_user_id),
    db: ProfileManager = Depends(get_profile_db),
) -> ProfileResponse:
    """Get the caller's settings."""
    try:
        return ProfileResponse.from_profile(await db.get_profile(user_id))
    except InvalidProfileError as e:
        logger.error(f"Failed to get profile: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    request: ProfileUpdate,
    user_id: str = Depends(get_user_id),
    db: ProfileManager = Depends(get_profile_db),
) -> ProfileResponse:
    """Update the completion credential, model selection or theme."""
    try:
        profile = await db.update_profile(
            user_id,
            api_key=request.api_key,
            selected_model=request.selected_model,
            theme=request.theme,
        )
        return ProfileResponse.from_profile(profile)
    except UnknownModelError as e:
        logger.warning(f"Rejected profile update for user {user_id}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidProfileError as e:
        logger.error(f"Failed to update profile: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/profile/theme/toggle", response_model=ProfileResponse)
async def toggle_theme(
    user_id: str = Depends(get_user_id),
    db: ProfileManager = Depends(get_profile_db),
) -> ProfileResponse:
    """Switch between light and dark theme."""
    try:
        return ProfileResponse.from_profile(await db.toggle_theme(user_id))
    except InvalidProfileError as e:
        logger.error(f"Failed to toggle theme: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/models", response_model=List[ModelInfo])
async def list_models() -> List[ModelInfo]:
    """List the models a user can select."""
    return [ModelInfo(id=model_id, name=name) for model_id, name in AVAILABLE_MODELS.items()]


@router.get("/health", tags=["health"])
async def health() -> dict:
    return {"status": "ok"}
