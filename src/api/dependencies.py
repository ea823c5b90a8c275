"""API dependencies."""

from fastapi import Depends, Header, Request

from api.context import UserContext
from api.services.send_pipeline import SendPipeline
from api.services.transfer_service import TransferService
from completion.client import CompletionClient
from conversation_store.conversation_manager import ConversationManager
from conversation_store.profile_manager import ProfileManager
from database.manager import DatabaseManager
from utils.send_guard import SendGuard


def get_database_manager(request: Request) -> DatabaseManager:
    """Dependency for the database manager created at startup."""
    return request.app.state.database_manager


def get_completion_client(request: Request) -> CompletionClient:
    """Dependency for the shared completion client."""
    return request.app.state.completion_client


def get_send_guard(request: Request) -> SendGuard:
    """Dependency for the in-flight send registry."""
    return request.app.state.send_guard


async def get_conversation_db(db_manager: DatabaseManager = Depends(get_database_manager)) -> ConversationManager:
    """Dependency for getting conversation manager."""
    return await db_manager.setup_conversation_manager()


async def get_profile_db(db_manager: DatabaseManager = Depends(get_database_manager)) -> ProfileManager:
    """Dependency for getting profile manager."""
    return await db_manager.setup_profile_manager()


def get_user_id(x_user_id: str = Header(..., alias="X-User-Id", min_length=1)) -> str:
    """Caller identity, set by the authentication layer in front of the API."""
    return x_user_id


async def get_user_context(
    user_id: str = Depends(get_user_id),
    profile_db: ProfileManager = Depends(get_profile_db),
) -> UserContext:
    """Dependency for the per-request user context."""
    profile = await profile_db.get_profile(user_id)
    return UserContext(user_id=user_id, profile=profile)


def get_send_pipeline(
    conversation_db: ConversationManager = Depends(get_conversation_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> SendPipeline:
    return SendPipeline(conversation_db, completion_client)


def get_transfer_service(conversation_db: ConversationManager = Depends(get_conversation_db)) -> TransferService:
    return TransferService(conversation_db)
