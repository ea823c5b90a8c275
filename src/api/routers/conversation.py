"""Conversation router for conversations, messages, sending and transfer."""

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from api.context import UserContext
from api.dependencies import (
    get_conversation_db,
    get_send_guard,
    get_send_pipeline,
    get_transfer_service,
    get_user_context,
    get_user_id,
)
from api.models import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    ConversationUpdate,
    MessageListResponse,
    MessageResponse,
    SendRequest,
    SendResponse,
)
from api.services.send_pipeline import SendPipeline, SendState
from api.services.transfer_service import ImportFormatError, TransferService
from completion.exceptions import CompletionError
from conversation_store.conversation_manager import ConversationManager
from conversation_store.exceptions import ConversationNotFoundError, PersistenceError
from utils.logging import logger
from utils.send_guard import SendGuard

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("/", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    request: ConversationCreate,
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> ConversationResponse:
    """Create a new, empty conversation."""
    try:
        conversation = await db.create_conversation(user_id=user_id, title=request.title)
        return ConversationResponse.from_conversation(conversation)
    except PersistenceError as e:
        logger.error(f"Failed to create conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/", response_model=ConversationListResponse)
async def list_conversations(
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> ConversationListResponse:
    """List the user's conversations, most recently updated first."""
    try:
        conversations = await db.list_conversations(user_id)
        return ConversationListResponse(
            conversations=[ConversationResponse.from_conversation(conv) for conv in conversations],
            total=len(conversations),
        )
    except PersistenceError as e:
        logger.error(f"Failed to list conversations: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/import", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def import_conversation(
    request: Request,
    user_id: str = Depends(get_user_id),
    transfer: TransferService = Depends(get_transfer_service),
) -> ConversationResponse:
    """Create a new conversation from an exported document sent as the request body."""
    body = await request.body()
    try:
        conversation = await transfer.import_conversation(user_id, body)
        return ConversationResponse.from_conversation(conversation)
    except ImportFormatError as e:
        logger.warning(f"Rejected import for user {user_id}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Failed to import conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> ConversationResponse:
    """Get a specific conversation."""
    try:
        conversation = await db.get_conversation(user_id, conversation_id)
        return ConversationResponse.from_conversation(conversation)
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except PersistenceError as e:
        logger.error(f"Failed to get conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: UUID,
    request: ConversationUpdate,
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> ConversationResponse:
    """Rename a conversation."""
    try:
        await db.update_conversation(user_id=user_id, conversation_id=conversation_id, title=request.title)
        conversation = await db.get_conversation(user_id, conversation_id)
        return ConversationResponse.from_conversation(conversation)
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except PersistenceError as e:
        logger.error(f"Failed to update conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: UUID,
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> Response:
    """Delete a conversation and all its messages."""
    try:
        await db.delete_conversation(user_id, conversation_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except PersistenceError as e:
        logger.error(f"Failed to delete conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
    conversation_id: UUID,
    user_id: str = Depends(get_user_id),
    db: ConversationManager = Depends(get_conversation_db),
) -> MessageListResponse:
    """List all messages in a conversation, oldest first."""
    try:
        messages = await db.list_messages(user_id, conversation_id)
        return MessageListResponse(messages=[MessageResponse.from_message(msg) for msg in messages], total=len(messages))
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except PersistenceError as e:
        logger.error(f"Failed to list messages: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/{conversation_id}/send", response_model=SendResponse)
async def send_message(
    conversation_id: UUID,
    request: SendRequest,
    context: UserContext = Depends(get_user_context),
    pipeline: SendPipeline = Depends(get_send_pipeline),
    guard: SendGuard = Depends(get_send_guard),
) -> SendResponse:
    """Send a user message and store the assistant's reply."""
    if not guard.acquire(conversation_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A message is already being sent in this conversation")

    try:
        result = await pipeline.send(context, conversation_id, request.content.strip())
    finally:
        guard.release(conversation_id)

    if result.state == SendState.PARTIALLY_FAILED:
        detail = {"message": str(result.error), "failed_at": result.failed_at.value}
        if isinstance(result.error, CompletionError):
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
        if isinstance(result.error, ConversationNotFoundError):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

    return SendResponse(
        state=result.state.value,
        user_message=MessageResponse.from_message(result.user_message) if result.user_message else None,
        assistant_message=MessageResponse.from_message(result.assistant_message) if result.assistant_message else None,
        title=result.title,
        empty_reply=result.empty_reply,
    )


@router.get("/{conversation_id}/export")
async def export_conversation(
    conversation_id: UUID,
    user_id: str = Depends(get_user_id),
    transfer: TransferService = Depends(get_transfer_service),
) -> Response:
    """Download a conversation and its messages as a JSON document."""
    try:
        document = await transfer.export_conversation(user_id, conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except PersistenceError as e:
        logger.error(f"Failed to export conversation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    filename = transfer.export_filename(document)
    return Response(
        content=transfer.dump_export(document),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
