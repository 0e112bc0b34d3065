"""
Conversations Router

Stores AI assistant chat sessions and their turns. Generating assistant
replies is left to the client; this router only records what happened.

- JWT authentication required, path user_id must match the token
- Messages are append-only
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlmodel import Session

from app.db.config import get_session as get_db
from app.middleware.auth import verify_user_access
from app.schemas.conversation import (
    ConversationContext,
    ConversationCreate,
    ConversationListItem,
    ConversationListResponse,
    ConversationMessagesResponse,
    ConversationRead,
    MessageCreate,
    MessageRead,
)
from app.services.conversation_service import ConversationService

import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Conversations"])  # No prefix since main.py adds /api prefix

PREVIEW_LENGTH = 60


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def _get_owned(service: ConversationService, conversation_id: str, user_id: str):
    conversation = service.get_conversation(conversation_id, user_id)
    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found"
        )
    return conversation


@router.post("/{user_id}/conversations", response_model=ConversationRead, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    data: ConversationCreate,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    """Start a chat session, optionally with case records as context."""
    conversation = service.create_conversation(user_id, data)
    logger.info(f"Conversation {conversation.id} created for user {user_id}")
    return ConversationRead.model_validate(conversation)


@router.get("/{user_id}/conversations", response_model=ConversationListResponse)
async def get_conversations(
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    """
    Get list of user's conversations with message counts and last message preview

    Args:
        user_id: User ID from path (must match JWT token)
        service: Conversation service bound to the request session

    Returns:
        ConversationListResponse with list of conversations
    """
    conversation_items = []
    for conv in service.get_user_conversations(user_id):
        last = service.get_last_message(conv.id)
        last_message = last.content if last else None

        # Truncate last message for preview
        if last_message and len(last_message) > PREVIEW_LENGTH:
            last_message = last_message[:PREVIEW_LENGTH] + "..."

        conversation_items.append(ConversationListItem(
            id=conv.id,
            title=conv.title,
            created_at=conv.created_at,
            updated_at=conv.updated_at,
            message_count=service.count_messages(conv.id),
            last_message=last_message
        ))

    return ConversationListResponse(conversations=conversation_items)


@router.get("/{user_id}/conversations/{conversation_id}", response_model=ConversationRead)
async def get_conversation(
    conversation_id: str,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    return ConversationRead.model_validate(_get_owned(service, conversation_id, user_id))


@router.post("/{user_id}/conversations/{conversation_id}/context", response_model=ConversationRead)
async def attach_context(
    conversation_id: str,
    additions: ConversationContext,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    """Attach documents, incidents or communications to the conversation context."""
    conversation = service.attach_context(conversation_id, user_id, additions)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return ConversationRead.model_validate(conversation)


@router.get("/{user_id}/conversations/{conversation_id}/messages", response_model=ConversationMessagesResponse)
async def get_conversation_messages(
    conversation_id: str,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
    limit: int = Query(50, ge=1, le=500),
):
    """Messages of one conversation, oldest first."""
    _get_owned(service, conversation_id, user_id)
    messages = service.get_messages(conversation_id, limit=limit)
    return ConversationMessagesResponse(messages=[MessageRead.model_validate(m) for m in messages])


@router.post("/{user_id}/conversations/{conversation_id}/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def add_conversation_message(
    conversation_id: str,
    data: MessageCreate,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    """Append one turn (user, assistant or system) to the conversation."""
    _get_owned(service, conversation_id, user_id)
    return MessageRead.model_validate(service.add_message(conversation_id, data))


@router.delete("/{user_id}/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(verify_user_access),
    service: ConversationService = Depends(get_conversation_service),
):
    if not service.delete_conversation(conversation_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
