"""
Conversation endpoints.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from chat_inspector.api.deps import Directory
from chat_inspector.engines.search import filter_conversations
from chat_inspector.logging_config import get_logger
from chat_inspector.schemas.conversation import ConversationLatestMessage, ConversationResponse

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    directory: Directory,
    engagement: Optional[str] = Query(None, description="Engagement UUID or title fragment"),
    user: Optional[str] = Query(None, description="Participant UUID, email or name fragment"),
):
    """
    List conversations with their roster and engagement linkage.

    With ``engagement`` and/or ``user`` the list is narrowed to matching
    conversations; blank queries match nothing.
    """
    conversations = await directory.list_conversations()

    if engagement is None and user is None:
        return conversations

    filtered = filter_conversations(conversations, engagement, user)
    logger.info(
        "Conversation search",
        extra={"matched": len(filtered), "total": len(conversations)},
    )
    return filtered


@router.get("/latest-messages", response_model=List[ConversationLatestMessage])
async def list_latest_messages(directory: Directory):
    """Latest message (and message count) for every conversation with messages."""
    return await directory.list_latest_messages()


@router.get("/{conversation_uuid}", response_model=ConversationResponse)
async def get_conversation(conversation_uuid: UUID, directory: Directory):
    """Single conversation with roster and engagement linkage."""
    conversation = await directory.get_conversation(conversation_uuid)
    if conversation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )
    return conversation
