"""
Conversation schemas.
"""

from uuid import UUID
from datetime import datetime
from typing import List, Optional

from chat_inspector.schemas.common import CamelModel


class EngagementRef(CamelModel):
    """Engagement as shown next to a conversation."""
    
    uuid: str
    title: str


class UserDetails(CamelModel):
    """Participant details; missing entirely when the user no longer resolves."""
    
    uuid: UUID
    first_name: str
    last_name: str
    full_name: str
    roles: List[str] = []
    email: str


class ConversationUser(CamelModel):
    uuid: str
    details: Optional[UserDetails] = None


class ConversationResponse(CamelModel):
    """Conversation with roster and derived engagement linkage."""
    
    uuid: UUID
    user_uuids: List[str]
    created_at: datetime
    updated_at: datetime
    external_conversation_id: str
    conversation_type: Optional[str] = None
    engagement_uuid: Optional[str] = None
    engagement: Optional[EngagementRef] = None
    engagements: List[EngagementRef] = []
    users: List[ConversationUser] = []


class LatestMessageSender(CamelModel):
    uuid: UUID
    roles: List[str] = []


class LatestMessage(CamelModel):
    uuid: UUID
    sender_uuid: UUID
    created_at: datetime
    sender: Optional[LatestMessageSender] = None


class ConversationLatestMessage(CamelModel):
    """Most recent message of one conversation."""
    
    conversation_uuid: UUID
    message_count: int = 0
    latest_message: LatestMessage
