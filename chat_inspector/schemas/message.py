"""
Message and responsiveness schemas.
"""

from uuid import UUID
from datetime import datetime
from typing import List, Optional

from chat_inspector.schemas.common import CamelModel


class MessageSender(CamelModel):
    uuid: UUID
    first_name: str
    last_name: str
    full_name: str
    roles: List[str] = []
    email: str
    profile_picture_url: Optional[str] = None


class MessageResponse(CamelModel):
    """Message with its resolved sender (None for unknown users)."""
    
    uuid: UUID
    sender_uuid: UUID
    text: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    message_type: str
    media_mime_type: Optional[str] = None
    media_name: Optional[str] = None
    media_url: Optional[str] = None
    reactions: List[str] = []
    reacted_by: List[str] = []
    read_by: List[str] = []
    read_by_all: bool = False
    sender: Optional[MessageSender] = None


class ResponseTimeSampleResponse(CamelModel):
    response_time_ms: int
    mentor_message_uuid: UUID
    preceding_non_mentor_message_uuid: UUID


class MentorResponseTimeResponse(CamelModel):
    """Average mentor response time; absent when there is not enough data."""
    
    average_time_ms: float
    average_time_formatted: str
    response_count: int
    response_times: List[ResponseTimeSampleResponse]


class ConversationMessagesResponse(CamelModel):
    messages: List[MessageResponse]
    total_count: int
    mentor_response_time: Optional[MentorResponseTimeResponse] = None
