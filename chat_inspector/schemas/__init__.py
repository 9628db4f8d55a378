"""
Pydantic schemas for API responses.
"""

from chat_inspector.schemas.common import CamelModel, HealthResponse
from chat_inspector.schemas.conversation import (
    ConversationLatestMessage,
    ConversationResponse,
    ConversationUser,
    EngagementRef,
    LatestMessage,
    LatestMessageSender,
    UserDetails,
)
from chat_inspector.schemas.message import (
    ConversationMessagesResponse,
    MentorResponseTimeResponse,
    MessageResponse,
    MessageSender,
    ResponseTimeSampleResponse,
)

__all__ = [
    "CamelModel",
    "HealthResponse",
    "ConversationLatestMessage",
    "ConversationResponse",
    "ConversationUser",
    "EngagementRef",
    "LatestMessage",
    "LatestMessageSender",
    "UserDetails",
    "ConversationMessagesResponse",
    "MentorResponseTimeResponse",
    "MessageResponse",
    "MessageSender",
    "ResponseTimeSampleResponse",
]
