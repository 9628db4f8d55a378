"""
Kernel Data Models

SQLAlchemy models for the chat store. The inspector only ever reads them.
"""

from chat_inspector.kernel.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UuidKeyMixin,
    generate_uuid,
)
from chat_inspector.kernel.models.user import User, UserRole, GuardianStudent
from chat_inspector.kernel.models.engagement import Engagement, UserEngagement
from chat_inspector.kernel.models.conversation import Conversation, Message

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "UuidKeyMixin",
    "generate_uuid",
    # Users
    "User",
    "UserRole",
    "GuardianStudent",
    # Engagements
    "Engagement",
    "UserEngagement",
    # Conversations
    "Conversation",
    "Message",
]
