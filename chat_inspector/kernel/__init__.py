"""
Kernel Layer

Data models of the chat store and the read-only directory over them.
The inspector never writes: all mutation happens in the systems that own
the store.
"""

from chat_inspector.kernel.models import (
    Conversation,
    Engagement,
    GuardianStudent,
    Message,
    User,
    UserEngagement,
    UserRole,
)

__all__ = [
    "Conversation",
    "Engagement",
    "GuardianStudent",
    "Message",
    "User",
    "UserEngagement",
    "UserRole",
]
