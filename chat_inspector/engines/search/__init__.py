"""
Search Engine - dashboard conversation search.
"""

from chat_inspector.engines.search.conversation_filter import (
    filter_conversations,
    matches_engagement,
    matches_user,
)

__all__ = [
    "filter_conversations",
    "matches_engagement",
    "matches_user",
]
