"""
Directory - read-only data access for the dashboard.
"""

from chat_inspector.kernel.directory.directory_service import ConversationDirectory

__all__ = ["ConversationDirectory"]
