"""
Conversation and message models mirrored from the chat provider.
"""

from uuid import UUID
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chat_inspector.kernel.models.base import Base, SoftDeleteMixin, TimestampMixin, UuidKeyMixin


class Conversation(Base, UuidKeyMixin, TimestampMixin):
    """
    A chat conversation.

    ``external_conversation_id`` is the chat provider's identifier. It encodes
    either the engagement (group chats) or the two participants (direct chats).
    """
    
    __tablename__ = "conversations"

    user_uuids: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    external_conversation_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    conversation_type: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )  # "group" | "user"


class Message(Base, UuidKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Single message within a conversation."""
    
    __tablename__ = "messages"

    conversation_uuid: Mapped[UUID] = mapped_column(
        ForeignKey("conversations.uuid", ondelete="CASCADE"),
        nullable=False,
    )
    # No FK: senders may have been removed from the users table
    sender_uuid: Mapped[UUID] = mapped_column(nullable=False)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    message_type: Mapped[str] = mapped_column(String(50), nullable=False, default="text")
    media_mime_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    media_name: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    media_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    reactions: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    reacted_by: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    read_by: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    read_by_all: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    
    __table_args__ = (
        Index(
            "ix_messages_conversation_created",
            "conversation_uuid", "created_at",
        ),
    )
