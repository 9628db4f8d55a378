"""
Base model with common fields and utilities.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, func, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> UUID:
    """Generate a new UUID."""
    return uuid4()


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    
    # Generic Uuid type so the same models run on PostgreSQL and SQLite
    type_annotation_map = {
        UUID: Uuid(),
    }


class UuidKeyMixin:
    """Primary key column named ``uuid``, as used by the chat store's entity tables."""
    
    uuid: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """Rows removed upstream keep a deleted_at stamp and are filtered out on read."""
    
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
