"""
Engagement (mentorship programme unit) and membership models.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from chat_inspector.kernel.models.base import Base, TimestampMixin, UuidKeyMixin, generate_uuid


class Engagement(Base, UuidKeyMixin, TimestampMixin):
    """A named engagement linking mentors, students and their guardians."""
    
    __tablename__ = "engagements"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    
    def __repr__(self) -> str:
        return f"<Engagement {self.title}>"


class UserEngagement(Base):
    """Membership row: one user in one engagement."""
    
    __tablename__ = "users_engagements"
    
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    engagement_uuid: Mapped[UUID] = mapped_column(
        ForeignKey("engagements.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_uuid: Mapped[UUID] = mapped_column(
        ForeignKey("users.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
