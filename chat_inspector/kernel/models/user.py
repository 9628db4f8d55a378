"""
User and guardian relationship models.
"""

from uuid import UUID
from enum import Enum
from typing import List, Optional

from sqlalchemy import ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chat_inspector.kernel.models.base import Base, TimestampMixin, UuidKeyMixin, generate_uuid


class UserRole(str, Enum):
    """Roles a user can hold. A user may hold several at once."""
    MENTOR = "mentor"
    STUDENT = "student"
    GUARDIAN = "guardian"


class User(Base, UuidKeyMixin, TimestampMixin):
    """Platform user (mentor, student, guardian or any combination)."""
    
    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
    )
    roles: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    profile_picture_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )
    
    def __repr__(self) -> str:
        return f"<User {self.email}>"


class GuardianStudent(Base):
    """Directed link from a guardian to one of their students."""
    
    __tablename__ = "guardian_students"
    
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    guardian_uuid: Mapped[UUID] = mapped_column(
        ForeignKey("users.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_uuid: Mapped[UUID] = mapped_column(
        ForeignKey("users.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    __table_args__ = (
        UniqueConstraint("guardian_uuid", "student_uuid", name="uq_guardian_student"),
    )
