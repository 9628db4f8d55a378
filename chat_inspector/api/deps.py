"""
FastAPI dependencies for database sessions and request metadata.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chat_inspector.database import get_db
from chat_inspector.kernel.directory import ConversationDirectory


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_directory(db: DbSession) -> ConversationDirectory:
    """Directory bound to the request's session."""
    return ConversationDirectory(db)


Directory = Annotated[ConversationDirectory, Depends(get_directory)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)
