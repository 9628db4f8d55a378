"""
API v1 routes.
"""

from fastapi import APIRouter

from chat_inspector.api.v1 import conversations, messages

router = APIRouter()

router.include_router(conversations.router, prefix="/conversations", tags=["Conversations"])
router.include_router(messages.router, prefix="/messages", tags=["Messages"])
