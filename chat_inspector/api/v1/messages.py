"""
Message endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter

from chat_inspector.api.deps import Directory
from chat_inspector.engines.responsiveness import (
    MentorResponseTime,
    calculate_mentor_average_response_time,
)
from chat_inspector.schemas.message import (
    ConversationMessagesResponse,
    MentorResponseTimeResponse,
    ResponseTimeSampleResponse,
)

router = APIRouter()


def _response_time_summary(
    result: Optional[MentorResponseTime],
) -> Optional[MentorResponseTimeResponse]:
    if result is None:
        return None
    return MentorResponseTimeResponse(
        average_time_ms=result.average_time_ms,
        average_time_formatted=result.average_time_formatted,
        response_count=result.response_count,
        response_times=[
            ResponseTimeSampleResponse(
                response_time_ms=sample.response_time_ms,
                mentor_message_uuid=sample.mentor_message.uuid,
                preceding_non_mentor_message_uuid=sample.preceding_non_mentor_message.uuid,
            )
            for sample in result.response_times
        ],
    )


@router.get("/{conversation_uuid}", response_model=ConversationMessagesResponse)
async def get_conversation_messages(conversation_uuid: UUID, directory: Directory):
    """
    Message history of a conversation, oldest first, with mentor responsiveness.

    An unknown conversation yields an empty history rather than 404.
    """
    messages = await directory.get_conversation_messages(conversation_uuid)
    return ConversationMessagesResponse(
        messages=messages,
        total_count=len(messages),
        mentor_response_time=_response_time_summary(
            calculate_mentor_average_response_time(messages)
        ),
    )
