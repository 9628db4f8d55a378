"""
Responsiveness Engine - mentor response-time analytics.
"""

from chat_inspector.engines.responsiveness.response_time import (
    MentorResponseTime,
    ResponseSample,
    calculate_mentor_average_response_time,
    format_ms_to_hhmm,
    is_mentor_message,
)

__all__ = [
    "MentorResponseTime",
    "ResponseSample",
    "calculate_mentor_average_response_time",
    "format_ms_to_hhmm",
    "is_mentor_message",
]
