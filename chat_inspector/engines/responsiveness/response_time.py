"""
Mentor Response-Time Analyzer.

A response sample is a mentor message paired with the nearest earlier message
whose sender is not a mentor (senders that no longer resolve count as
non-mentors). Several mentor messages after the same non-mentor message each
produce their own sample against it.

Samples with a latency that is not strictly positive are dropped, which
guards against clock skew and out-of-order input. No samples means there is
not enough data, so the analyzer returns None rather than a zero average.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from chat_inspector.kernel.models.user import UserRole
from chat_inspector.logging_config import get_logger

logger = get_logger(__name__)

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


class ResponseSample(BaseModel):
    """One mentor reply and the message it answered."""

    response_time_ms: int
    mentor_message: Any
    preceding_non_mentor_message: Any


class MentorResponseTime(BaseModel):
    """Average mentor responsiveness over one conversation."""

    average_time_ms: float
    average_time_formatted: str
    response_count: int
    response_times: List[ResponseSample]


def format_ms_to_hhmm(ms: float) -> str:
    """
    Render a duration as zero-padded HH:MM.

    Minutes and hours are floored. Hours are not wrapped at 24, so 30 hours
    is "30:00".
    """
    hours = int(ms // MS_PER_HOUR)
    minutes = int((ms % MS_PER_HOUR) // MS_PER_MINUTE)
    return f"{hours:02d}:{minutes:02d}"


def _epoch_ms(value: Union[datetime, str]) -> int:
    """Milliseconds since the epoch. Naive datetimes are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MS


def _field(item: Any, name: str) -> Any:
    """Read a field from an ORM/namespace object or a decoded JSON mapping."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def is_mentor_message(message: Any) -> bool:
    sender = _field(message, "sender")
    if sender is None:
        return False
    return UserRole.MENTOR.value in (_field(sender, "roles") or ())


def calculate_mentor_average_response_time(
    messages: Sequence[Any],
) -> Optional[MentorResponseTime]:
    """
    Calculate the average mentor response time for one conversation.

    Args:
        messages: Messages sorted by created_at ascending, as objects or
            mappings. Each needs ``created_at`` and ``sender`` (with
            ``roles``, or None).

    Returns:
        MentorResponseTime, or None when no valid response exists
    """
    if not messages:
        return None

    samples: List[ResponseSample] = []
    # The nearest preceding non-mentor message only moves forward, so one pass suffices
    last_non_mentor = None

    for message in messages:
        if not is_mentor_message(message):
            last_non_mentor = message
            continue
        if last_non_mentor is None:
            continue

        response_time_ms = (
            _epoch_ms(_field(message, "created_at"))
            - _epoch_ms(_field(last_non_mentor, "created_at"))
        )
        if response_time_ms > 0:
            samples.append(ResponseSample(
                response_time_ms=response_time_ms,
                mentor_message=message,
                preceding_non_mentor_message=last_non_mentor,
            ))

    if not samples:
        return None

    average_time_ms = sum(s.response_time_ms for s in samples) / len(samples)

    logger.debug(
        "Mentor response time calculated",
        extra={"response_count": len(samples), "average_time_ms": average_time_ms},
    )

    return MentorResponseTime(
        average_time_ms=average_time_ms,
        average_time_formatted=format_ms_to_hhmm(average_time_ms),
        response_count=len(samples),
        response_times=samples,
    )
