"""
Pytest fixtures for chat inspector tests.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Callable, List, Optional

import pytest

from chat_inspector.engines.engagement import (
    ConversationSnapshot,
    EngagementMembership,
    EngagementSummary,
    GuardianLink,
)


MENTOR = "11111111-1111-4111-8111-111111111111"
STUDENT = "22222222-2222-4222-8222-222222222222"
GUARDIAN = "33333333-3333-4333-8333-333333333333"
OTHER_MENTOR = "44444444-4444-4444-8444-444444444444"
OUTSIDER = "55555555-5555-4555-8555-555555555555"

ROBOTICS = EngagementSummary(uuid="aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa", title="Robotics Club")
WRITING = EngagementSummary(uuid="bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb", title="Creative Writing")

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def group_conversation(engagement_uuid: str, uuid: str = "conv-group") -> ConversationSnapshot:
    return ConversationSnapshot(
        uuid=uuid,
        external_conversation_id=f"group_group-{engagement_uuid}",
        conversation_type="group",
    )


def pair_conversation(user_a: str, user_b: str, uuid: str = "conv-pair") -> ConversationSnapshot:
    return ConversationSnapshot(
        uuid=uuid,
        external_conversation_id=f"{user_a}_user_{user_b}",
        conversation_type="user",
        user_uuids=(user_a, user_b),
    )


@pytest.fixture
def user_roles() -> dict:
    """Role lists keyed by user UUID."""
    return {
        MENTOR: ["mentor"],
        STUDENT: ["student"],
        GUARDIAN: ["guardian"],
        OTHER_MENTOR: ["mentor"],
        OUTSIDER: ["student"],
    }


@pytest.fixture
def guardian_links() -> List[GuardianLink]:
    return [GuardianLink(guardian_uuid=GUARDIAN, student_uuid=STUDENT)]


@pytest.fixture
def robotics_memberships() -> List[EngagementMembership]:
    """Robotics: MENTOR + STUDENT (GUARDIAN is linked, not a member)."""
    return [
        EngagementMembership(engagement_uuid=ROBOTICS.uuid, user_uuid=MENTOR),
        EngagementMembership(engagement_uuid=ROBOTICS.uuid, user_uuid=STUDENT),
    ]


@pytest.fixture
def writing_memberships() -> List[EngagementMembership]:
    """Writing: MENTOR + STUDENT again, so the pair is ambiguous."""
    return [
        EngagementMembership(engagement_uuid=WRITING.uuid, user_uuid=MENTOR),
        EngagementMembership(engagement_uuid=WRITING.uuid, user_uuid=STUDENT),
    ]


@pytest.fixture
def make_message() -> Callable[..., SimpleNamespace]:
    """Build a message at T0 + offset with a sender holding the given roles (None = unknown user)."""
    counter = {"n": 0}

    def _make(offset_ms: int, roles: Optional[List[str]]) -> SimpleNamespace:
        counter["n"] += 1
        sender = SimpleNamespace(roles=roles) if roles is not None else None
        return SimpleNamespace(
            uuid=f"msg-{counter['n']}",
            created_at=T0 + timedelta(milliseconds=offset_ms),
            sender=sender,
        )

    return _make
