"""
System smoke test: full API flow in-process with SQLite.
Seeds a small mentorship programme and checks conversation listing, engagement
linkage, search, message history and mentor response times.
Uses a temp file DB so all connections share the same database.
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

# File-based SQLite so all connections share the same DB (in-memory is per-connection)
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
from chat_inspector.config import get_settings
get_settings.cache_clear()

from chat_inspector.database import create_engine, create_session_maker, get_db
from chat_inspector.kernel.models import (
    Base,
    Conversation,
    Engagement,
    GuardianStudent,
    Message,
    User,
    UserEngagement,
)
from chat_inspector.main import app


# Seeding writes through its own engine; the app reads through a read-only one
TEST_ENGINE = create_engine(f"sqlite+aiosqlite:///{TEST_DB_PATH}", read_only=False)
SEED_SESSION_MAKER = create_session_maker(TEST_ENGINE)
APP_SESSION_MAKER = create_session_maker(
    create_engine(f"sqlite+aiosqlite:///{TEST_DB_PATH}", read_only=True)
)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with APP_SESSION_MAKER() as session:
        try:
            yield session
        finally:
            await session.close()


MENTOR = uuid.UUID("11111111-1111-4111-8111-111111111111")
STUDENT = uuid.UUID("22222222-2222-4222-8222-222222222222")
GUARDIAN = uuid.UUID("33333333-3333-4333-8333-333333333333")
STUDENT_TWO = uuid.UUID("44444444-4444-4444-8444-444444444444")
LONE_MENTOR = uuid.UUID("55555555-5555-4555-8555-555555555555")
GUARDIAN_TWO = uuid.UUID("66666666-6666-4666-8666-666666666666")
GHOST = uuid.UUID("99999999-9999-4999-8999-999999999999")  # never stored

ROBOTICS = uuid.UUID("aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa")
WRITING = uuid.UUID("bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb")

GROUP_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000001")
GUARDIAN_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000002")
AMBIGUOUS_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000003")
UNLINKED_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000004")
LEGACY_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000005")
GUARDIANS_CHAT = uuid.UUID("c0000000-0000-4000-8000-000000000006")

T0 = datetime(2025, 3, 1, 12, 0)


def _user(user_uuid, first, last, roles):
    return User(
        uuid=user_uuid,
        first_name=first,
        last_name=last,
        full_name=f"{first} {last}",
        email=f"{first.lower()}@example.com",
        roles=roles,
    )


def _conversation(conversation_uuid, external_id, conversation_type, members, updated_minutes):
    return Conversation(
        uuid=conversation_uuid,
        user_uuids=[str(m) for m in members],
        external_conversation_id=external_id,
        conversation_type=conversation_type,
        created_at=T0,
        updated_at=T0 + timedelta(minutes=updated_minutes),
    )


def _message(conversation_uuid, sender_uuid, minutes, text, deleted=False):
    created = T0 + timedelta(minutes=minutes)
    return Message(
        uuid=uuid.uuid4(),
        conversation_uuid=conversation_uuid,
        sender_uuid=sender_uuid,
        text=text,
        created_at=created,
        updated_at=created,
        deleted_at=created if deleted else None,
    )


async def _seed(session: AsyncSession) -> None:
    session.add_all([
        _user(MENTOR, "Maya", "Okafor", ["mentor"]),
        _user(STUDENT, "Leo", "Brandt", ["student"]),
        _user(GUARDIAN, "Ines", "Brandt", ["guardian"]),
        _user(STUDENT_TWO, "Sam", "Reyes", ["student"]),
        _user(LONE_MENTOR, "Ola", "Nilsen", ["mentor"]),
        _user(GUARDIAN_TWO, "Tomas", "Brandt", ["guardian"]),
        Engagement(uuid=ROBOTICS, title="Robotics Club"),
        Engagement(uuid=WRITING, title="Creative Writing"),
        _conversation(GROUP_CHAT, f"group_group-{ROBOTICS}", "group", [MENTOR, STUDENT], 70),
        _conversation(GUARDIAN_CHAT, f"{GUARDIAN}_user_{MENTOR}", "user", [GUARDIAN, MENTOR], 60),
        _conversation(AMBIGUOUS_CHAT, f"{MENTOR}_user_{STUDENT_TWO}", "user", [MENTOR, STUDENT_TWO], 50),
        _conversation(UNLINKED_CHAT, f"{LONE_MENTOR}_user_{STUDENT}", "user", [LONE_MENTOR, STUDENT, GHOST], 40),
        _conversation(LEGACY_CHAT, "legacy-support-7", "user", [MENTOR], 30),
        _conversation(GUARDIANS_CHAT, f"{GUARDIAN}_user_{GUARDIAN_TWO}", "user", [GUARDIAN, GUARDIAN_TWO], 20),
    ])
    await session.flush()
    session.add_all([
        UserEngagement(engagement_uuid=ROBOTICS, user_uuid=MENTOR),
        UserEngagement(engagement_uuid=ROBOTICS, user_uuid=STUDENT),
        UserEngagement(engagement_uuid=ROBOTICS, user_uuid=STUDENT_TWO),
        UserEngagement(engagement_uuid=WRITING, user_uuid=MENTOR),
        UserEngagement(engagement_uuid=WRITING, user_uuid=STUDENT_TWO),
        GuardianStudent(guardian_uuid=GUARDIAN, student_uuid=STUDENT),
        GuardianStudent(guardian_uuid=GUARDIAN_TWO, student_uuid=STUDENT),
        _message(GROUP_CHAT, STUDENT, 0, "Motor keeps stalling"),
        _message(GROUP_CHAT, MENTOR, 10, "Check the ground wire"),
        _message(GROUP_CHAT, MENTOR, 20, "And the PWM pin"),
        _message(GROUP_CHAT, STUDENT, 30, "nvm", deleted=True),
        _message(GROUP_CHAT, GHOST, 40, "Hello from a removed account"),
        _message(GROUP_CHAT, MENTOR, 70, "Welcome back"),
        _message(GUARDIAN_CHAT, GUARDIAN, 5, "How is Leo doing?"),
    ])
    await session.commit()


@pytest_asyncio.fixture
async def client():
    """Async client against a freshly seeded test DB."""
    async with TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with SEED_SESSION_MAKER() as session:
        await _seed(session)

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


def _by_uuid(conversations):
    return {c["uuid"]: c for c in conversations}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Health endpoint responds and echoes the request id."""
    r = await client.get("/health", headers={"X-Request-ID": "smoke-1"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"
    assert r.headers["X-Request-ID"] == "smoke-1"


@pytest.mark.asyncio
async def test_unsafe_request_id_is_replaced(client: AsyncClient):
    r = await client.get("/health", headers={"X-Request-ID": "bad id; forged=1"})
    assert r.status_code == 200
    request_id = r.headers["X-Request-ID"]
    assert request_id != "bad id; forged=1"
    assert uuid.UUID(request_id)


@pytest.mark.asyncio
async def test_list_conversations_ordered_by_update(client: AsyncClient):
    r = await client.get("/api/v1/conversations")
    assert r.status_code == 200, r.text
    uuids = [c["uuid"] for c in r.json()]
    assert uuids == [
        str(GROUP_CHAT),
        str(GUARDIAN_CHAT),
        str(AMBIGUOUS_CHAT),
        str(UNLINKED_CHAT),
        str(LEGACY_CHAT),
        str(GUARDIANS_CHAT),
    ]


@pytest.mark.asyncio
async def test_engagement_linkage(client: AsyncClient):
    r = await client.get("/api/v1/conversations")
    conversations = _by_uuid(r.json())

    group = conversations[str(GROUP_CHAT)]
    assert group["engagementUuid"] == str(ROBOTICS)
    assert group["engagement"] == {"uuid": str(ROBOTICS), "title": "Robotics Club"}
    assert group["engagements"] == [{"uuid": str(ROBOTICS), "title": "Robotics Club"}]

    # Guardian is not a member but guards a Robotics student
    guardian = conversations[str(GUARDIAN_CHAT)]
    assert guardian["engagementUuid"] == str(ROBOTICS)

    ambiguous = conversations[str(AMBIGUOUS_CHAT)]
    assert ambiguous["engagementUuid"] is None
    assert ambiguous["engagement"] is None
    assert {e["title"] for e in ambiguous["engagements"]} == {"Robotics Club", "Creative Writing"}

    for key in (str(UNLINKED_CHAT), str(LEGACY_CHAT)):
        assert conversations[key]["engagementUuid"] is None
        assert conversations[key]["engagement"] is None
        assert conversations[key]["engagements"] == []


@pytest.mark.asyncio
async def test_guardians_of_a_member_student_are_linked(client: AsyncClient):
    """Two non-member guardians of a Robotics student resolve alone and in a batch."""
    r = await client.get(f"/api/v1/conversations/{GUARDIANS_CHAT}")
    assert r.status_code == 200
    single = r.json()
    assert single["engagementUuid"] == str(ROBOTICS)
    assert single["engagements"] == [{"uuid": str(ROBOTICS), "title": "Robotics Club"}]

    r = await client.get("/api/v1/conversations")
    listed = _by_uuid(r.json())[str(GUARDIANS_CHAT)]
    assert listed["engagementUuid"] == single["engagementUuid"]
    assert listed["engagements"] == single["engagements"]


@pytest.mark.asyncio
async def test_app_sessions_are_read_only(client: AsyncClient):
    async with APP_SESSION_MAKER() as session:
        r = await session.execute(text("SELECT COUNT(*) FROM engagements"))
        assert r.scalar_one() == 2
        with pytest.raises(OperationalError):
            await session.execute(text("DELETE FROM engagements"))

    async with SEED_SESSION_MAKER() as session:
        r = await session.execute(text("SELECT COUNT(*) FROM engagements"))
        assert r.scalar_one() == 2


@pytest.mark.asyncio
async def test_roster_details(client: AsyncClient):
    r = await client.get(f"/api/v1/conversations/{UNLINKED_CHAT}")
    assert r.status_code == 200
    users = {u["uuid"]: u for u in r.json()["users"]}

    assert users[str(STUDENT)]["details"]["fullName"] == "Leo Brandt"
    assert users[str(STUDENT)]["details"]["roles"] == ["student"]
    assert users[str(GHOST)]["details"] is None


@pytest.mark.asyncio
async def test_get_conversation_not_found(client: AsyncClient):
    r = await client.get(f"/api/v1/conversations/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["detail"] == "Conversation not found"


@pytest.mark.asyncio
async def test_get_conversation_rejects_malformed_uuid(client: AsyncClient):
    r = await client.get("/api/v1/conversations/not-a-uuid")
    assert r.status_code == 422
    assert r.json()["detail"] == "Validation error"


@pytest.mark.asyncio
async def test_search_by_engagement(client: AsyncClient):
    r = await client.get("/api/v1/conversations", params={"engagement": "robotics"})
    assert r.status_code == 200
    assert {c["uuid"] for c in r.json()} == {
        str(GROUP_CHAT),
        str(GUARDIAN_CHAT),
        str(AMBIGUOUS_CHAT),
        str(GUARDIANS_CHAT),
    }


@pytest.mark.asyncio
async def test_search_by_user_and_engagement(client: AsyncClient):
    r = await client.get("/api/v1/conversations", params={"user": "ines@example"})
    assert [c["uuid"] for c in r.json()] == [str(GUARDIAN_CHAT), str(GUARDIANS_CHAT)]

    r = await client.get(
        "/api/v1/conversations",
        params={"user": "sam", "engagement": "writing"},
    )
    assert [c["uuid"] for c in r.json()] == [str(AMBIGUOUS_CHAT)]


@pytest.mark.asyncio
async def test_blank_search_returns_nothing(client: AsyncClient):
    r = await client.get("/api/v1/conversations", params={"engagement": " "})
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_messages_with_mentor_response_time(client: AsyncClient):
    r = await client.get(f"/api/v1/messages/{GROUP_CHAT}")
    assert r.status_code == 200, r.text
    data = r.json()

    assert data["totalCount"] == 5
    texts = [m["text"] for m in data["messages"]]
    assert "nvm" not in texts
    assert texts[0] == "Motor keeps stalling"
    assert texts[-1] == "Welcome back"

    ghost_message = data["messages"][3]
    assert ghost_message["senderUuid"] == str(GHOST)
    assert ghost_message["sender"] is None

    timing = data["mentorResponseTime"]
    assert timing["responseCount"] == 3
    assert [s["responseTimeMs"] for s in timing["responseTimes"]] == [
        10 * 60 * 1000,
        20 * 60 * 1000,
        30 * 60 * 1000,
    ]
    assert timing["averageTimeMs"] == 20 * 60 * 1000
    assert timing["averageTimeFormatted"] == "00:20"
    first = timing["responseTimes"][0]
    assert first["precedingNonMentorMessageUuid"] == data["messages"][0]["uuid"]
    assert first["mentorMessageUuid"] == data["messages"][1]["uuid"]


@pytest.mark.asyncio
async def test_messages_without_mentor_reply(client: AsyncClient):
    r = await client.get(f"/api/v1/messages/{GUARDIAN_CHAT}")
    data = r.json()
    assert data["totalCount"] == 1
    assert data["mentorResponseTime"] is None


@pytest.mark.asyncio
async def test_messages_for_unknown_conversation(client: AsyncClient):
    r = await client.get(f"/api/v1/messages/{uuid.uuid4()}")
    assert r.status_code == 200
    assert r.json() == {"messages": [], "totalCount": 0, "mentorResponseTime": None}


@pytest.mark.asyncio
async def test_latest_messages(client: AsyncClient):
    r = await client.get("/api/v1/conversations/latest-messages")
    assert r.status_code == 200, r.text
    latest = {item["conversationUuid"]: item for item in r.json()}

    assert set(latest) == {str(GROUP_CHAT), str(GUARDIAN_CHAT)}

    group = latest[str(GROUP_CHAT)]
    assert group["messageCount"] == 5
    assert group["latestMessage"]["senderUuid"] == str(MENTOR)
    assert group["latestMessage"]["sender"] == {"uuid": str(MENTOR), "roles": ["mentor"]}

    assert latest[str(GUARDIAN_CHAT)]["latestMessage"]["sender"]["roles"] == ["guardian"]
