"""Seed a local development database with a small mentorship programme.

Usage:
    DATABASE_URL=sqlite+aiosqlite:///./chat_dev.db python scripts/seed_demo_data.py
"""
import asyncio
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, ".")

from chat_inspector.config import get_settings
from chat_inspector.database import create_engine, create_session_maker, init_db
from chat_inspector.kernel.models import (
    Conversation,
    Engagement,
    GuardianStudent,
    Message,
    User,
    UserEngagement,
    generate_uuid,
)


def _user(first: str, last: str, roles: list) -> User:
    return User(
        uuid=generate_uuid(),
        first_name=first,
        last_name=last,
        full_name=f"{first} {last}",
        email=f"{first.lower()}.{last.lower()}@example.com",
        roles=roles,
    )


async def main():
    # The service engine is read-only; seeding needs its own writable one
    engine = create_engine(get_settings().database_url, read_only=False)
    await init_db(engine)

    mentor = _user("Maya", "Okafor", ["mentor"])
    student = _user("Leo", "Brandt", ["student"])
    guardian = _user("Ines", "Brandt", ["guardian"])
    engagement = Engagement(uuid=generate_uuid(), title="Spring Robotics Cohort")

    group_chat = Conversation(
        uuid=generate_uuid(),
        user_uuids=[str(mentor.uuid), str(student.uuid)],
        external_conversation_id=f"group_group-{engagement.uuid}",
        conversation_type="group",
    )
    direct_chat = Conversation(
        uuid=generate_uuid(),
        user_uuids=[str(guardian.uuid), str(mentor.uuid)],
        external_conversation_id=f"{guardian.uuid}_user_{mentor.uuid}",
        conversation_type="user",
    )

    start = datetime.now(timezone.utc) - timedelta(days=1)
    timeline = [
        (student, "Hi! I'm stuck on the motor controller.", 0),
        (mentor, "Happy to help, what have you tried?", 25),
        (student, "Swapping the PWM pins.", 40),
        (mentor, "Try checking the ground wire first.", 95),
    ]
    messages = [
        Message(
            uuid=generate_uuid(),
            conversation_uuid=group_chat.uuid,
            sender_uuid=sender.uuid,
            text=body,
            created_at=start + timedelta(minutes=offset),
            updated_at=start + timedelta(minutes=offset),
        )
        for sender, body, offset in timeline
    ]

    async with create_session_maker(engine)() as session:
        session.add_all([mentor, student, guardian, engagement, group_chat, direct_chat])
        await session.flush()
        session.add_all([
            UserEngagement(engagement_uuid=engagement.uuid, user_uuid=mentor.uuid),
            UserEngagement(engagement_uuid=engagement.uuid, user_uuid=student.uuid),
            GuardianStudent(guardian_uuid=guardian.uuid, student_uuid=student.uuid),
            *messages,
        ])
        await session.commit()

    print(f"Seeded engagement '{engagement.title}' ({engagement.uuid})")
    print(f"  group chat:  {group_chat.uuid}")
    print(f"  direct chat: {direct_chat.uuid}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
