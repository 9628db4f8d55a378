"""
Directory service - read access to conversations, users and engagements.

Loads rows from the chat store, hands them to the engagement resolver as
plain snapshots and shapes the results for the API.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_inspector.engines.engagement import (
    ConversationKind,
    ConversationSnapshot,
    EngagementMembership,
    EngagementSummary,
    GuardianLink,
    ResolvedConversation,
    parse_conversation_id,
    resolve_engagements,
)
from chat_inspector.kernel.models.conversation import Conversation, Message
from chat_inspector.kernel.models.engagement import Engagement, UserEngagement
from chat_inspector.kernel.models.user import GuardianStudent, User
from chat_inspector.logging_config import get_logger
from chat_inspector.schemas.conversation import (
    ConversationLatestMessage,
    ConversationResponse,
    ConversationUser,
    EngagementRef,
    LatestMessage,
    LatestMessageSender,
    UserDetails,
)
from chat_inspector.schemas.message import MessageResponse, MessageSender

logger = get_logger(__name__)


def _to_uuids(values: Iterable[str]) -> List[UUID]:
    """Parse UUID strings, skipping anything that is not a UUID."""
    parsed = []
    for value in values:
        try:
            parsed.append(UUID(value))
        except (TypeError, ValueError):
            logger.debug("Skipping malformed UUID", extra={"value": value})
    return parsed


def _snapshot(conversation: Conversation) -> ConversationSnapshot:
    return ConversationSnapshot(
        uuid=str(conversation.uuid),
        external_conversation_id=conversation.external_conversation_id,
        conversation_type=conversation.conversation_type,
        user_uuids=tuple(conversation.user_uuids or ()),
    )


def _engagement_ref(engagement: Optional[EngagementSummary]) -> Optional[EngagementRef]:
    if engagement is None:
        return None
    return EngagementRef(uuid=engagement.uuid, title=engagement.title)


class ConversationDirectory:
    """
    Read-only queries behind the dashboard.

    Every call works on a fresh snapshot; nothing is cached between requests.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def list_conversations(self) -> List[ConversationResponse]:
        """All conversations, most recently updated first, with engagement linkage."""
        result = await self.session.execute(
            select(Conversation).order_by(Conversation.updated_at.desc())
        )
        conversations = list(result.scalars().all())
        return await self._annotate(conversations)

    async def get_conversation(self, conversation_uuid: UUID) -> Optional[ConversationResponse]:
        """Single annotated conversation, or None if it does not exist."""
        conversation = await self.session.get(Conversation, conversation_uuid)
        if conversation is None:
            return None
        annotated = await self._annotate([conversation])
        return annotated[0]

    async def _annotate(self, conversations: List[Conversation]) -> List[ConversationResponse]:
        snapshots = [_snapshot(c) for c in conversations]

        participant_uuids = {u for s in snapshots for u in s.user_uuids}
        users = await self._load_users(participant_uuids)

        group_engagement_uuids, pair_user_uuids = self._engagement_hints(snapshots)
        engagements, memberships, user_roles, guardian_links = await self._load_engagement_graph(
            group_engagement_uuids, pair_user_uuids,
        )

        resolved = resolve_engagements(
            snapshots, engagements, memberships, user_roles, guardian_links,
        )

        logger.info(
            "Annotated conversations",
            extra={
                "conversation_count": len(conversations),
                "engagement_count": len(engagements),
            },
        )
        return [
            self._to_response(conversation, item, users)
            for conversation, item in zip(conversations, resolved)
        ]

    @staticmethod
    def _engagement_hints(
        snapshots: Iterable[ConversationSnapshot],
    ) -> Tuple[Set[str], Set[str]]:
        """Engagement UUIDs named by group chats and users named by direct chats."""
        group_engagement_uuids: Set[str] = set()
        pair_user_uuids: Set[str] = set()
        for snapshot in snapshots:
            parsed = parse_conversation_id(
                snapshot.external_conversation_id,
                snapshot.conversation_type,
            )
            if parsed is None:
                continue
            if parsed.kind == ConversationKind.GROUP:
                group_engagement_uuids.add(parsed.engagement_uuid)
            else:
                pair_user_uuids.update(parsed.user_uuids)
        return group_engagement_uuids, pair_user_uuids

    async def _load_users(self, user_uuids: Iterable[str]) -> Dict[str, User]:
        ids = _to_uuids(user_uuids)
        if not ids:
            return {}
        result = await self.session.execute(select(User).where(User.uuid.in_(ids)))
        return {str(user.uuid): user for user in result.scalars().all()}

    async def _load_engagement_graph(
        self,
        group_engagement_uuids: Set[str],
        pair_user_uuids: Set[str],
    ) -> Tuple[
        List[EngagementSummary],
        List[EngagementMembership],
        Dict[str, List[str]],
        List[GuardianLink],
    ]:
        """
        Load the engagements that can matter for this batch: those named by
        group chats, plus every engagement where a direct-chat participant is
        a member or guards a member student. Membership rows, member roles and
        guardian links come along.
        """
        group_ids = _to_uuids(group_engagement_uuids)
        pair_ids = _to_uuids(pair_user_uuids)
        if not group_ids and not pair_ids:
            return [], [], {}, []

        conditions = []
        if group_ids:
            conditions.append(Engagement.uuid.in_(group_ids))
        if pair_ids:
            guarded_students = select(GuardianStudent.student_uuid).where(
                GuardianStudent.guardian_uuid.in_(pair_ids)
            )
            conditions.append(
                Engagement.uuid.in_(
                    select(UserEngagement.engagement_uuid).where(
                        or_(
                            UserEngagement.user_uuid.in_(pair_ids),
                            UserEngagement.user_uuid.in_(guarded_students),
                        )
                    )
                )
            )
        result = await self.session.execute(select(Engagement).where(or_(*conditions)))
        engagement_rows = list(result.scalars().all())
        engagements = [
            EngagementSummary(uuid=str(e.uuid), title=e.title) for e in engagement_rows
        ]
        if not engagement_rows:
            return engagements, [], {}, []

        result = await self.session.execute(
            select(UserEngagement).where(
                UserEngagement.engagement_uuid.in_([e.uuid for e in engagement_rows])
            )
        )
        membership_rows = list(result.scalars().all())
        memberships = [
            EngagementMembership(
                engagement_uuid=str(m.engagement_uuid),
                user_uuid=str(m.user_uuid),
            )
            for m in membership_rows
        ]

        member_ids = list({m.user_uuid for m in membership_rows})
        user_roles: Dict[str, List[str]] = {}
        guardian_links: List[GuardianLink] = []
        if member_ids:
            result = await self.session.execute(
                select(User.uuid, User.roles).where(User.uuid.in_(member_ids))
            )
            user_roles = {str(uuid): list(roles or []) for uuid, roles in result.all()}

            result = await self.session.execute(
                select(GuardianStudent).where(GuardianStudent.student_uuid.in_(member_ids))
            )
            guardian_links = [
                GuardianLink(
                    guardian_uuid=str(link.guardian_uuid),
                    student_uuid=str(link.student_uuid),
                )
                for link in result.scalars().all()
            ]

        return engagements, memberships, user_roles, guardian_links

    @staticmethod
    def _to_response(
        conversation: Conversation,
        resolved: ResolvedConversation,
        users: Dict[str, User],
    ) -> ConversationResponse:
        resolution = resolved.resolution
        participants = []
        for user_uuid in conversation.user_uuids or []:
            user = users.get(user_uuid)
            participants.append(ConversationUser(
                uuid=user_uuid,
                details=UserDetails.model_validate(user) if user is not None else None,
            ))

        return ConversationResponse(
            uuid=conversation.uuid,
            user_uuids=list(conversation.user_uuids or []),
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            external_conversation_id=conversation.external_conversation_id,
            conversation_type=conversation.conversation_type,
            engagement_uuid=resolution.engagement_uuid,
            engagement=_engagement_ref(resolution.engagement),
            engagements=[_engagement_ref(e) for e in resolution.engagements],
            users=participants,
        )

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def get_conversation_messages(
        self,
        conversation_uuid: UUID,
    ) -> List[MessageResponse]:
        """Non-deleted messages of a conversation, oldest first, with senders."""
        result = await self.session.execute(
            select(Message)
            .where(
                Message.conversation_uuid == conversation_uuid,
                Message.deleted_at.is_(None),
            )
            .order_by(Message.created_at.asc())
        )
        messages = list(result.scalars().all())

        senders = await self._load_users(str(m.sender_uuid) for m in messages)

        responses = []
        for message in messages:
            sender = senders.get(str(message.sender_uuid))
            response = MessageResponse.model_validate(message)
            response.sender = MessageSender.model_validate(sender) if sender is not None else None
            responses.append(response)
        return responses

    async def list_latest_messages(self) -> List[ConversationLatestMessage]:
        """Latest non-deleted message of every conversation that has one."""
        ranked = (
            select(
                Message.uuid,
                Message.conversation_uuid,
                Message.sender_uuid,
                Message.created_at,
                func.row_number().over(
                    partition_by=Message.conversation_uuid,
                    order_by=Message.created_at.desc(),
                ).label("row_rank"),
                func.count().over(
                    partition_by=Message.conversation_uuid,
                ).label("message_count"),
            )
            .where(Message.deleted_at.is_(None))
            .subquery()
        )
        result = await self.session.execute(
            select(
                ranked.c.uuid,
                ranked.c.conversation_uuid,
                ranked.c.sender_uuid,
                ranked.c.created_at,
                ranked.c.message_count,
            )
            .where(ranked.c.row_rank == 1)
            .order_by(ranked.c.created_at.desc())
        )
        rows = result.all()

        senders = await self._load_users(str(row.sender_uuid) for row in rows)

        latest = []
        for row in rows:
            sender = senders.get(str(row.sender_uuid))
            latest.append(ConversationLatestMessage(
                conversation_uuid=row.conversation_uuid,
                message_count=row.message_count,
                latest_message=LatestMessage(
                    uuid=row.uuid,
                    sender_uuid=row.sender_uuid,
                    created_at=row.created_at,
                    sender=(
                        LatestMessageSender(uuid=sender.uuid, roles=list(sender.roles or []))
                        if sender is not None else None
                    ),
                ),
            ))
        return latest
