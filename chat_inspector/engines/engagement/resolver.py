"""
Engagement Resolver - works out which engagement a conversation belongs to.

Group chats name their engagement directly. Direct chats are matched through
the pair lookup; a pair that fits several engagements is reported as
ambiguous (all candidates listed, no single engagement chosen).
"""

from typing import Dict, Iterable, List, Mapping

from chat_inspector.engines.engagement.conversation_id import (
    ConversationKind,
    parse_conversation_id,
)
from chat_inspector.engines.engagement.pair_lookup import PairLookup, build_pair_lookup
from chat_inspector.engines.engagement.snapshots import (
    ConversationSnapshot,
    EngagementMembership,
    EngagementResolution,
    EngagementSummary,
    GuardianLink,
    ResolvedConversation,
)
from chat_inspector.logging_config import get_logger

logger = get_logger(__name__)


def _single(engagement: EngagementSummary) -> EngagementResolution:
    return EngagementResolution(
        engagement_uuid=engagement.uuid,
        engagement=engagement,
        engagements=[engagement],
    )


def resolve_conversation(
    conversation: ConversationSnapshot,
    engagements_by_uuid: Mapping[str, EngagementSummary],
    pair_lookup: PairLookup,
) -> EngagementResolution:
    """
    Resolve one conversation against a prepared engagement index and pair lookup.

    Returns an empty resolution for identifiers that match neither known shape.
    """
    parsed = parse_conversation_id(
        conversation.external_conversation_id,
        conversation.conversation_type,
    )
    if parsed is None:
        return EngagementResolution()

    if parsed.kind == ConversationKind.GROUP:
        engagement = engagements_by_uuid.get(parsed.engagement_uuid)
        if engagement is None:
            return EngagementResolution()
        return _single(engagement)

    candidates = pair_lookup.get(*parsed.user_uuids)
    if len(candidates) == 1:
        return _single(candidates[0])
    # Zero or several candidates: never guess a primary engagement
    return EngagementResolution(engagements=candidates)


def resolve_engagements(
    conversations: Iterable[ConversationSnapshot],
    engagements: Iterable[EngagementSummary],
    memberships: Iterable[EngagementMembership],
    user_roles: Mapping[str, Iterable[str]],
    guardian_links: Iterable[GuardianLink],
) -> List[ResolvedConversation]:
    """
    Annotate a batch of conversations with their engagement linkage.

    Args:
        conversations: Conversations to resolve (output keeps this order)
        engagements: Every engagement that may be referenced
        memberships: Engagement membership rows
        user_roles: Role list per user UUID
        guardian_links: Guardian -> student relations

    Returns:
        One ResolvedConversation per input conversation
    """
    engagement_list = list(engagements)
    engagements_by_uuid: Dict[str, EngagementSummary] = {e.uuid: e for e in engagement_list}
    pair_lookup = build_pair_lookup(engagement_list, memberships, user_roles, guardian_links)

    resolved = [
        ResolvedConversation(
            conversation=conversation,
            resolution=resolve_conversation(conversation, engagements_by_uuid, pair_lookup),
        )
        for conversation in conversations
    ]

    logger.debug(
        "Resolved conversation engagements",
        extra={
            "conversation_count": len(resolved),
            "engagement_count": len(engagement_list),
            "pair_count": len(pair_lookup),
        },
    )
    return resolved
