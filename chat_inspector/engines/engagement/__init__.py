"""
Engagement Engine - links conversations to engagements.
"""

from chat_inspector.engines.engagement.conversation_id import (
    ConversationKind,
    ParsedConversationId,
    parse_conversation_id,
)
from chat_inspector.engines.engagement.pair_lookup import (
    PairLookup,
    build_pair_lookup,
    eligible_participants,
)
from chat_inspector.engines.engagement.resolver import (
    resolve_conversation,
    resolve_engagements,
)
from chat_inspector.engines.engagement.snapshots import (
    ConversationSnapshot,
    EngagementMembership,
    EngagementResolution,
    EngagementSummary,
    GuardianLink,
    ResolvedConversation,
)

__all__ = [
    "ConversationKind",
    "ParsedConversationId",
    "parse_conversation_id",
    "PairLookup",
    "build_pair_lookup",
    "eligible_participants",
    "resolve_conversation",
    "resolve_engagements",
    "ConversationSnapshot",
    "EngagementMembership",
    "EngagementResolution",
    "EngagementSummary",
    "GuardianLink",
    "ResolvedConversation",
]
