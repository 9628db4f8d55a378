"""
In-memory snapshots consumed by the engagement resolver.

The resolver never touches the database. The directory service loads rows,
converts them into these plain records and hands them over in one batch.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class EngagementSummary:
    """The part of an engagement that is shown next to a conversation."""
    uuid: str
    title: str


@dataclass(frozen=True)
class EngagementMembership:
    """One user belonging to one engagement."""
    engagement_uuid: str
    user_uuid: str


@dataclass(frozen=True)
class GuardianLink:
    """Directed guardian -> student relation."""
    guardian_uuid: str
    student_uuid: str


@dataclass(frozen=True)
class ConversationSnapshot:
    """Conversation fields needed to work out its engagement."""
    uuid: str
    external_conversation_id: str
    conversation_type: Optional[str] = None
    user_uuids: Tuple[str, ...] = ()


@dataclass
class EngagementResolution:
    """Engagement linkage for one conversation.

    ``engagement`` is only set when the linkage is unambiguous. When a direct
    chat fits several engagements, all of them are listed in ``engagements``
    and the caller must not pick one.
    """
    engagement_uuid: Optional[str] = None
    engagement: Optional[EngagementSummary] = None
    engagements: List[EngagementSummary] = field(default_factory=list)

    @property
    def is_ambiguous(self) -> bool:
        return self.engagement is None and len(self.engagements) > 1


@dataclass
class ResolvedConversation:
    conversation: ConversationSnapshot
    resolution: EngagementResolution
