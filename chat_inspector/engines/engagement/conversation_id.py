"""
Parsing of the chat provider's conversation identifiers.

Two shapes exist:
- group chats:  ``group_group-<engagement uuid>``
- direct chats: ``<user uuid>_user_<user uuid>``

Anything else carries no engagement information.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


GROUP_CONVERSATION_PATTERN = re.compile(r"group_group-(.+)")
PAIR_CONVERSATION_PATTERN = re.compile(r"([0-9a-f-]{36})_user_([0-9a-f-]{36})")


class ConversationKind(str, Enum):
    """Conversation type as reported by the chat provider."""
    GROUP = "group"
    USER = "user"


@dataclass(frozen=True)
class ParsedConversationId:
    kind: ConversationKind
    engagement_uuid: Optional[str] = None
    user_uuids: Tuple[str, ...] = ()


def _parse_group(external_id: str) -> Optional[ParsedConversationId]:
    match = GROUP_CONVERSATION_PATTERN.search(external_id)
    if not match:
        return None
    return ParsedConversationId(kind=ConversationKind.GROUP, engagement_uuid=match.group(1))


def _parse_pair(external_id: str) -> Optional[ParsedConversationId]:
    match = PAIR_CONVERSATION_PATTERN.search(external_id)
    if not match:
        return None
    return ParsedConversationId(
        kind=ConversationKind.USER,
        user_uuids=(match.group(1), match.group(2)),
    )


def parse_conversation_id(
    external_id: Optional[str],
    conversation_type: Optional[str] = None,
) -> Optional[ParsedConversationId]:
    """
    Classify an external conversation identifier.

    Args:
        external_id: The provider's conversation identifier
        conversation_type: "group" or "user" when the provider reported it.
            Only the matching pattern is tried. When missing, the type is
            inferred (group pattern first).

    Returns:
        ParsedConversationId, or None when the identifier matches neither shape
        (or the reported type is unknown)
    """
    if not external_id:
        return None

    if conversation_type is None:
        return _parse_group(external_id) or _parse_pair(external_id)

    if conversation_type == ConversationKind.GROUP.value:
        return _parse_group(external_id)
    if conversation_type == ConversationKind.USER.value:
        return _parse_pair(external_id)
    return None
