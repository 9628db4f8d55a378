"""
Conversation search used by the dashboard's search box.

Matching is a case-insensitive substring test. Conversations are matched on
their engagement linkage (UUIDs and titles) and on their participants
(UUID, email and names).
"""

from typing import Any, Iterable, List, Optional

_USER_DETAIL_FIELDS = ("email", "full_name", "first_name", "last_name")


def _contains(value: Any, needle: str) -> bool:
    return value is not None and needle in str(value).lower()


def matches_engagement(conversation: Any, query: str) -> bool:
    """True when the query appears in any engagement UUID or title of the conversation."""
    needle = query.strip().lower()
    if _contains(conversation.engagement_uuid, needle):
        return True
    for engagement in conversation.engagements or ():
        if _contains(engagement.uuid, needle) or _contains(engagement.title, needle):
            return True
    engagement = conversation.engagement
    return engagement is not None and _contains(engagement.title, needle)


def matches_user(conversation: Any, query: str) -> bool:
    """True when the query appears in any participant's UUID, email or name."""
    needle = query.strip().lower()
    for user in conversation.users or ():
        if _contains(user.uuid, needle):
            return True
        details = user.details
        if details is None:
            continue
        if any(_contains(getattr(details, name, None), needle) for name in _USER_DETAIL_FIELDS):
            return True
    return False


def filter_conversations(
    conversations: Iterable[Any],
    engagement_query: Optional[str] = None,
    user_query: Optional[str] = None,
) -> List[Any]:
    """
    Filter annotated conversations by engagement and/or participant.

    Both queries blank returns an empty list (nothing has been searched yet).
    When both are given a conversation must match both.
    """
    engagement_query = (engagement_query or "").strip()
    user_query = (user_query or "").strip()
    if not engagement_query and not user_query:
        return []

    results = []
    for conversation in conversations:
        if engagement_query and not matches_engagement(conversation, engagement_query):
            continue
        if user_query and not matches_user(conversation, user_query):
            continue
        results.append(conversation)
    return results
