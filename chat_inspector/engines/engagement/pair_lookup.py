"""
Pair -> engagements lookup used to place direct chats in an engagement.

A direct chat between two users belongs to every engagement in which both
users are eligible participants: mentors and students who are members,
members with the guardian role, and guardians of member students (who need
not be members themselves).
"""

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Mapping, Sequence, Set

from chat_inspector.engines.engagement.snapshots import (
    EngagementMembership,
    EngagementSummary,
    GuardianLink,
)
from chat_inspector.kernel.models.user import UserRole


PairKey = FrozenSet[str]


def _dedupe(values: Iterable[str]) -> List[str]:
    """Drop repeats, keeping the first occurrence."""
    seen: Set[str] = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def guardians_by_student(guardian_links: Iterable[GuardianLink]) -> Dict[str, List[str]]:
    """Index guardian links by student."""
    index: Dict[str, List[str]] = defaultdict(list)
    for link in guardian_links:
        index[link.student_uuid].append(link.guardian_uuid)
    return index


def eligible_participants(
    member_uuids: Sequence[str],
    user_roles: Mapping[str, Iterable[str]],
    student_guardians: Mapping[str, Sequence[str]],
) -> List[str]:
    """
    Users who may take part in an engagement's direct chats.

    Order is mentors, then students, then guardians, each in membership order.
    Members whose roles are unknown are skipped.
    """
    mentors: List[str] = []
    students: List[str] = []
    guardians: List[str] = []

    for user_uuid in member_uuids:
        roles = set(user_roles.get(user_uuid, ()))
        if UserRole.MENTOR.value in roles:
            mentors.append(user_uuid)
        if UserRole.STUDENT.value in roles:
            students.append(user_uuid)
            guardians.extend(student_guardians.get(user_uuid, ()))
        if UserRole.GUARDIAN.value in roles:
            guardians.append(user_uuid)

    return _dedupe(mentors + students + guardians)


class PairLookup:
    """
    Symmetric map from an unordered pair of users to the engagements that
    connect them. Each engagement appears at most once per pair.
    """

    def __init__(self) -> None:
        self._entries: Dict[PairKey, List[EngagementSummary]] = {}
        self._seen: Dict[PairKey, Set[str]] = defaultdict(set)

    def add(self, user_a: str, user_b: str, engagement: EngagementSummary) -> None:
        if user_a == user_b:
            return
        key = frozenset((user_a, user_b))
        if engagement.uuid in self._seen[key]:
            return
        self._seen[key].add(engagement.uuid)
        self._entries.setdefault(key, []).append(engagement)

    def get(self, user_a: str, user_b: str) -> List[EngagementSummary]:
        """Engagements connecting the two users, in either argument order."""
        return list(self._entries.get(frozenset((user_a, user_b)), ()))

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return frozenset(pair) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def build_pair_lookup(
    engagements: Iterable[EngagementSummary],
    memberships: Iterable[EngagementMembership],
    user_roles: Mapping[str, Iterable[str]],
    guardian_links: Iterable[GuardianLink],
) -> PairLookup:
    """
    Build the pair lookup for one batch of conversations.

    Every engagement's eligible participants are enumerated pairwise
    (i < j), so each unordered pair is visited once per engagement.
    """
    members_by_engagement: Dict[str, List[str]] = defaultdict(list)
    for membership in memberships:
        members_by_engagement[membership.engagement_uuid].append(membership.user_uuid)

    student_guardians = guardians_by_student(guardian_links)
    lookup = PairLookup()

    for engagement in engagements:
        participants = eligible_participants(
            _dedupe(members_by_engagement.get(engagement.uuid, ())),
            user_roles,
            student_guardians,
        )
        for i in range(len(participants)):
            for j in range(i + 1, len(participants)):
                lookup.add(participants[i], participants[j], engagement)

    return lookup
