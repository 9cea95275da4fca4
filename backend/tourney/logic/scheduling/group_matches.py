from collections.abc import Collection, Iterable, Sequence
from typing import NamedTuple

from tourney.logic.scheduling.round_robin import ParticipantPair, get_round_robin_pairs
from tourney.models.db.match import Match, MatchSpec
from tourney.utils.id_types import MatchId, ParticipantId


class GroupMatchesPlan(NamedTuple):
    match_ids_to_delete: list[MatchId]
    matches_to_create: list[MatchSpec]

    def is_empty(self) -> bool:
        return len(self.match_ids_to_delete) < 1 and len(self.matches_to_create) < 1


def is_round_robin_match(match: Match) -> bool:
    # Manually created matches and matches with a TBD slot are not owned by the group pairing.
    return match.has_both_slots() and not match.is_manual_match


def get_existing_pairs(matches: Iterable[Match]) -> list[ParticipantPair]:
    return [
        ParticipantPair(match.participant1_id, match.participant2_id)  # type: ignore[arg-type]
        for match in matches
        if is_round_robin_match(match)
    ]


def get_matches_to_delete(
    existing_matches: Sequence[Match], desired_participant_ids: Collection[ParticipantId]
) -> list[MatchId]:
    desired = set(desired_participant_ids)
    return [
        match.id
        for match in existing_matches
        if is_round_robin_match(match)
        and (match.participant1_id not in desired or match.participant2_id not in desired)
    ]


def get_matches_to_create(
    existing_pairs: Iterable[ParticipantPair | tuple[ParticipantId, ParticipantId]],
    desired_participant_ids: Sequence[ParticipantId],
) -> list[MatchSpec]:
    existing_keys = {frozenset(pair) for pair in existing_pairs}
    return [
        MatchSpec(participant1_id=pair.participant1_id, participant2_id=pair.participant2_id)
        for pair in get_round_robin_pairs(desired_participant_ids)
        if pair.key() not in existing_keys
    ]


def plan_group_matches(
    existing_matches: Sequence[Match], desired_participant_ids: Sequence[ParticipantId]
) -> GroupMatchesPlan:
    """
    Determine the minimal change to the match set of a round-robin group.

    Both sides of the diff are full sets: the current matches of the group and the complete
    desired participant list. Deletions are computed first and creations are computed against
    the matches that survive them, so a pair that stays valid is never deleted and recreated.
    """
    match_ids_to_delete = get_matches_to_delete(existing_matches, desired_participant_ids)
    deleted = set(match_ids_to_delete)
    remaining_matches = [match for match in existing_matches if match.id not in deleted]

    return GroupMatchesPlan(
        match_ids_to_delete=match_ids_to_delete,
        matches_to_create=get_matches_to_create(
            get_existing_pairs(remaining_matches), desired_participant_ids
        ),
    )
