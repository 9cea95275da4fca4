from collections.abc import Sequence
from typing import NamedTuple

from tourney.utils.id_types import ParticipantId


class ParticipantPair(NamedTuple):
    participant1_id: ParticipantId
    participant2_id: ParticipantId

    def key(self) -> frozenset[ParticipantId]:
        return frozenset((self.participant1_id, self.participant2_id))


def get_round_robin_pairs(
    participant_ids: Sequence[ParticipantId | None],
) -> list[ParticipantPair]:
    """
    Returns every unordered pair of participants of a round-robin group.

    Pairs are produced row-major over the input order: (0, 1), (0, 2), ..., (1, 2), ...
    so the same list always yields the same pairs in the same order. Empty slots are skipped
    and a repeated participant only counts at its first position.
    """
    ids = list(
        dict.fromkeys(
            participant_id for participant_id in participant_ids if participant_id is not None
        )
    )
    return [
        ParticipantPair(ids[i], ids[j])
        for i in range(len(ids))
        for j in range(i + 1, len(ids))
    ]
