from tourney.logic.scheduling.round_robin import ParticipantPair, get_round_robin_pairs
from tourney.utils.id_types import ParticipantId

A, B, C, D = (ParticipantId(id_) for id_ in (1, 2, 3, 4))


def test_round_robin_pairs_every_pair_once() -> None:
    pairs = get_round_robin_pairs([A, B, C, D])

    assert pairs == [
        ParticipantPair(A, B),
        ParticipantPair(A, C),
        ParticipantPair(A, D),
        ParticipantPair(B, C),
        ParticipantPair(B, D),
        ParticipantPair(C, D),
    ]
    assert len({pair.key() for pair in pairs}) == 4 * 3 // 2


def test_round_robin_pairs_is_deterministic() -> None:
    assert get_round_robin_pairs([C, A, B]) == get_round_robin_pairs([C, A, B])
    assert get_round_robin_pairs([C, A, B])[0] == ParticipantPair(C, A)


def test_round_robin_pairs_too_few_participants() -> None:
    assert get_round_robin_pairs([]) == []
    assert get_round_robin_pairs([A]) == []


def test_round_robin_pairs_skips_empty_slots_and_duplicates() -> None:
    assert get_round_robin_pairs([A, None, B, A]) == [ParticipantPair(A, B)]
