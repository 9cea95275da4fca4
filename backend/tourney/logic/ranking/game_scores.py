from collections import defaultdict
from collections.abc import Sequence
from typing import NamedTuple

from tourney.models.db.game import GameSubmission
from tourney.models.db.match import MatchParticipant
from tourney.utils.id_types import MatchParticipantId, ParticipantId


class ParticipantScore(NamedTuple):
    match_participant_id: MatchParticipantId
    participant_id: ParticipantId
    won_score: int
    lost_score: int
    is_winner: bool


def get_game_results(game: GameSubmission) -> dict[ParticipantId, bool]:
    """
    Whether each participant of a game won it.

    A participant with several entries in one game (team games) counts once for that game
    and wins it if any of its entries won.
    """
    results: dict[ParticipantId, bool] = {}
    for entry in game.participants:
        results[entry.participant_id] = results.get(entry.participant_id, False) or entry.is_winner
    return results


def calculate_match_scores(
    match_participants: Sequence[MatchParticipant], games: Sequence[GameSubmission]
) -> list[ParticipantScore]:
    wins: dict[ParticipantId, int] = defaultdict(int)
    losses: dict[ParticipantId, int] = defaultdict(int)

    for game in games:
        for participant_id, won in get_game_results(game).items():
            if won:
                wins[participant_id] += 1
            else:
                losses[participant_id] += 1

    max_wins = max(
        (wins[match_participant.participant_id] for match_participant in match_participants),
        default=0,
    )

    # Ties on the maximum all win, which mixed-team matches rely on.
    return [
        ParticipantScore(
            match_participant_id=match_participant.id,
            participant_id=match_participant.participant_id,
            won_score=wins[match_participant.participant_id],
            lost_score=losses[match_participant.participant_id],
            is_winner=max_wins > 0 and wins[match_participant.participant_id] == max_wins,
        )
        for match_participant in match_participants
    ]
