from heliclockter import datetime_utc
from pydantic import BaseModel, Field

from tourney.models.db.match import Match, MatchParticipant
from tourney.models.db.shared import BaseModelORM
from tourney.utils.id_types import (
    CivilizationId,
    GameId,
    GameParticipantId,
    MapId,
    MatchId,
    MatchParticipantId,
    ParticipantId,
)


class GameParticipantSubmission(BaseModel):
    participant_id: ParticipantId
    civilization_id: CivilizationId | None = None
    is_winner: bool = False


class GameSubmission(BaseModel):
    map_id: MapId
    replay_key: str | None = None
    participants: list[GameParticipantSubmission] = Field(default_factory=list)


class GamesSubmissionBody(BaseModel):
    games: list[GameSubmission]
    apply_score: bool = True
    files_to_remove: list[str] = Field(default_factory=list)


class GameInsertable(BaseModelORM):
    created: datetime_utc
    match_id: MatchId
    map_id: MapId
    position: int
    replay_key: str | None = None


class Game(GameInsertable):
    id: GameId


class GameParticipantInsertable(BaseModelORM):
    game_id: GameId
    match_participant_id: MatchParticipantId
    participant_id: ParticipantId
    civilization_id: CivilizationId | None = None
    position: int
    is_winner: bool


class GameParticipant(GameParticipantInsertable):
    id: GameParticipantId


class GameWithParticipants(Game):
    participants: list[GameParticipant] = Field(default_factory=list)


class GameWithReplay(BaseModelORM):
    id: GameId
    position: int
    replay_key: str
    map_name: str | None = None


class MatchWithGames(Match):
    participants: list[MatchParticipant] = Field(default_factory=list)
    games: list[GameWithParticipants] = Field(default_factory=list)
