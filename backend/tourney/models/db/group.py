from enum import auto

from heliclockter import datetime_utc
from pydantic import BaseModel, Field

from tourney.models.db.match import Match
from tourney.models.db.participant import Participant
from tourney.models.db.shared import BaseModelORM
from tourney.utils.id_types import GroupId, MatchId, ParticipantId, StageId
from tourney.utils.types import EnumAutoStr


class MatchMode(EnumAutoStr):
    BEST_OF = auto()
    PLAY_ALL = auto()


class GroupInsertable(BaseModelORM):
    name: str
    description: str | None = None
    created: datetime_utc
    stage_id: StageId
    display_order: int = 0
    is_team_based: bool = False
    match_mode: MatchMode = MatchMode.BEST_OF
    game_count: int = 1


class Group(GroupInsertable):
    id: GroupId


class GroupCreateBody(BaseModel):
    name: str
    description: str | None = None
    display_order: int = 0
    is_team_based: bool = False
    match_mode: MatchMode = MatchMode.BEST_OF
    game_count: int = Field(default=1, ge=1)
    participant_ids: list[ParticipantId] = Field(default_factory=list)


class GroupParticipantsBody(BaseModel):
    participant_ids: list[ParticipantId]


class GroupReconciliation(BaseModel):
    created: list[Match] = Field(default_factory=list)
    deleted: list[MatchId] = Field(default_factory=list)


class GroupWithMatches(Group):
    participants: list[Participant] = Field(default_factory=list)
    matches: list[Match] = Field(default_factory=list)
