from typing import Any

from pydantic import BaseModel

from tourney.models.db.game import MatchWithGames
from tourney.models.db.group import GroupReconciliation, GroupWithMatches
from tourney.models.db.match import Match


class DataResponse[DataT](BaseModel):
    data: DataT


class GroupResponse(DataResponse[GroupWithMatches]):
    pass


class GroupReconciliationResponse(DataResponse[GroupReconciliation]):
    pass


class SingleMatchResponse(DataResponse[Match]):
    pass


class MatchWithGamesResponse(DataResponse[MatchWithGames]):
    pass


class TempReplay(BaseModel):
    key: str


class TempReplayResponse(DataResponse[TempReplay]):
    pass


class ErrorDetail(BaseModel):
    message: str
    match_id: int | None = None
    game_index: int | None = None
    context: dict[str, Any] = {}


class ErrorResponse(BaseModel):
    detail: ErrorDetail
