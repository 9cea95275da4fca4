from heliclockter import datetime_utc

from tourney.models.db.shared import BaseModelORM
from tourney.utils.id_types import ParticipantId, TournamentId


class ParticipantInsertable(BaseModelORM):
    name: str
    created: datetime_utc
    tournament_id: TournamentId


class Participant(ParticipantInsertable):
    id: ParticipantId
