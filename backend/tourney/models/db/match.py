from enum import auto

from heliclockter import datetime_utc
from pydantic import BaseModel

from tourney.models.db.shared import BaseModelORM
from tourney.utils.id_types import GroupId, MatchId, MatchParticipantId, ParticipantId
from tourney.utils.types import EnumAutoStr


class MatchStatus(EnumAutoStr):
    PENDING = auto()
    SCHEDULED = auto()
    IN_PROGRESS = auto()
    COMPLETED = auto()
    ADMIN_APPROVED = auto()
    CANCELLED = auto()

    def is_terminal(self) -> bool:
        return self in {MatchStatus.COMPLETED, MatchStatus.ADMIN_APPROVED, MatchStatus.CANCELLED}

    def can_transition_to(self, new_status: "MatchStatus") -> bool:
        """
        Transitions the match editor is allowed to make.

        The admin path only moves forward along PENDING -> SCHEDULED -> IN_PROGRESS -> COMPLETED,
        and any non-terminal match can be cancelled. ADMIN_APPROVED is never set by the editor,
        only by a successful score-applying game submission.
        """
        if new_status == self:
            return True
        if self.is_terminal() or new_status == MatchStatus.ADMIN_APPROVED:
            return False
        if new_status == MatchStatus.CANCELLED:
            return True
        return _ADMIN_PATH.index(new_status) > _ADMIN_PATH.index(self)


_ADMIN_PATH = [
    MatchStatus.PENDING,
    MatchStatus.SCHEDULED,
    MatchStatus.IN_PROGRESS,
    MatchStatus.COMPLETED,
]


class MatchSpec(BaseModel):
    participant1_id: ParticipantId
    participant2_id: ParticipantId
    status: MatchStatus = MatchStatus.PENDING
    civ_draft_key: str = ""
    map_draft_key: str = ""


class MatchInsertable(BaseModelORM):
    created: datetime_utc
    group_id: GroupId
    participant1_id: ParticipantId | None = None
    participant2_id: ParticipantId | None = None
    status: MatchStatus = MatchStatus.PENDING
    match_date: datetime_utc | None = None
    civ_draft_key: str = ""
    map_draft_key: str = ""
    comment: str | None = None
    admin_comment: str | None = None
    is_manual_match: bool = False


class Match(MatchInsertable):
    id: MatchId

    def has_both_slots(self) -> bool:
        return self.participant1_id is not None and self.participant2_id is not None


class MatchParticipant(BaseModelORM):
    id: MatchParticipantId
    match_id: MatchId
    participant_id: ParticipantId
    won_score: int = 0
    lost_score: int = 0
    is_winner: bool = False


class MatchUpdateBody(BaseModelORM):
    match_date: datetime_utc | None = None
    civ_draft_key: str | None = None
    map_draft_key: str | None = None
    status: MatchStatus | None = None
    comment: str | None = None
    admin_comment: str | None = None
