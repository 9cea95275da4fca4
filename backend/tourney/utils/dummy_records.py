from zoneinfo import ZoneInfo

from heliclockter import datetime_utc

from tourney.models.db.group import Group, MatchMode
from tourney.models.db.match import Match, MatchParticipant, MatchStatus
from tourney.models.db.participant import Participant
from tourney.utils.id_types import (
    GroupId,
    MatchId,
    MatchParticipantId,
    ParticipantId,
    StageId,
    TournamentId,
)

DUMMY_MOCK_TIME = datetime_utc(2026, 1, 11, 4, 32, 11, tzinfo=ZoneInfo("UTC"))

DUMMY_TOURNAMENT_ID = TournamentId(1)
DUMMY_STAGE_ID = StageId(1)

DUMMY_GROUP1 = Group(
    id=GroupId(1),
    name="Group A",
    created=DUMMY_MOCK_TIME,
    stage_id=DUMMY_STAGE_ID,
    match_mode=MatchMode.BEST_OF,
    game_count=5,
)

DUMMY_PARTICIPANT1 = Participant(
    id=ParticipantId(1), name="Alice", created=DUMMY_MOCK_TIME, tournament_id=DUMMY_TOURNAMENT_ID
)
DUMMY_PARTICIPANT2 = Participant(
    id=ParticipantId(2), name="Bob", created=DUMMY_MOCK_TIME, tournament_id=DUMMY_TOURNAMENT_ID
)
DUMMY_PARTICIPANT3 = Participant(
    id=ParticipantId(3), name="Carol", created=DUMMY_MOCK_TIME, tournament_id=DUMMY_TOURNAMENT_ID
)
DUMMY_PARTICIPANT4 = Participant(
    id=ParticipantId(4), name="Dave", created=DUMMY_MOCK_TIME, tournament_id=DUMMY_TOURNAMENT_ID
)

DUMMY_MATCH1 = Match(
    id=MatchId(10),
    created=DUMMY_MOCK_TIME,
    group_id=DUMMY_GROUP1.id,
    participant1_id=DUMMY_PARTICIPANT1.id,
    participant2_id=DUMMY_PARTICIPANT2.id,
    status=MatchStatus.PENDING,
)

DUMMY_MATCH_PARTICIPANT1 = MatchParticipant(
    id=MatchParticipantId(100), match_id=DUMMY_MATCH1.id, participant_id=DUMMY_PARTICIPANT1.id
)
DUMMY_MATCH_PARTICIPANT2 = MatchParticipant(
    id=MatchParticipantId(101), match_id=DUMMY_MATCH1.id, participant_id=DUMMY_PARTICIPANT2.id
)
