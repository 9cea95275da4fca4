from typing import NewType

TournamentId = NewType("TournamentId", int)
StageId = NewType("StageId", int)
GroupId = NewType("GroupId", int)
ParticipantId = NewType("ParticipantId", int)
MatchId = NewType("MatchId", int)
MatchParticipantId = NewType("MatchParticipantId", int)
GameId = NewType("GameId", int)
GameParticipantId = NewType("GameParticipantId", int)
MapId = NewType("MapId", int)
CivilizationId = NewType("CivilizationId", int)
