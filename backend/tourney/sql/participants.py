from collections.abc import Collection

from tourney.database import database
from tourney.models.db.lookup import Civilization, Map
from tourney.models.db.participant import Participant
from tourney.utils.id_types import (
    CivilizationId,
    MapId,
    ParticipantId,
    StageId,
    TournamentId,
)


async def get_participants_by_ids(
    tournament_id: TournamentId, participant_ids: Collection[ParticipantId]
) -> list[Participant]:
    if len(participant_ids) < 1:
        return []

    query = """
        SELECT *
        FROM participants
        WHERE tournament_id = :tournament_id
        AND id = any(:participant_ids)
        """
    result = await database.fetch_all(
        query=query,
        values={
            "tournament_id": tournament_id,
            "participant_ids": [int(id_) for id_ in participant_ids],
        },
    )
    return [Participant.model_validate(dict(row._mapping)) for row in result]


async def get_tournament_id_of_stage(stage_id: StageId) -> TournamentId | None:
    result = await database.fetch_val(
        "SELECT tournament_id FROM stages WHERE id = :stage_id",
        values={"stage_id": stage_id},
    )
    return TournamentId(result) if result is not None else None


async def get_maps_by_ids(map_ids: Collection[MapId]) -> list[Map]:
    if len(map_ids) < 1:
        return []

    result = await database.fetch_all(
        "SELECT id, name FROM maps WHERE id = any(:map_ids)",
        values={"map_ids": [int(id_) for id_ in map_ids]},
    )
    return [Map.model_validate(dict(row._mapping)) for row in result]


async def get_civilizations_by_ids(
    civilization_ids: Collection[CivilizationId],
) -> list[Civilization]:
    if len(civilization_ids) < 1:
        return []

    result = await database.fetch_all(
        "SELECT id, name FROM civilizations WHERE id = any(:civilization_ids)",
        values={"civilization_ids": [int(id_) for id_ in civilization_ids]},
    )
    return [Civilization.model_validate(dict(row._mapping)) for row in result]
