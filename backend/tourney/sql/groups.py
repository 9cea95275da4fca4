from collections.abc import Sequence

from heliclockter import datetime_utc

from tourney.database import database
from tourney.models.db.group import Group, GroupCreateBody, GroupInsertable
from tourney.models.db.participant import Participant
from tourney.schema import groups
from tourney.utils.id_types import GroupId, MatchId, ParticipantId, StageId


async def sql_get_group(group_id: GroupId) -> Group | None:
    query = """
        SELECT *
        FROM groups
        WHERE id = :group_id
        """
    result = await database.fetch_one(query=query, values={"group_id": group_id})
    return Group.model_validate(dict(result._mapping)) if result is not None else None


async def sql_get_group_of_match(match_id: MatchId) -> Group | None:
    query = """
        SELECT g.*
        FROM groups g
        JOIN matches m ON m.group_id = g.id
        WHERE m.id = :match_id
        """
    result = await database.fetch_one(query=query, values={"match_id": match_id})
    return Group.model_validate(dict(result._mapping)) if result is not None else None


async def sql_create_group(stage_id: StageId, body: GroupCreateBody) -> Group:
    group_id = await database.execute(
        query=groups.insert(),
        values=GroupInsertable(
            **body.model_dump(exclude={"participant_ids"}),
            created=datetime_utc.now(),
            stage_id=stage_id,
        ).model_dump(),
    )
    group = await sql_get_group(GroupId(group_id))
    if group is None:
        raise ValueError("Could not create group")
    return group


async def get_group_participants(group_id: GroupId) -> list[Participant]:
    query = """
        SELECT p.*
        FROM participants p
        JOIN group_participants gp ON gp.participant_id = p.id
        WHERE gp.group_id = :group_id
        ORDER BY gp.display_order, p.id
        """
    result = await database.fetch_all(query=query, values={"group_id": group_id})
    return [Participant.model_validate(dict(row._mapping)) for row in result]


async def sql_set_group_participants(
    group_id: GroupId, participant_ids: Sequence[ParticipantId]
) -> None:
    # Remove old members of the group
    await database.execute(
        """
        DELETE FROM group_participants
        WHERE group_id = :group_id
        AND NOT (participant_id = any(:participant_ids))
        """,
        values={"group_id": group_id, "participant_ids": [int(id_) for id_ in participant_ids]},
    )

    # Add new members and keep the submitted order
    for display_order, participant_id in enumerate(participant_ids):
        await database.execute(
            """
            INSERT INTO group_participants (group_id, participant_id, display_order)
            VALUES (:group_id, :participant_id, :display_order)
            ON CONFLICT (group_id, participant_id)
            DO UPDATE SET display_order = EXCLUDED.display_order
            """,
            values={
                "group_id": group_id,
                "participant_id": participant_id,
                "display_order": display_order,
            },
        )
