from collections.abc import Sequence

from tourney.database import database
from tourney.logic.games.promotion import delete_objects_best_effort
from tourney.logic.scheduling.group_matches import plan_group_matches
from tourney.models.db.group import (
    Group,
    GroupCreateBody,
    GroupReconciliation,
    GroupWithMatches,
)
from tourney.sql.games import get_replay_keys_of_matches
from tourney.sql.groups import (
    get_group_participants,
    sql_create_group,
    sql_get_group,
    sql_set_group_participants,
)
from tourney.sql.locks import sql_lock_group
from tourney.sql.matches import get_matches_in_group, sql_create_match, sql_delete_matches
from tourney.sql.participants import get_participants_by_ids, get_tournament_id_of_stage
from tourney.storage.factory import get_object_store
from tourney.utils.errors import NotFoundError, TourneyError, TransactionError
from tourney.utils.id_types import GroupId, ParticipantId, StageId, TournamentId
from tourney.utils.logging import logger


def deduplicate_participant_ids(participant_ids: Sequence[ParticipantId]) -> list[ParticipantId]:
    return list(dict.fromkeys(participant_ids))


async def reconcile_group_matches(
    group: Group, tournament_id: TournamentId, desired_participant_ids: Sequence[ParticipantId]
) -> tuple[GroupReconciliation, list[str]]:
    """
    Replace the participants of a group and bring its round-robin matches in line with them.

    Must run inside a transaction. Returns the applied changes and the replay keys of the games
    of deleted matches, which the caller removes from the object store once committed.
    """
    participants = await get_participants_by_ids(tournament_id, desired_participant_ids)
    missing_ids = set(desired_participant_ids) - {participant.id for participant in participants}
    if len(missing_ids) > 0:
        raise NotFoundError(
            "Participants do not exist in this tournament",
            group_id=int(group.id),
            participant_ids=sorted(int(id_) for id_ in missing_ids),
        )

    await sql_set_group_participants(group.id, desired_participant_ids)

    plan = plan_group_matches(await get_matches_in_group(group.id), desired_participant_ids)
    replay_keys = await get_replay_keys_of_matches(plan.match_ids_to_delete)
    await sql_delete_matches(plan.match_ids_to_delete)
    created = [
        await sql_create_match(group.id, new_match) for new_match in plan.matches_to_create
    ]

    return GroupReconciliation(created=created, deleted=plan.match_ids_to_delete), replay_keys


async def reconcile_group_participants(
    group_id: GroupId, desired_participant_ids: Sequence[ParticipantId]
) -> GroupReconciliation:
    desired = deduplicate_participant_ids(desired_participant_ids)

    try:
        async with database.transaction():
            await sql_lock_group(group_id)
            group = await sql_get_group(group_id)
            if group is None:
                raise NotFoundError("Group does not exist", group_id=int(group_id))

            tournament_id = await get_tournament_id_of_stage(group.stage_id)
            if tournament_id is None:
                raise NotFoundError("Stage of group does not exist", group_id=int(group_id))

            reconciliation, replay_keys = await reconcile_group_matches(
                group, tournament_id, desired
            )
    except TourneyError:
        raise
    except Exception as exc:
        raise TransactionError(
            "Could not update the participants of the group", group_id=int(group_id)
        ) from exc

    await delete_objects_best_effort(
        get_object_store(), replay_keys, reason=f"replays of deleted matches of group {group_id}"
    )
    logger.info(
        f"Reconciled matches of group {group_id}: "
        f"{len(reconciliation.created)} created, {len(reconciliation.deleted)} deleted"
    )
    return reconciliation


async def get_group_with_matches(group_id: GroupId) -> GroupWithMatches:
    group = await sql_get_group(group_id)
    if group is None:
        raise NotFoundError("Group does not exist", group_id=int(group_id))

    return GroupWithMatches(
        **group.model_dump(),
        participants=await get_group_participants(group_id),
        matches=await get_matches_in_group(group_id),
    )


async def create_group(stage_id: StageId, body: GroupCreateBody) -> GroupWithMatches:
    desired = deduplicate_participant_ids(body.participant_ids)

    try:
        async with database.transaction():
            tournament_id = await get_tournament_id_of_stage(stage_id)
            if tournament_id is None:
                raise NotFoundError("Stage does not exist", stage_id=int(stage_id))

            group = await sql_create_group(stage_id, body)
            await reconcile_group_matches(group, tournament_id, desired)
    except TourneyError:
        raise
    except Exception as exc:
        raise TransactionError("Could not create the group", stage_id=int(stage_id)) from exc

    return await get_group_with_matches(group.id)
