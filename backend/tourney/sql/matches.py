from collections.abc import Sequence

from heliclockter import datetime_utc

from tourney.database import database
from tourney.logic.ranking.game_scores import ParticipantScore
from tourney.models.db.match import (
    Match,
    MatchInsertable,
    MatchParticipant,
    MatchSpec,
    MatchStatus,
    MatchUpdateBody,
)
from tourney.schema import match_participants, matches
from tourney.utils.db import fetch_all_parsed
from tourney.utils.id_types import GroupId, MatchId


async def sql_get_match(match_id: MatchId) -> Match | None:
    query = """
        SELECT *
        FROM matches
        WHERE id = :match_id
        """
    result = await database.fetch_one(query=query, values={"match_id": match_id})
    return Match.model_validate(dict(result._mapping)) if result is not None else None


async def get_matches_in_group(group_id: GroupId) -> list[Match]:
    return await fetch_all_parsed(
        database,
        Match,
        matches.select().where(matches.c.group_id == group_id).order_by(matches.c.id),
    )


async def get_match_participants(match_id: MatchId) -> list[MatchParticipant]:
    return await fetch_all_parsed(
        database,
        MatchParticipant,
        match_participants.select()
        .where(match_participants.c.match_id == match_id)
        .order_by(match_participants.c.id),
    )


async def sql_create_match(group_id: GroupId, new_match: MatchSpec) -> Match:
    """Insert a round-robin match together with the score rows of its two participants."""
    match_id = await database.execute(
        query=matches.insert(),
        values=MatchInsertable(
            **new_match.model_dump(),
            created=datetime_utc.now(),
            group_id=group_id,
        ).model_dump(),
    )
    for participant_id in (new_match.participant1_id, new_match.participant2_id):
        await database.execute(
            """
            INSERT INTO match_participants (match_id, participant_id)
            VALUES (:match_id, :participant_id)
            ON CONFLICT (match_id, participant_id) DO NOTHING
            """,
            values={"match_id": match_id, "participant_id": participant_id},
        )

    result = await sql_get_match(MatchId(match_id))
    if result is None:
        raise ValueError("Could not create match")
    return result


async def sql_delete_matches(match_ids: Sequence[MatchId]) -> None:
    if len(match_ids) < 1:
        return

    query = """
        DELETE FROM matches
        WHERE id = any(:match_ids)
        """
    await database.execute(query=query, values={"match_ids": [int(id_) for id_ in match_ids]})


async def sql_update_match_participant_scores(scores: Sequence[ParticipantScore]) -> None:
    query = """
        UPDATE match_participants
        SET
            won_score = :won_score,
            lost_score = :lost_score,
            is_winner = :is_winner
        WHERE id = :match_participant_id
        """
    for score in scores:
        await database.execute(
            query=query,
            values={
                "match_participant_id": score.match_participant_id,
                "won_score": score.won_score,
                "lost_score": score.lost_score,
                "is_winner": score.is_winner,
            },
        )


async def sql_update_match_status(match_id: MatchId, status: MatchStatus) -> None:
    query = """
        UPDATE matches
        SET status = CAST(:status AS match_status)
        WHERE id = :match_id
        """
    await database.execute(query=query, values={"match_id": match_id, "status": status.value})


async def sql_update_match(match_id: MatchId, body: MatchUpdateBody) -> None:
    values = body.model_dump(exclude_unset=True)
    for non_nullable in ("status", "civ_draft_key", "map_draft_key"):
        if values.get(non_nullable, "") is None:
            values.pop(non_nullable)

    if len(values) < 1:
        return

    if "status" in values:
        values["status"] = MatchStatus(values["status"]).value

    await database.execute(
        query=matches.update().where(matches.c.id == match_id),
        values=values,
    )
