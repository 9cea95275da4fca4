from collections.abc import Mapping, Sequence

from heliclockter import datetime_utc

from tourney.database import database
from tourney.models.db.game import (
    Game,
    GameInsertable,
    GameParticipant,
    GameParticipantInsertable,
    GameSubmission,
    GameWithParticipants,
    GameWithReplay,
)
from tourney.schema import game_participants, games
from tourney.utils.db import fetch_all_parsed
from tourney.utils.id_types import GameId, MatchId, MatchParticipantId, ParticipantId


async def get_games_of_match(match_id: MatchId) -> list[GameWithParticipants]:
    match_games = await fetch_all_parsed(
        database,
        Game,
        games.select().where(games.c.match_id == match_id).order_by(games.c.position),
    )
    if len(match_games) < 1:
        return []

    entries = await fetch_all_parsed(
        database,
        GameParticipant,
        game_participants.select()
        .where(game_participants.c.game_id.in_([game.id for game in match_games]))
        .order_by(game_participants.c.game_id, game_participants.c.position),
    )
    return [
        GameWithParticipants(
            **game.model_dump(),
            participants=[entry for entry in entries if entry.game_id == game.id],
        )
        for game in match_games
    ]


async def get_games_with_replays(match_id: MatchId) -> list[GameWithReplay]:
    query = """
        SELECT g.id, g.position, g.replay_key, m.name AS map_name
        FROM games g
        LEFT JOIN maps m ON m.id = g.map_id
        WHERE g.match_id = :match_id
        AND g.replay_key IS NOT NULL
        ORDER BY g.position
        """
    result = await database.fetch_all(query=query, values={"match_id": match_id})
    return [GameWithReplay.model_validate(dict(row._mapping)) for row in result]


async def get_replay_keys_of_matches(match_ids: Sequence[MatchId]) -> list[str]:
    if len(match_ids) < 1:
        return []

    query = """
        SELECT replay_key
        FROM games
        WHERE match_id = any(:match_ids)
        AND replay_key IS NOT NULL
        ORDER BY match_id, position
        """
    result = await database.fetch_all(
        query=query, values={"match_ids": [int(id_) for id_ in match_ids]}
    )
    return [str(row._mapping["replay_key"]) for row in result]


async def sql_delete_games_of_match(match_id: MatchId) -> list[str]:
    """Delete all games of a match (participants cascade). Returns their replay keys."""
    query = """
        DELETE FROM games
        WHERE match_id = :match_id
        RETURNING replay_key
        """
    result = await database.fetch_all(query=query, values={"match_id": match_id})
    return [
        str(row._mapping["replay_key"])
        for row in result
        if row._mapping["replay_key"] is not None
    ]


async def sql_create_game(
    match_id: MatchId,
    position: int,
    game: GameSubmission,
    replay_key: str | None,
    match_participant_ids: Mapping[ParticipantId, MatchParticipantId],
) -> GameId:
    game_id = await database.execute(
        query=games.insert(),
        values=GameInsertable(
            created=datetime_utc.now(),
            match_id=match_id,
            map_id=game.map_id,
            position=position,
            replay_key=replay_key,
        ).model_dump(),
    )
    for entry_position, entry in enumerate(game.participants, start=1):
        await database.execute(
            query=game_participants.insert(),
            values=GameParticipantInsertable(
                game_id=GameId(game_id),
                match_participant_id=match_participant_ids[entry.participant_id],
                participant_id=entry.participant_id,
                civilization_id=entry.civilization_id,
                position=entry_position,
                is_winner=entry.is_winner,
            ).model_dump(),
        )
    return GameId(game_id)
