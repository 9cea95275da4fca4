from collections.abc import Sequence

from tourney.database import database
from tourney.logic.games.promotion import ReplayPromotions, delete_objects_best_effort
from tourney.logic.games.replay_keys import is_match_replay_key, is_temp_replay_key
from tourney.logic.ranking.game_scores import calculate_match_scores
from tourney.models.db.game import GameSubmission, MatchWithGames
from tourney.models.db.group import Group
from tourney.models.db.match import Match, MatchParticipant, MatchStatus
from tourney.sql.games import get_games_of_match, sql_create_game, sql_delete_games_of_match
from tourney.sql.groups import sql_get_group_of_match
from tourney.sql.locks import sql_lock_match
from tourney.sql.matches import (
    get_match_participants,
    sql_get_match,
    sql_update_match_participant_scores,
    sql_update_match_status,
)
from tourney.sql.participants import get_civilizations_by_ids, get_maps_by_ids
from tourney.storage.base import ObjectStore
from tourney.storage.factory import get_object_store
from tourney.utils.errors import NotFoundError, TourneyError, TransactionError, ValidationError
from tourney.utils.id_types import MatchId
from tourney.utils.logging import logger


def validate_game_submissions(
    match: Match,
    group: Group | None,
    match_participants: Sequence[MatchParticipant],
    games: Sequence[GameSubmission],
    apply_score: bool,
    files_to_remove: Sequence[str],
) -> None:
    if group is not None and len(games) > group.game_count:
        raise ValidationError(
            f"A match of this group has at most {group.game_count} games",
            match_id=match.id,
            submitted_games=len(games),
        )

    if apply_score and match.status == MatchStatus.CANCELLED:
        raise ValidationError("Cannot apply scores to a cancelled match", match_id=match.id)

    for key in files_to_remove:
        if not is_temp_replay_key(key) and not is_match_replay_key(key, match.id):
            raise ValidationError("Cannot remove a file of another match", match_id=match.id, key=key)

    participant_ids = {match_participant.participant_id for match_participant in match_participants}
    removed_keys = set(files_to_remove)
    seen_replay_keys: set[str] = set()

    for position, game in enumerate(games, start=1):
        if len(participant_ids) > 0:
            for entry in game.participants:
                if entry.participant_id not in participant_ids:
                    raise ValidationError(
                        "Participant does not play in this match",
                        match_id=match.id,
                        game_index=position,
                        participant_id=int(entry.participant_id),
                    )

        if game.replay_key is None:
            continue
        if not is_temp_replay_key(game.replay_key) and not is_match_replay_key(
            game.replay_key, match.id
        ):
            raise ValidationError(
                "Replay does not belong to this match",
                match_id=match.id,
                game_index=position,
                key=game.replay_key,
            )
        if game.replay_key in removed_keys:
            raise ValidationError(
                "Replay is both attached to a game and marked for removal",
                match_id=match.id,
                game_index=position,
                key=game.replay_key,
            )
        if game.replay_key in seen_replay_keys:
            raise ValidationError(
                "Replay is attached to more than one game",
                match_id=match.id,
                game_index=position,
                key=game.replay_key,
            )
        seen_replay_keys.add(game.replay_key)


async def check_game_references_exist(match_id: MatchId, games: Sequence[GameSubmission]) -> None:
    map_ids = {game.map_id for game in games}
    missing_map_ids = map_ids - {map_.id for map_ in await get_maps_by_ids(map_ids)}
    if len(missing_map_ids) > 0:
        raise NotFoundError(
            "Map does not exist",
            match_id=match_id,
            map_ids=sorted(int(id_) for id_ in missing_map_ids),
        )

    civilization_ids = {
        entry.civilization_id
        for game in games
        for entry in game.participants
        if entry.civilization_id is not None
    }
    missing_civilization_ids = civilization_ids - {
        civilization.id for civilization in await get_civilizations_by_ids(civilization_ids)
    }
    if len(missing_civilization_ids) > 0:
        raise NotFoundError(
            "Civilization does not exist",
            match_id=match_id,
            civilization_ids=sorted(int(id_) for id_ in missing_civilization_ids),
        )


class GameRecording:
    """State of one replace-all game submission for a match."""

    def __init__(
        self,
        match_id: MatchId,
        games: Sequence[GameSubmission],
        apply_score: bool,
        object_store: ObjectStore,
    ) -> None:
        self.match_id = match_id
        self.games = games
        self.apply_score = apply_score
        self.promotions = ReplayPromotions(object_store, match_id)
        self.position: int | None = None
        self.replaced_replay_keys: list[str] = []
        self.replay_keys: list[str] = []

    async def replace_games(self) -> bool:
        """
        Replace the games of the match. Must run inside a transaction.

        Returns False when the match has no participants, in which case nothing is written.
        """
        await sql_lock_match(self.match_id)
        match_participants = await get_match_participants(self.match_id)
        if len(match_participants) < 1:
            return False

        match_participant_ids = {
            match_participant.participant_id: match_participant.id
            for match_participant in match_participants
        }
        self.replaced_replay_keys = await sql_delete_games_of_match(self.match_id)

        for position, game in enumerate(self.games, start=1):
            self.position = position
            for entry in game.participants:
                if entry.participant_id not in match_participant_ids:
                    raise ValidationError(
                        "Participant does not play in this match",
                        match_id=self.match_id,
                        game_index=position,
                        participant_id=int(entry.participant_id),
                    )

            replay_key = game.replay_key
            if replay_key is not None and is_temp_replay_key(replay_key):
                replay_key = await self.promotions.promote(replay_key, position)
            if replay_key is not None:
                self.replay_keys.append(replay_key)

            await sql_create_game(self.match_id, position, game, replay_key, match_participant_ids)

        self.position = None
        if self.apply_score:
            await sql_update_match_participant_scores(
                calculate_match_scores(match_participants, self.games)
            )
            await sql_update_match_status(self.match_id, MatchStatus.ADMIN_APPROVED)

        return True

    def get_orphaned_replay_keys(self) -> list[str]:
        kept_keys = set(self.replay_keys)
        return [
            key
            for key in self.replaced_replay_keys
            if key not in kept_keys and is_match_replay_key(key, self.match_id)
        ]


async def get_match_with_games(match_id: MatchId) -> MatchWithGames:
    match = await sql_get_match(match_id)
    if match is None:
        raise NotFoundError("Match does not exist", match_id=match_id)

    return MatchWithGames(
        **match.model_dump(),
        participants=await get_match_participants(match_id),
        games=await get_games_of_match(match_id),
    )


async def record_games(
    match_id: MatchId,
    games: Sequence[GameSubmission],
    apply_score: bool,
    files_to_remove: Sequence[str],
) -> MatchWithGames:
    """
    Replace the game history of a match and optionally apply its score.

    The database transaction is the durability boundary. Replays are copied from temp to
    permanent storage inside it; after a commit the temp copies are deleted, after a failure
    the permanent copies are deleted and the temp uploads stay available. Files the admin
    unlinked are removed up front, best-effort, outside the transaction.
    """
    match = await sql_get_match(match_id)
    if match is None:
        raise NotFoundError("Match does not exist", match_id=match_id)

    validate_game_submissions(
        match,
        await sql_get_group_of_match(match_id),
        await get_match_participants(match_id),
        games,
        apply_score,
        files_to_remove,
    )
    await check_game_references_exist(match_id, games)

    object_store = get_object_store()
    await delete_objects_best_effort(
        object_store, files_to_remove, reason=f"replays unlinked from match {int(match_id)}"
    )

    recording = GameRecording(match_id, games, apply_score, object_store)
    try:
        async with database.transaction():
            games_replaced = await recording.replace_games()
    except BaseException as exc:
        # Cancellation included: the copies already made must not outlive the aborted transaction.
        await recording.promotions.rollback()
        if isinstance(exc, TourneyError) or not isinstance(exc, Exception):
            raise
        raise TransactionError(
            "Could not record the games of the match",
            match_id=match_id,
            game_index=recording.position,
        ) from exc

    if not games_replaced:
        logger.info(f"Match {int(match_id)} has no participants, no games recorded")
        return await get_match_with_games(match_id)

    await recording.promotions.cleanup_temp_keys()
    await delete_objects_best_effort(
        object_store,
        recording.get_orphaned_replay_keys(),
        reason=f"replays of replaced games of match {int(match_id)}",
    )
    logger.info(
        f"Recorded {len(games)} games for match {int(match_id)} "
        f"({len(recording.promotions)} replays promoted, apply_score={apply_score})"
    )
    return await get_match_with_games(match_id)
