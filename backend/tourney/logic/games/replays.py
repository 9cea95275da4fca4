import io
import zipfile

from heliclockter import datetime_utc

from tourney.config import config
from tourney.logic.games.replay_keys import (
    build_temp_replay_key,
    sanitize_file_name,
    validate_replay_file_name,
)
from tourney.sql.games import get_games_with_replays
from tourney.sql.matches import sql_get_match
from tourney.storage.factory import get_object_store
from tourney.utils.errors import NotFoundError, StorageError, ValidationError
from tourney.utils.id_types import MatchId
from tourney.utils.logging import logger


async def upload_temp_replay(
    uploaded_by: str, match_id: MatchId, file_name: str, data: bytes
) -> str:
    """Stage a replay under ``temp/`` so it can be attached to a game submission later."""
    validate_replay_file_name(file_name, config.replay_allowed_extensions)
    if len(data) < 1:
        raise ValidationError("Replay file is empty", match_id=match_id, file_name=file_name)

    if await sql_get_match(match_id) is None:
        raise NotFoundError("Match does not exist", match_id=match_id)

    uploaded_at = datetime_utc.now()
    key = build_temp_replay_key(uploaded_by, match_id, file_name, uploaded_at)
    await get_object_store().upload(
        key,
        data,
        metadata={
            "uploaded-by": sanitize_file_name(uploaded_by),
            "match-id": str(int(match_id)),
            "original-name": sanitize_file_name(file_name),
            "uploaded-at": uploaded_at.isoformat(),
            "size": str(len(data)),
            "is-temp": "true",
        },
    )
    logger.info(f"Uploaded temp replay {key} ({len(data)} bytes)")
    return key


def get_archive_entry_name(position: int, map_name: str | None, replay_key: str) -> str:
    file_name = replay_key.rsplit("/", 1)[-1]
    return f"Game_{position}_{sanitize_file_name(map_name or 'Unknown')}_{file_name}"


async def build_match_replays_archive(match_id: MatchId) -> bytes:
    """
    Zip all replays of a match, one entry per game.

    Replays that can't be downloaded are skipped, so a single missing object does not make
    the rest of the match unavailable.
    """
    games = await get_games_with_replays(match_id)
    if len(games) < 1:
        raise NotFoundError("No replays found for this match", match_id=match_id)

    object_store = get_object_store()
    buffer = io.BytesIO()
    added = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for game in games:
            try:
                data = await object_store.download(game.replay_key)
            except StorageError as exc:
                logger.warning(f"Skipping replay of game {game.position}: {exc.describe()}")
                continue

            archive.writestr(get_archive_entry_name(game.position, game.map_name, game.replay_key), data)
            added += 1

    if added < 1:
        raise NotFoundError("None of the replays of this match could be downloaded", match_id=match_id)

    return buffer.getvalue()
