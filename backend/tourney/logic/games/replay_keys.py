import re
from collections.abc import Collection

from heliclockter import datetime_utc

from tourney.utils.errors import ValidationError
from tourney.utils.id_types import MatchId

TEMP_PREFIX = "temp/"
MATCHES_PREFIX = "matches/"


def sanitize_file_name(file_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)


def get_file_extension(file_name: str) -> str:
    index = file_name.rfind(".")
    return file_name[index:].lower() if index >= 0 else ""


def is_temp_replay_key(key: str) -> bool:
    return key.startswith(TEMP_PREFIX)


def get_match_replay_prefix(match_id: MatchId) -> str:
    return f"{MATCHES_PREFIX}{int(match_id)}/"


def is_match_replay_key(key: str, match_id: MatchId) -> bool:
    return key.startswith(get_match_replay_prefix(match_id))


def get_permanent_replay_key(match_id: MatchId, position: int, temp_key: str) -> str:
    """
    Permanent location of a promoted replay.

    ``position`` is the 1-based position of the game in the submitted batch, so the order in
    which games are submitted is part of the resulting keys (``game_1_...``, ``game_2_...``).
    The temp file name is kept as suffix; it carries the upload timestamp, so a promotion
    never overwrites a replay that is still referenced by the games being replaced.
    """
    file_name = temp_key.rsplit("/", 1)[-1]
    return f"{get_match_replay_prefix(match_id)}game_{position}_{file_name}"


def build_temp_replay_key(
    uploaded_by: str, match_id: MatchId, file_name: str, uploaded_at: datetime_utc
) -> str:
    timestamp = (
        f"{uploaded_at:%Y-%m-%dT%H-%M-%S}-{uploaded_at.microsecond // 1000:03d}Z"
    )
    return (
        f"{TEMP_PREFIX}{sanitize_file_name(uploaded_by)}/{int(match_id)}/"
        f"{timestamp}-{sanitize_file_name(file_name)}"
    )


def validate_replay_file_name(file_name: str, allowed_extensions: Collection[str]) -> str:
    extension = get_file_extension(file_name)
    if extension not in {allowed.lower() for allowed in allowed_extensions}:
        raise ValidationError(
            f"Invalid file type. Only {', '.join(sorted(allowed_extensions))} files are allowed.",
            file_name=file_name,
        )
    return extension
