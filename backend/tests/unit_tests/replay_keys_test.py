from zoneinfo import ZoneInfo

import pytest
from heliclockter import datetime_utc

from tourney.logic.games.replay_keys import (
    build_temp_replay_key,
    get_file_extension,
    get_permanent_replay_key,
    is_match_replay_key,
    is_temp_replay_key,
    sanitize_file_name,
    validate_replay_file_name,
)
from tourney.utils.errors import ValidationError
from tourney.utils.id_types import MatchId

ALLOWED_EXTENSIONS = [".aoe2record", ".mgz", ".mgx"]


def test_sanitize_file_name() -> None:
    assert sanitize_file_name("My Game (1).aoe2record") == "My_Game__1_.aoe2record"
    assert sanitize_file_name("../../etc/passwd") == ".._.._etc_passwd"


def test_get_file_extension() -> None:
    assert get_file_extension("game.AOE2RECORD") == ".aoe2record"
    assert get_file_extension("no_extension") == ""


def test_build_temp_replay_key() -> None:
    uploaded_at = datetime_utc(2026, 3, 4, 5, 6, 7, 89_000, tzinfo=ZoneInfo("UTC"))

    key = build_temp_replay_key("player one", MatchId(12), "final game.mgz", uploaded_at)

    assert key == "temp/player_one/12/2026-03-04T05-06-07-089Z-final_game.mgz"
    assert is_temp_replay_key(key)
    assert not is_match_replay_key(key, MatchId(12))


def test_permanent_replay_key_keeps_temp_file_name() -> None:
    temp_key = "temp/alice/12/2026-03-04T05-06-07-089Z-final.mgz"

    key = get_permanent_replay_key(MatchId(12), 2, temp_key)

    assert key == "matches/12/game_2_2026-03-04T05-06-07-089Z-final.mgz"
    assert is_match_replay_key(key, MatchId(12))
    assert not is_match_replay_key(key, MatchId(1))
    assert not is_temp_replay_key(key)


def test_validate_replay_file_name() -> None:
    assert validate_replay_file_name("game.Mgx", ALLOWED_EXTENSIONS) == ".mgx"

    with pytest.raises(ValidationError) as exc_info:
        validate_replay_file_name("game.zip", ALLOWED_EXTENSIONS)

    assert exc_info.value.context == {"file_name": "game.zip"}
