import asyncio
import logging
from collections.abc import Collection, Mapping
from pathlib import Path
from typing import Any

import pytest

from tourney.logic.games import recording
from tourney.models.db.game import GameParticipantSubmission, GameSubmission
from tourney.models.db.group import Group
from tourney.models.db.lookup import Civilization, Map
from tourney.models.db.match import Match, MatchParticipant, MatchStatus
from tourney.storage.local import LocalObjectStore
from tourney.utils.dummy_records import (
    DUMMY_GROUP1,
    DUMMY_MATCH1,
    DUMMY_MATCH_PARTICIPANT1,
    DUMMY_MATCH_PARTICIPANT2,
    DUMMY_PARTICIPANT1,
    DUMMY_PARTICIPANT2,
    DUMMY_PARTICIPANT3,
)
from tourney.utils.errors import NotFoundError, StorageError, TransactionError, ValidationError
from tourney.utils.id_types import (
    CivilizationId,
    GameId,
    MapId,
    MatchId,
    MatchParticipantId,
    ParticipantId,
)

MATCH_ID = DUMMY_MATCH1.id
TEMP_KEY1 = "temp/alice/10/2026-01-11T04-32-11-000Z-game1.mgz"
TEMP_KEY2 = "temp/alice/10/2026-01-11T04-32-12-000Z-game2.mgz"
PERMANENT_KEY1 = "matches/10/game_1_2026-01-11T04-32-11-000Z-game1.mgz"
PERMANENT_KEY2 = "matches/10/game_2_2026-01-11T04-32-12-000Z-game2.mgz"


class _DummyTransaction:
    async def __aenter__(self) -> "_DummyTransaction":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        return False


class _FlakyObjectStore(LocalObjectStore):
    def __init__(self, root: Path, failing_deletes: Collection[str] = ()) -> None:
        super().__init__(root, timeout_seconds=5)
        self.failing_deletes = set(failing_deletes)

    async def _delete(self, key: str) -> None:
        if key in self.failing_deletes:
            raise OSError("object store unavailable")
        await super()._delete(key)


class _SlowCopyObjectStore(LocalObjectStore):
    def __init__(self, root: Path, copy_delay_seconds: float) -> None:
        super().__init__(root, timeout_seconds=0.05)
        self.copy_delay_seconds = copy_delay_seconds

    async def _copy(self, source_key: str, destination_key: str) -> None:
        await asyncio.sleep(self.copy_delay_seconds)
        await super()._copy(source_key, destination_key)


def _game(replay_key: str | None = None, first_wins: bool = True) -> GameSubmission:
    return GameSubmission(
        map_id=MapId(1),
        replay_key=replay_key,
        participants=[
            GameParticipantSubmission(
                participant_id=DUMMY_PARTICIPANT1.id,
                civilization_id=CivilizationId(1),
                is_winner=first_wins,
            ),
            GameParticipantSubmission(
                participant_id=DUMMY_PARTICIPANT2.id, is_winner=not first_wins
            ),
        ],
    )


def _patch_recording(
    monkeypatch: pytest.MonkeyPatch,
    object_store: LocalObjectStore,
    *,
    match: Match = DUMMY_MATCH1,
    group: Group | None = DUMMY_GROUP1,
    match_participants: list[MatchParticipant] | None = None,
    replaced_replay_keys: list[str] | None = None,
    fail_create_at: int | None = None,
    create_error: BaseException | None = None,
) -> dict[str, Any]:
    calls: dict[str, Any] = {
        "lock": 0,
        "deleted_games": 0,
        "created_games": [],
        "scores": None,
        "status": None,
    }
    participants = (
        [DUMMY_MATCH_PARTICIPANT1, DUMMY_MATCH_PARTICIPANT2]
        if match_participants is None
        else match_participants
    )

    async def fake_sql_get_match(match_id: MatchId) -> Match | None:
        return match if match_id == match.id else None

    async def fake_sql_get_group_of_match(_: MatchId) -> Group | None:
        return group

    async def fake_get_match_participants(_: MatchId) -> list[MatchParticipant]:
        return participants

    async def fake_get_maps_by_ids(map_ids: Collection[MapId]) -> list[Map]:
        return [Map(id=map_id, name="Arabia") for map_id in map_ids if map_id == MapId(1)]

    async def fake_get_civilizations_by_ids(
        civilization_ids: Collection[CivilizationId],
    ) -> list[Civilization]:
        return [Civilization(id=civ_id, name="Franks") for civ_id in civilization_ids]

    async def fake_sql_lock_match(_: MatchId) -> None:
        calls["lock"] += 1

    async def fake_sql_delete_games_of_match(_: MatchId) -> list[str]:
        calls["deleted_games"] += 1
        return replaced_replay_keys or []

    async def fake_sql_create_game(
        _: MatchId,
        position: int,
        game: GameSubmission,
        replay_key: str | None,
        match_participant_ids: Mapping[ParticipantId, MatchParticipantId],
    ) -> GameId:
        if position == fail_create_at:
            raise create_error if create_error is not None else RuntimeError("connection lost")
        assert set(match_participant_ids) == {DUMMY_PARTICIPANT1.id, DUMMY_PARTICIPANT2.id}
        calls["created_games"].append((position, replay_key))
        return GameId(position)

    async def fake_sql_update_match_participant_scores(scores: Any) -> None:
        calls["scores"] = list(scores)

    async def fake_sql_update_match_status(_: MatchId, status: MatchStatus) -> None:
        calls["status"] = status

    async def fake_get_games_of_match(_: MatchId) -> list[Any]:
        return []

    monkeypatch.setattr(recording, "sql_get_match", fake_sql_get_match)
    monkeypatch.setattr(recording, "sql_get_group_of_match", fake_sql_get_group_of_match)
    monkeypatch.setattr(recording, "get_match_participants", fake_get_match_participants)
    monkeypatch.setattr(recording, "get_maps_by_ids", fake_get_maps_by_ids)
    monkeypatch.setattr(recording, "get_civilizations_by_ids", fake_get_civilizations_by_ids)
    monkeypatch.setattr(recording, "sql_lock_match", fake_sql_lock_match)
    monkeypatch.setattr(recording, "sql_delete_games_of_match", fake_sql_delete_games_of_match)
    monkeypatch.setattr(recording, "sql_create_game", fake_sql_create_game)
    monkeypatch.setattr(
        recording, "sql_update_match_participant_scores", fake_sql_update_match_participant_scores
    )
    monkeypatch.setattr(recording, "sql_update_match_status", fake_sql_update_match_status)
    monkeypatch.setattr(recording, "get_games_of_match", fake_get_games_of_match)
    monkeypatch.setattr(recording, "get_object_store", lambda: object_store)
    monkeypatch.setattr(recording.database, "transaction", lambda: _DummyTransaction())
    return calls


@pytest.mark.asyncio
async def test_record_games_promotes_replays_and_applies_score(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    await store.upload(TEMP_KEY1, b"replay-1")
    await store.upload(TEMP_KEY2, b"replay-2")
    calls = _patch_recording(monkeypatch, store)

    result = await recording.record_games(
        MATCH_ID,
        [_game(TEMP_KEY1, first_wins=True), _game(TEMP_KEY2, first_wins=False), _game()],
        apply_score=True,
        files_to_remove=[],
    )

    assert result.id == MATCH_ID
    assert calls["lock"] == 1
    assert calls["created_games"] == [(1, PERMANENT_KEY1), (2, PERMANENT_KEY2), (3, None)]
    assert await store.download(PERMANENT_KEY1) == b"replay-1"
    assert await store.download(PERMANENT_KEY2) == b"replay-2"
    assert await store.list_keys("temp/") == []

    first, second = calls["scores"]
    assert (first.won_score, first.lost_score, first.is_winner) == (2, 1, True)
    assert (second.won_score, second.lost_score, second.is_winner) == (1, 2, False)
    assert calls["status"] == MatchStatus.ADMIN_APPROVED


@pytest.mark.asyncio
async def test_record_games_without_applying_score(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _patch_recording(monkeypatch, LocalObjectStore(tmp_path, timeout_seconds=5))

    await recording.record_games(MATCH_ID, [_game()], apply_score=False, files_to_remove=[])

    assert calls["created_games"] == [(1, None)]
    assert calls["scores"] is None
    assert calls["status"] is None


@pytest.mark.asyncio
async def test_database_failure_rolls_back_promoted_replays(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    await store.upload(TEMP_KEY1, b"replay-1")
    await store.upload(TEMP_KEY2, b"replay-2")
    calls = _patch_recording(monkeypatch, store, fail_create_at=2)

    with pytest.raises(TransactionError) as exc_info:
        await recording.record_games(
            MATCH_ID, [_game(TEMP_KEY1), _game(TEMP_KEY2)], apply_score=True, files_to_remove=[]
        )

    assert exc_info.value.match_id == MATCH_ID
    assert exc_info.value.game_index == 2
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert await store.list_keys("matches/") == []
    assert await store.list_keys("temp/") == [TEMP_KEY1, TEMP_KEY2]
    assert calls["status"] is None


@pytest.mark.asyncio
async def test_failed_copy_rolls_back_earlier_promotions(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    await store.upload(TEMP_KEY1, b"replay-1")
    _patch_recording(monkeypatch, store)

    with pytest.raises(StorageError) as exc_info:
        await recording.record_games(
            MATCH_ID, [_game(TEMP_KEY1), _game(TEMP_KEY2)], apply_score=True, files_to_remove=[]
        )

    assert exc_info.value.game_index == 2
    assert exc_info.value.context["temp_key"] == TEMP_KEY2
    assert not await store.exists(PERMANENT_KEY1)
    assert await store.exists(TEMP_KEY1)


@pytest.mark.asyncio
async def test_match_without_participants_records_nothing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _patch_recording(
        monkeypatch, LocalObjectStore(tmp_path, timeout_seconds=5), match_participants=[]
    )

    result = await recording.record_games(MATCH_ID, [_game()], apply_score=True, files_to_remove=[])

    assert result.id == MATCH_ID
    assert calls["lock"] == 1
    assert calls["deleted_games"] == 0
    assert calls["created_games"] == []
    assert calls["status"] is None


@pytest.mark.asyncio
async def test_replaced_replays_are_removed_after_commit(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    old_key = "matches/10/game_1_old.mgz"
    kept_key = "matches/10/game_2_kept.mgz"
    await store.upload(old_key, b"old")
    await store.upload(kept_key, b"kept")
    _patch_recording(monkeypatch, store, replaced_replay_keys=[old_key, kept_key])

    await recording.record_games(
        MATCH_ID, [_game(kept_key)], apply_score=True, files_to_remove=[]
    )

    assert not await store.exists(old_key)
    assert await store.exists(kept_key)


@pytest.mark.asyncio
async def test_failing_file_removal_does_not_abort_submission(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    removed_key = "temp/alice/10/old.mgz"
    broken_key = "matches/10/game_1_broken.mgz"
    store = _FlakyObjectStore(tmp_path, failing_deletes=[broken_key])
    await store.upload(removed_key, b"old")
    await store.upload(broken_key, b"broken")
    calls = _patch_recording(monkeypatch, store)

    await recording.record_games(
        MATCH_ID, [_game()], apply_score=True, files_to_remove=[removed_key, broken_key]
    )

    assert not await store.exists(removed_key)
    assert await store.exists(broken_key)
    assert calls["created_games"] == [(1, None)]


@pytest.mark.asyncio
async def test_unknown_match_is_not_found(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch_recording(monkeypatch, LocalObjectStore(tmp_path, timeout_seconds=5))

    with pytest.raises(NotFoundError):
        await recording.record_games(MatchId(999), [_game()], apply_score=True, files_to_remove=[])


@pytest.mark.asyncio
async def test_unknown_map_is_not_found(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_recording(monkeypatch, LocalObjectStore(tmp_path, timeout_seconds=5))
    game = _game().model_copy(update={"map_id": MapId(42)})

    with pytest.raises(NotFoundError) as exc_info:
        await recording.record_games(MATCH_ID, [game], apply_score=True, files_to_remove=[])

    assert exc_info.value.context["map_ids"] == [42]
    assert calls["lock"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("games", "apply_score", "files_to_remove", "match"),
    [
        ([_game()] * 6, True, [], DUMMY_MATCH1),
        ([_game("matches/11/game_1_other.mgz")], True, [], DUMMY_MATCH1),
        ([_game(TEMP_KEY1)], True, [TEMP_KEY1], DUMMY_MATCH1),
        ([_game(TEMP_KEY1), _game(TEMP_KEY1)], True, [], DUMMY_MATCH1),
        ([_game()], True, ["matches/11/game_1_other.mgz"], DUMMY_MATCH1),
        ([_game()], True, [], DUMMY_MATCH1.model_copy(update={"status": MatchStatus.CANCELLED})),
    ],
)
async def test_invalid_submissions_are_rejected_before_any_change(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    games: list[GameSubmission],
    apply_score: bool,
    files_to_remove: list[str],
    match: Match,
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    await store.upload(TEMP_KEY1, b"replay-1")
    calls = _patch_recording(monkeypatch, store, match=match)

    with pytest.raises(ValidationError):
        await recording.record_games(MATCH_ID, games, apply_score, files_to_remove)

    assert calls["lock"] == 0
    assert await store.exists(TEMP_KEY1)


@pytest.mark.asyncio
async def test_participant_outside_match_is_rejected(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _patch_recording(monkeypatch, LocalObjectStore(tmp_path, timeout_seconds=5))
    game = GameSubmission(
        map_id=MapId(1),
        participants=[GameParticipantSubmission(participant_id=DUMMY_PARTICIPANT3.id)],
    )

    with pytest.raises(ValidationError) as exc_info:
        await recording.record_games(MATCH_ID, [_game(), game], True, [])

    assert exc_info.value.game_index == 2
    assert calls["lock"] == 0


@pytest.mark.asyncio
async def test_failed_rollback_is_logged_and_keeps_original_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    store = _FlakyObjectStore(tmp_path, failing_deletes=[PERMANENT_KEY1])
    await store.upload(TEMP_KEY1, b"replay-1")
    await store.upload(TEMP_KEY2, b"replay-2")
    _patch_recording(monkeypatch, store, fail_create_at=2)

    with caplog.at_level(logging.ERROR, logger="tourney"):
        with pytest.raises(TransactionError) as exc_info:
            await recording.record_games(
                MATCH_ID, [_game(TEMP_KEY1), _game(TEMP_KEY2)], apply_score=True, files_to_remove=[]
            )

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert exc_info.value.game_index == 2
    assert any(PERMANENT_KEY1 in record.getMessage() for record in caplog.records)
    assert await store.list_keys("matches/") == [PERMANENT_KEY1]
    assert await store.list_keys("temp/") == [TEMP_KEY1, TEMP_KEY2]


@pytest.mark.asyncio
async def test_failed_temp_cleanup_does_not_fail_submission(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = _FlakyObjectStore(tmp_path, failing_deletes=[TEMP_KEY1])
    await store.upload(TEMP_KEY1, b"replay-1")
    calls = _patch_recording(monkeypatch, store)

    result = await recording.record_games(
        MATCH_ID, [_game(TEMP_KEY1)], apply_score=True, files_to_remove=[]
    )

    assert result.id == MATCH_ID
    assert calls["created_games"] == [(1, PERMANENT_KEY1)]
    assert calls["status"] == MatchStatus.ADMIN_APPROVED
    assert await store.download(PERMANENT_KEY1) == b"replay-1"
    assert await store.exists(TEMP_KEY1)


@pytest.mark.asyncio
async def test_copy_timeout_rolls_back_without_orphaned_replay(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    await LocalObjectStore(tmp_path, timeout_seconds=5).upload(TEMP_KEY1, b"replay-1")
    store = _SlowCopyObjectStore(tmp_path, copy_delay_seconds=0.3)
    calls = _patch_recording(monkeypatch, store)

    with pytest.raises(StorageError) as exc_info:
        await recording.record_games(MATCH_ID, [_game(TEMP_KEY1)], True, [])

    assert exc_info.value.game_index == 1
    assert "timed out" in str(exc_info.value.__cause__)
    assert calls["created_games"] == []
    checker = LocalObjectStore(tmp_path, timeout_seconds=5)
    assert not await checker.exists(PERMANENT_KEY1)
    assert await checker.exists(TEMP_KEY1)


@pytest.mark.asyncio
async def test_cancelled_submission_rolls_back_promoted_replays(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = LocalObjectStore(tmp_path, timeout_seconds=5)
    await store.upload(TEMP_KEY1, b"replay-1")
    await store.upload(TEMP_KEY2, b"replay-2")
    _patch_recording(monkeypatch, store, fail_create_at=2, create_error=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await recording.record_games(
            MATCH_ID, [_game(TEMP_KEY1), _game(TEMP_KEY2)], apply_score=True, files_to_remove=[]
        )

    assert await store.list_keys("matches/") == []
    assert await store.list_keys("temp/") == [TEMP_KEY1, TEMP_KEY2]
