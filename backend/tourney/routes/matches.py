from fastapi import APIRouter, Form, UploadFile
from starlette.responses import Response

from tourney.config import config
from tourney.logic.games.recording import get_match_with_games, record_games
from tourney.logic.games.replays import build_match_replays_archive, upload_temp_replay
from tourney.logic.planning.matches import update_match_details
from tourney.models.db.game import GamesSubmissionBody
from tourney.models.db.match import MatchUpdateBody
from tourney.routes.models import (
    MatchWithGamesResponse,
    SingleMatchResponse,
    TempReplay,
    TempReplayResponse,
)
from tourney.utils.errors import ValidationError
from tourney.utils.id_types import MatchId

router = APIRouter(prefix=config.api_prefix)


@router.get("/matches/{match_id}", response_model=MatchWithGamesResponse)
async def get_match(match_id: MatchId) -> MatchWithGamesResponse:
    return MatchWithGamesResponse(data=await get_match_with_games(match_id))


@router.put("/matches/{match_id}", response_model=SingleMatchResponse)
async def update_match(match_id: MatchId, body: MatchUpdateBody) -> SingleMatchResponse:
    return SingleMatchResponse(data=await update_match_details(match_id, body))


@router.put("/matches/{match_id}/games", response_model=MatchWithGamesResponse)
async def put_match_games(match_id: MatchId, body: GamesSubmissionBody) -> MatchWithGamesResponse:
    return MatchWithGamesResponse(
        data=await record_games(match_id, body.games, body.apply_score, body.files_to_remove)
    )


@router.post("/matches/{match_id}/replays", response_model=TempReplayResponse)
async def upload_replay(
    match_id: MatchId, file: UploadFile, uploaded_by: str = Form(...)
) -> TempReplayResponse:
    if file.filename is None:
        raise ValidationError("Replay file has no name", match_id=match_id)

    key = await upload_temp_replay(uploaded_by, match_id, file.filename, await file.read())
    return TempReplayResponse(data=TempReplay(key=key))


@router.get("/matches/{match_id}/replays.zip")
async def download_replays(match_id: MatchId) -> Response:
    return Response(
        content=await build_match_replays_archive(match_id),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="match_{int(match_id)}_replays.zip"'},
    )
