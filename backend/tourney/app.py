from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette import status
from starlette.responses import JSONResponse

from tourney.config import config
from tourney.database import database
from tourney.routes import groups, matches
from tourney.routes.models import ErrorDetail, ErrorResponse
from tourney.utils.alembic import alembic_run_migrations
from tourney.utils.errors import (
    NotFoundError,
    StorageError,
    TourneyError,
    TransactionError,
    ValidationError,
)
from tourney.utils.logging import logger


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await database.connect()

    if config.auto_run_migrations:
        alembic_run_migrations()

    yield

    await database.disconnect()


app = FastAPI(title="Tourney API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_CODES: dict[type[TourneyError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StorageError: status.HTTP_502_BAD_GATEWAY,
    TransactionError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_status_code(exc: TourneyError) -> int:
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(TourneyError)
async def tourney_error_handler(_: Request, exc: TourneyError) -> JSONResponse:
    status_code = get_status_code(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(exc.describe(), exc_info=exc.__cause__ or exc)
    else:
        logger.info(exc.describe())

    response = ErrorResponse(
        detail=ErrorDetail(
            message=exc.message,
            match_id=exc.match_id,
            game_index=exc.game_index,
            context=exc.context,
        )
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


@app.get("/ping")
async def ping() -> str:
    return "ping"


app.include_router(groups.router, tags=["groups"])
app.include_router(matches.router, tags=["matches"])
