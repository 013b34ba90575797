"""
FastAPI application for the drum practice API.
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from drumtrainer.config import load_config
from drumtrainer.practice.patterns import UnknownPatternError
from drumtrainer.practice.scheduler import InvalidGradeError

from .practice_routes import router as practice_router
from .routes import router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Read configuration and record the start time; nothing to clear on shutdown."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.config = config
    app.state.started_at = dt.datetime.now(dt.timezone.utc)
    logger.info("Starting drumtrainer API (build %s)", config.build_tag)
    yield


app = FastAPI(
    title="Drumtrainer API",
    description="Spaced-repetition practice scheduling for drum patterns",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
app.include_router(practice_router)


@app.exception_handler(InvalidGradeError)
async def invalid_grade_handler(request: Request, exc: InvalidGradeError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.exception_handler(UnknownPatternError)
async def unknown_pattern_handler(request: Request, exc: UnknownPatternError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(StaleDataError)
async def write_conflict_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    # Another request updated the same pattern memory first.
    logger.warning("Practice write conflict on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Pattern was updated concurrently; reload and retry"},
    )
