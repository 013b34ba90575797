"""
API routes: health and build version.
"""

from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Request

from drumtrainer.config import AppConfig

from .models import HealthResponse, VersionResponse

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check."""
    return HealthResponse(status="ok")


@router.get("/version", response_model=VersionResponse)
async def version(request: Request) -> VersionResponse:
    """Build tag displayed by the app shell."""
    config: AppConfig = getattr(request.app.state, "config", None) or AppConfig()
    started_at = getattr(request.app.state, "started_at", None) or dt.datetime.now(dt.timezone.utc)
    return VersionResponse(commit=config.build_tag, deployed_at=started_at.isoformat())
