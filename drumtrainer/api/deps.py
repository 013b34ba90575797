"""
Request-scoped dependencies shared by the practice routes.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Header, HTTPException, Request, status

from drumtrainer.config import AppConfig
from drumtrainer.practice.practice_service import PracticeSelectionConfig, PracticeService


async def get_practitioner_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Return the practitioner id set by the upstream auth layer.

    The backend does not authenticate; it only scopes data to the id
    the auth proxy forwards in `X-User-Id`.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing practitioner identity",
        )
    return x_user_id.strip()


def get_practice_service(request: Request) -> PracticeService:
    config: AppConfig = getattr(request.app.state, "config", None) or AppConfig()
    return PracticeService(PracticeSelectionConfig(default_limit=config.daily_practice_limit))
