"""
Request and response models for the service-level API.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"


class VersionResponse(BaseModel):
    """Response for GET /api/version."""

    commit: str = Field(..., description="Short build commit id, or 'local'")
    deployed_at: str = Field(..., description="ISO timestamp the running process started")
