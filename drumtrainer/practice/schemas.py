from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PatternOut(BaseModel):
    """One drum pattern from the catalogue."""

    id: str
    name: str
    module: int
    module_name: str
    description: str


class PatternCatalogueResponse(BaseModel):
    patterns: List[PatternOut] = Field(default_factory=list)


class QualityRatingOut(BaseModel):
    value: int
    label: str
    description: str
    icon: str


class SimpleRatingOut(BaseModel):
    quality: int
    label: str
    description: str
    icon: str


class RatingScalesResponse(BaseModel):
    """Full 0-5 scale plus the three-tier casual scale."""

    ratings: List[QualityRatingOut] = Field(default_factory=list)
    simple_ratings: List[SimpleRatingOut] = Field(default_factory=list)


class ScheduledPattern(BaseModel):
    """A pattern together with its current schedule."""

    pattern: PatternOut
    is_new: bool
    repetitions: int
    interval_days: int
    ease_factor: float
    next_review_at: str = Field(
        ...,
        description="ISO timestamp from which the pattern is due",
    )


class TodayQueueResponse(BaseModel):
    """Response body for /api/practice/today."""

    queue: List[ScheduledPattern] = Field(
        default_factory=list,
        description="Patterns to practice now: never-practiced and overdue first, then due today",
    )
    overdue_count: int = 0
    due_today_count: int = 0
    upcoming_count: int = 0
    new_count: int = Field(
        default=0,
        description="Number of never-practiced patterns waiting",
    )


class PatternStatusOut(BaseModel):
    pattern: PatternOut
    is_due: bool
    days_until_due: int = Field(..., ge=0)
    repetitions: int = 0
    interval_days: int = 0
    ease_factor: Optional[float] = None
    last_quality: Optional[int] = None
    last_practiced_at: Optional[str] = None


class PatternStatusResponse(BaseModel):
    patterns: List[PatternStatusOut] = Field(default_factory=list)


class PracticeReviewRequest(BaseModel):
    """Request body for grading one practice of a pattern."""

    pattern_id: str
    # Strict: "4", 4.0 and true are rejected. Range is checked by the scheduler.
    grade: int = Field(
        ...,
        strict=True,
        description="Self-assessed quality from 0 (complete blackout) to 5 (instant, effortless)",
    )
    tempo_bpm: Optional[int] = Field(
        default=None,
        ge=20,
        le=400,
        description="Optional metronome tempo the pattern was played at",
    )
    duration_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        description="Optional time spent on the pattern",
    )


class PracticeReviewResponse(BaseModel):
    """Response body for /api/practice/review."""

    pattern_id: str
    grade: int
    repetitions: int
    interval_days: int
    ease_factor: float
    next_review_at: str = Field(
        ...,
        description="ISO timestamp of the next scheduled practice for this pattern",
    )


class PracticeStatsResponse(BaseModel):
    total_patterns: int
    learned_patterns: int
    due_today: int
    average_ease: float
    longest_interval: int
    streak_patterns: int = Field(
        ...,
        description="Patterns with 3 or more consecutive successful practices",
    )
