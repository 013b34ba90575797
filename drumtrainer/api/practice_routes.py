from __future__ import annotations

import datetime as dt
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from drumtrainer.api.deps import get_practice_service, get_practitioner_id
from drumtrainer.db.models import MEMORY_UNIQUE_CONSTRAINT, PatternMemory
from drumtrainer.db.session import get_db
from drumtrainer.practice.patterns import (
    DRUM_PATTERNS,
    MODULE_NAMES,
    QUALITY_RATINGS,
    SIMPLE_RATINGS,
    DrumPattern,
    get_pattern,
)
from drumtrainer.practice.practice_service import PracticeService
from drumtrainer.practice.scheduler import ReviewItem
from drumtrainer.practice.schemas import (
    PatternCatalogueResponse,
    PatternOut,
    PatternStatusOut,
    PatternStatusResponse,
    PracticeReviewRequest,
    PracticeReviewResponse,
    PracticeStatsResponse,
    QualityRatingOut,
    RatingScalesResponse,
    ScheduledPattern,
    SimpleRatingOut,
    TodayQueueResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/practice", tags=["practice"])


def _pattern_out(pattern: DrumPattern) -> PatternOut:
    return PatternOut(
        id=pattern.id,
        name=pattern.name,
        module=pattern.module,
        module_name=MODULE_NAMES.get(pattern.module, ""),
        description=pattern.description,
    )


def _scheduled(item: ReviewItem) -> ScheduledPattern:
    return ScheduledPattern(
        pattern=_pattern_out(get_pattern(item.item_id)),
        is_new=item.is_new,
        repetitions=item.repetitions,
        interval_days=item.interval_days,
        ease_factor=item.ease_factor,
        next_review_at=item.due_at.isoformat(),
    )


async def _load_memories(db: AsyncSession, user_id: str) -> list[PatternMemory]:
    result = await db.execute(select(PatternMemory).where(PatternMemory.user_id == user_id))
    return list(result.scalars().all())


@router.get("/patterns", response_model=PatternCatalogueResponse)
async def list_patterns() -> PatternCatalogueResponse:
    """
    List the drum pattern catalogue.
    """
    return PatternCatalogueResponse(patterns=[_pattern_out(p) for p in DRUM_PATTERNS])


@router.get("/ratings", response_model=RatingScalesResponse)
async def list_ratings() -> RatingScalesResponse:
    return RatingScalesResponse(
        ratings=[
            QualityRatingOut(value=r.value, label=r.label, description=r.description, icon=r.icon)
            for r in QUALITY_RATINGS
        ],
        simple_ratings=[
            SimpleRatingOut(quality=r.quality, label=r.label, description=r.description, icon=r.icon)
            for r in SIMPLE_RATINGS
        ],
    )


@router.get("/today", response_model=TodayQueueResponse)
async def get_today_queue(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[str, Depends(get_practitioner_id)],
    svc: Annotated[PracticeService, Depends(get_practice_service)],
    limit: Annotated[Optional[int], Query(ge=1, le=50)] = None,
) -> TodayQueueResponse:
    """
    Return the patterns the current practitioner should work on today.
    """
    memories = await _load_memories(db, user_id)
    plan = svc.today_queue(user_id=user_id, memories=memories, limit=limit)
    return TodayQueueResponse(
        queue=[_scheduled(item) for item in plan.selected],
        overdue_count=len(plan.buckets.overdue),
        due_today_count=len(plan.buckets.due_today),
        upcoming_count=len(plan.buckets.upcoming),
        new_count=plan.new_count,
    )


@router.get("/status", response_model=PatternStatusResponse)
async def get_pattern_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[str, Depends(get_practitioner_id)],
    svc: Annotated[PracticeService, Depends(get_practice_service)],
) -> PatternStatusResponse:
    """
    Return due status for every pattern in the catalogue.
    """
    memories = await _load_memories(db, user_id)
    statuses = svc.pattern_statuses(user_id=user_id, memories=memories)

    out = []
    for status_ in statuses:
        memory = status_.memory
        out.append(
            PatternStatusOut(
                pattern=_pattern_out(status_.pattern),
                is_due=status_.is_due,
                days_until_due=status_.days_until_due,
                repetitions=memory.repetitions if memory else 0,
                interval_days=memory.interval_days if memory else 0,
                ease_factor=memory.ease_factor if memory else None,
                last_quality=memory.last_quality if memory else None,
                last_practiced_at=(
                    memory.last_practiced_at.isoformat()
                    if memory and memory.last_practiced_at
                    else None
                ),
            )
        )
    return PatternStatusResponse(patterns=out)


@router.post("/review", response_model=PracticeReviewResponse)
async def submit_review(
    payload: PracticeReviewRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[str, Depends(get_practitioner_id)],
    svc: Annotated[PracticeService, Depends(get_practice_service)],
) -> PracticeReviewResponse:
    """
    Record a graded practice and return the pattern's next schedule.

    Grade and pattern id are checked before touching the database.
    """
    svc.scheduler.validate_grade(payload.grade)
    get_pattern(payload.pattern_id)

    result = await db.execute(
        select(PatternMemory).where(
            PatternMemory.user_id == user_id,
            PatternMemory.pattern_id == payload.pattern_id,
        )
    )
    existing = result.scalar_one_or_none()

    memory, attempt = svc.record_practice(
        user_id=user_id,
        pattern_id=payload.pattern_id,
        memory=existing,
        grade=payload.grade,
        tempo_bpm=payload.tempo_bpm,
        duration_seconds=payload.duration_seconds,
        now=dt.datetime.now(dt.timezone.utc),
    )

    # A concurrent update of the same row raises StaleDataError (409 in main).
    if existing is None:
        db.add(memory)
    db.add(attempt)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Only a lost race on the first insert is a conflict.
        if MEMORY_UNIQUE_CONSTRAINT not in str(exc.orig):
            raise
        logger.warning("Duplicate first practice of %s for %s", payload.pattern_id, user_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Pattern was updated concurrently; reload and retry",
        ) from exc

    return PracticeReviewResponse(
        pattern_id=memory.pattern_id,
        grade=payload.grade,
        repetitions=memory.repetitions,
        interval_days=memory.interval_days,
        ease_factor=memory.ease_factor,
        next_review_at=memory.next_review_at.isoformat(),
    )


@router.get("/stats", response_model=PracticeStatsResponse)
async def get_practice_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[str, Depends(get_practitioner_id)],
    svc: Annotated[PracticeService, Depends(get_practice_service)],
) -> PracticeStatsResponse:
    """
    Return pattern practice statistics for the current practitioner.
    """
    memories = await _load_memories(db, user_id)
    stats = svc.get_stats(user_id=user_id, memories=memories)

    return PracticeStatsResponse(
        total_patterns=stats.total_patterns,
        learned_patterns=stats.learned_patterns,
        due_today=stats.due_today,
        average_ease=stats.average_ease,
        longest_interval=stats.longest_interval,
        streak_patterns=stats.streak_patterns,
    )
