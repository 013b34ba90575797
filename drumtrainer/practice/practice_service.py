from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from drumtrainer.db.models import PatternMemory, PracticeAttempt
from drumtrainer.practice.patterns import DRUM_PATTERNS, DrumPattern, get_pattern
from drumtrainer.practice.scheduler import (
    ReviewItem,
    SM2Scheduler,
    TodayQueue,
    calendar_day,
)


logger = logging.getLogger(__name__)


@dataclass
class PracticeSelectionConfig:
    """Configuration for how many patterns to surface per day."""

    default_limit: int = 10
    # Patterns with at least this many consecutive passes count as a streak.
    streak_repetitions: int = 3


@dataclass
class PatternStatus:
    pattern: DrumPattern
    memory: Optional[PatternMemory]
    is_due: bool
    days_until_due: int


@dataclass
class TodayPlan:
    buckets: TodayQueue
    selected: List[ReviewItem] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return sum(1 for item in self.buckets.overdue if item.is_new)


@dataclass
class PatternStats:
    total_patterns: int
    learned_patterns: int
    due_today: int
    average_ease: float
    longest_interval: int
    streak_patterns: int


class PracticeService:
    """
    In-memory practice planning over drum pattern memories.

    This service is intentionally DB-agnostic: it operates on collections
    of `PatternMemory` rows provided by the caller. API layers fetch rows
    from the database, call this service, and persist any changes.
    """

    def __init__(
        self,
        config: Optional[PracticeSelectionConfig] = None,
        scheduler: Optional[SM2Scheduler] = None,
    ) -> None:
        self.config = config or PracticeSelectionConfig()
        self.scheduler = scheduler or SM2Scheduler()

    @staticmethod
    def to_review_item(memory: PatternMemory) -> ReviewItem:
        return ReviewItem(
            item_id=memory.pattern_id,
            owner_id=memory.user_id,
            due_at=memory.next_review_at,
            ease_factor=memory.ease_factor,
            interval_days=memory.interval_days,
            repetitions=memory.repetitions,
            last_reviewed_at=memory.last_practiced_at,
        )

    @staticmethod
    def _user_memories(user_id: str, memories: Iterable[PatternMemory]) -> dict[str, PatternMemory]:
        return {m.pattern_id: m for m in memories if m.user_id == user_id}

    def _review_items(
        self,
        user_id: str,
        memories: Iterable[PatternMemory],
        now: dt.datetime,
    ) -> List[ReviewItem]:
        by_pattern = self._user_memories(user_id, memories)
        items: List[ReviewItem] = []
        for pattern in DRUM_PATTERNS:
            memory = by_pattern.get(pattern.id)
            if memory is None:
                items.append(self.scheduler.new_item(pattern.id, user_id, now=now))
            else:
                items.append(self.to_review_item(memory))
        return items

    def pattern_statuses(
        self,
        *,
        user_id: str,
        memories: Iterable[PatternMemory],
        now: Optional[dt.datetime] = None,
    ) -> List[PatternStatus]:
        """
        Due status of every catalogue pattern, in catalogue order.

        Patterns without a memory row are always due.
        """
        now = now or dt.datetime.now(dt.timezone.utc)
        today = calendar_day(now, now)
        by_pattern = self._user_memories(user_id, memories)

        statuses: List[PatternStatus] = []
        for pattern in DRUM_PATTERNS:
            memory = by_pattern.get(pattern.id)
            if memory is None:
                statuses.append(PatternStatus(pattern=pattern, memory=None, is_due=True, days_until_due=0))
                continue
            due_day = calendar_day(memory.next_review_at, now)
            statuses.append(
                PatternStatus(
                    pattern=pattern,
                    memory=memory,
                    is_due=due_day <= today,
                    days_until_due=max(0, (due_day - today).days),
                )
            )
        return statuses

    def today_queue(
        self,
        *,
        user_id: str,
        memories: Iterable[PatternMemory],
        limit: Optional[int] = None,
        now: Optional[dt.datetime] = None,
    ) -> TodayPlan:
        """
        Build today's practice plan for a user.

        Strategy:
        - Never-practiced patterns first, then overdue, then due today.
        - Patterns due on a later day are left out of the practice list.
        """
        if limit is None or limit <= 0:
            limit = self.config.default_limit

        now = now or dt.datetime.now(dt.timezone.utc)
        buckets = self.scheduler.classify(self._review_items(user_id, memories, now), now=now)
        selected = buckets.queue[:limit]

        logger.debug(
            "Today queue for %s: overdue=%d due_today=%d upcoming=%d selected=%d",
            user_id,
            len(buckets.overdue),
            len(buckets.due_today),
            len(buckets.upcoming),
            len(selected),
        )
        return TodayPlan(buckets=buckets, selected=selected)

    def record_practice(
        self,
        *,
        user_id: str,
        pattern_id: str,
        memory: Optional[PatternMemory],
        grade: int,
        tempo_bpm: Optional[int] = None,
        duration_seconds: Optional[int] = None,
        now: Optional[dt.datetime] = None,
    ) -> tuple[PatternMemory, PracticeAttempt]:
        """
        Record a graded practice of one pattern and compute its next review.

        Creates or updates the `PatternMemory` and constructs a
        `PracticeAttempt`, but does not persist them. Callers are
        responsible for adding them to a session and committing.
        """
        get_pattern(pattern_id)
        now = now or dt.datetime.now(dt.timezone.utc)

        if memory is None:
            current = self.scheduler.new_item(pattern_id, user_id, now=now)
            memory = PatternMemory(user_id=user_id, pattern_id=pattern_id, created_at=now)
        else:
            current = self.to_review_item(memory)

        updated = self.scheduler.review(current, grade, now=now)

        memory.ease_factor = updated.ease_factor
        memory.interval_days = updated.interval_days
        memory.repetitions = updated.repetitions
        memory.next_review_at = updated.due_at
        memory.last_practiced_at = updated.last_reviewed_at
        memory.last_quality = grade

        attempt = PracticeAttempt(
            user_id=user_id,
            pattern_id=pattern_id,
            practiced_at=now,
            quality=grade,
            tempo_bpm=tempo_bpm,
            duration_seconds=duration_seconds,
        )

        logger.info(
            "Practice recorded: user=%s pattern=%s grade=%s next_review_in=%sd",
            user_id,
            pattern_id,
            grade,
            updated.interval_days,
        )
        return memory, attempt

    def get_stats(
        self,
        *,
        user_id: str,
        memories: Iterable[PatternMemory],
        now: Optional[dt.datetime] = None,
    ) -> PatternStats:
        """
        Summarize a user's pattern practice.

        `due_today` counts rows due today or earlier plus every pattern
        never practiced.
        """
        now = now or dt.datetime.now(dt.timezone.utc)
        today = calendar_day(now, now)
        catalogue_ids = {p.id for p in DRUM_PATTERNS}
        mems: Sequence[PatternMemory] = [
            m for m in self._user_memories(user_id, memories).values() if m.pattern_id in catalogue_ids
        ]

        total = len(DRUM_PATTERNS)
        learned = len(mems)
        due = sum(1 for m in mems if calendar_day(m.next_review_at, now) <= today)
        average_ease = (
            sum(m.ease_factor for m in mems) / learned
            if learned
            else self.scheduler.config.initial_ease_factor
        )

        return PatternStats(
            total_patterns=total,
            learned_patterns=learned,
            due_today=due + (total - learned),
            average_ease=round(average_ease, 2),
            longest_interval=max((m.interval_days for m in mems), default=0),
            streak_patterns=sum(1 for m in mems if m.repetitions >= self.config.streak_repetitions),
        )
