from __future__ import annotations

import datetime as dt
import logging
import math
import numbers
from dataclasses import dataclass, field, replace
from typing import Iterable, List, NamedTuple, Optional


logger = logging.getLogger(__name__)


class InvalidGradeError(ValueError):
    """Raised when a review grade is not an integer in [0, 5]."""

    def __init__(self, grade: object, max_grade: int = 5) -> None:
        super().__init__(f"grade must be an integer between 0 and {max_grade}, got {grade!r}")
        self.grade = grade


@dataclass(frozen=True)
class ReviewItem:
    """
    Memory state of one practiced unit (a drum pattern) for one practitioner.

    Instances are immutable: `SM2Scheduler.review` returns a new value and
    leaves persistence of it to the caller.
    """

    item_id: str
    owner_id: str
    due_at: dt.datetime
    ease_factor: float = 2.5
    interval_days: int = 0
    repetitions: int = 0
    last_reviewed_at: Optional[dt.datetime] = None

    @property
    def is_new(self) -> bool:
        return self.last_reviewed_at is None


@dataclass
class SM2Config:
    """Config values for the SM-2 scheduler."""

    min_ease_factor: float = 1.3
    initial_ease_factor: float = 2.5
    pass_threshold: int = 3
    max_grade: int = 5
    ease_bonus: float = 0.1
    ease_linear_penalty: float = 0.08
    ease_quadratic_penalty: float = 0.02
    first_interval_days: int = 1
    second_interval_days: int = 6
    failed_interval_days: int = 1


class ScheduleStep(NamedTuple):
    repetitions: int
    interval_days: int
    ease_factor: float


@dataclass
class TodayQueue:
    """Result of `classify`: three disjoint, ordered buckets."""

    overdue: List[ReviewItem] = field(default_factory=list)
    due_today: List[ReviewItem] = field(default_factory=list)
    upcoming: List[ReviewItem] = field(default_factory=list)

    @property
    def queue(self) -> List[ReviewItem]:
        """Items to practice now: overdue first, then due today."""
        return self.overdue + self.due_today

    def __len__(self) -> int:
        return len(self.overdue) + len(self.due_today) + len(self.upcoming)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ensure_aware(moment: dt.datetime) -> dt.datetime:
    """Treat a naive datetime as UTC, the timezone the database stores."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=dt.timezone.utc)
    return moment


def calendar_day(moment: dt.datetime, now: dt.datetime) -> dt.date:
    """
    Calendar day of `moment` in `now`'s timezone.

    Naive values on either side are read as UTC, so mixing naive and
    aware datetimes never compares two different clocks.
    """
    return ensure_aware(moment).astimezone(ensure_aware(now).tzinfo).date()


class SM2Scheduler:
    """
    Classic SM-2 spaced repetition scheduler for drum patterns.

    Ported from the original SuperMemo-2 algorithm:

        - grade is an integer in [0, 5]
        - grade < 3 is a failed recall: the streak resets and the
          pattern comes back tomorrow
        - ease factor (EF) is adjusted after every review, pass or fail,
          and never drops below 1.3
        - interval is in days and determines the next due_at

    The scheduler never reads the wall clock; callers pass `now`.
    """

    def __init__(self, config: Optional[SM2Config] = None) -> None:
        self.config = config or SM2Config()

    def validate_grade(self, grade: object) -> int:
        if (
            isinstance(grade, bool)
            or not isinstance(grade, numbers.Integral)
            or grade < 0
            or grade > self.config.max_grade
        ):
            raise InvalidGradeError(grade, self.config.max_grade)
        return int(grade)

    def new_item(self, item_id: str, owner_id: str, *, now: dt.datetime) -> ReviewItem:
        """Create the state of a unit the practitioner has never seen."""
        return ReviewItem(
            item_id=item_id,
            owner_id=owner_id,
            due_at=now,
            ease_factor=self.config.initial_ease_factor,
            interval_days=0,
            repetitions=0,
            last_reviewed_at=None,
        )

    def next_step(
        self,
        grade: int,
        *,
        repetitions: int,
        ease_factor: float,
        interval_days: int,
    ) -> ScheduleStep:
        """
        Core SM-2 transition on raw numbers.

        Interval growth for the third and later successes uses the ease
        factor from before this review.
        """
        grade = self.validate_grade(grade)
        cfg = self.config

        if grade < cfg.pass_threshold:
            reps = 0
            interval = cfg.failed_interval_days
        else:
            if repetitions == 0:
                interval = cfg.first_interval_days
            elif repetitions == 1:
                interval = cfg.second_interval_days
            else:
                interval = round_half_up(interval_days * ease_factor)
            reps = repetitions + 1

        q_delta = cfg.max_grade - grade
        ef = ease_factor + (
            cfg.ease_bonus
            - q_delta * (cfg.ease_linear_penalty + q_delta * cfg.ease_quadratic_penalty)
        )
        if ef < cfg.min_ease_factor:
            ef = cfg.min_ease_factor

        return ScheduleStep(repetitions=reps, interval_days=interval, ease_factor=ef)

    def review(self, item: ReviewItem, grade: int, *, now: dt.datetime) -> ReviewItem:
        """
        Apply one graded review and return the item's next state.
        """
        step = self.next_step(
            grade,
            repetitions=int(item.repetitions or 0),
            ease_factor=item.ease_factor or self.config.initial_ease_factor,
            interval_days=int(item.interval_days or 0),
        )
        logger.debug(
            "Reviewed %s for %s: grade=%s interval=%s->%s ef=%.2f->%.2f",
            item.item_id,
            item.owner_id,
            grade,
            item.interval_days,
            step.interval_days,
            item.ease_factor,
            step.ease_factor,
        )
        return replace(
            item,
            repetitions=step.repetitions,
            interval_days=step.interval_days,
            ease_factor=step.ease_factor,
            last_reviewed_at=now,
            due_at=now + dt.timedelta(days=step.interval_days),
        )

    def classify(self, items: Iterable[ReviewItem], *, now: dt.datetime) -> TodayQueue:
        """
        Split items into overdue / due today / upcoming for `now`.

        Never-reviewed items are always overdue and go first, ordered by
        item_id. Everything else is ordered by due_at, ties by item_id.
        Naive datetimes are read as UTC.
        """
        today = calendar_day(now, now)
        unseen: List[ReviewItem] = []
        overdue: List[ReviewItem] = []
        due_today: List[ReviewItem] = []
        upcoming: List[ReviewItem] = []

        for item in items:
            if item.last_reviewed_at is None:
                unseen.append(item)
                continue
            due_day = calendar_day(item.due_at, now)
            if due_day < today:
                overdue.append(item)
            elif due_day == today:
                due_today.append(item)
            else:
                upcoming.append(item)

        def _by_due(item: ReviewItem):
            return (ensure_aware(item.due_at), item.item_id)

        unseen.sort(key=lambda item: item.item_id)
        overdue.sort(key=_by_due)
        due_today.sort(key=_by_due)
        upcoming.sort(key=_by_due)

        return TodayQueue(
            overdue=unseen + overdue,
            due_today=due_today,
            upcoming=upcoming,
        )


_default_scheduler = SM2Scheduler()


def new_item(item_id: str, owner_id: str, now: dt.datetime) -> ReviewItem:
    return _default_scheduler.new_item(item_id, owner_id, now=now)


def review(item: ReviewItem, grade: int, now: dt.datetime) -> ReviewItem:
    """Apply a review with the default SM-2 configuration."""
    return _default_scheduler.review(item, grade, now=now)


def classify(items: Iterable[ReviewItem], now: dt.datetime) -> TodayQueue:
    """Build the today queue with the default SM-2 configuration."""
    return _default_scheduler.classify(items, now=now)
