from __future__ import annotations

import datetime as dt

import pytest

from drumtrainer.practice.scheduler import (
    InvalidGradeError,
    ReviewItem,
    SM2Config,
    SM2Scheduler,
    classify,
    new_item,
    review,
    calendar_day,
    round_half_up,
)


NOW = dt.datetime(2025, 1, 10, 12, 0, tzinfo=dt.timezone.utc)


def _make_item(
    item_id: str = "paradiddle",
    *,
    repetitions: int = 0,
    interval_days: int = 0,
    ease_factor: float = 2.5,
    due_at: dt.datetime = NOW,
    last_reviewed_at: dt.datetime | None = None,
) -> ReviewItem:
    return ReviewItem(
        item_id=item_id,
        owner_id="user-1",
        due_at=due_at,
        ease_factor=ease_factor,
        interval_days=interval_days,
        repetitions=repetitions,
        last_reviewed_at=last_reviewed_at,
    )


def test_new_item_starts_unseen_and_due_now():
    item = new_item("singles", "user-1", NOW)

    assert item.ease_factor == 2.5
    assert item.interval_days == 0
    assert item.repetitions == 0
    assert item.last_reviewed_at is None
    assert item.due_at == NOW
    assert item.is_new


def test_first_good_review():
    updated = review(new_item("singles", "user-1", NOW), 4, NOW)

    assert updated.repetitions == 1
    assert updated.interval_days == 1
    # Grade 4 leaves the ease factor unchanged: 0.1 - 1 * (0.08 + 0.02) == 0.
    assert updated.ease_factor == pytest.approx(2.5)
    assert updated.last_reviewed_at == NOW
    assert updated.due_at == NOW + dt.timedelta(days=1)


def test_success_streak_then_failure():
    item = new_item("singles", "user-1", NOW)

    first = review(item, 3, NOW)
    assert first.repetitions == 1
    assert first.interval_days == 1
    assert first.ease_factor == pytest.approx(2.36)

    later = NOW + dt.timedelta(days=1)
    second = review(first, 5, later)
    assert second.repetitions == 2
    assert second.interval_days == 6
    assert second.ease_factor == pytest.approx(2.46)
    assert second.due_at == later + dt.timedelta(days=6)

    failed = review(second, 2, later + dt.timedelta(days=6))
    assert failed.repetitions == 0
    assert failed.interval_days == 1
    # Ease is still recomputed on failure: 2.46 + (0.1 - 3 * 0.14).
    assert failed.ease_factor == pytest.approx(2.14)


def test_third_success_grows_interval_with_previous_ease():
    item = _make_item(repetitions=2, interval_days=6, ease_factor=2.5, last_reviewed_at=NOW)

    updated = review(item, 3, NOW)

    # 6 * 2.5, not 6 * 2.36: growth uses the ease from before this review.
    assert updated.interval_days == 15
    assert updated.repetitions == 3
    assert updated.ease_factor == pytest.approx(2.36)


def test_interval_rounds_half_up():
    item = _make_item(repetitions=3, interval_days=5, ease_factor=2.5, last_reviewed_at=NOW)

    updated = review(item, 4, NOW)

    assert updated.interval_days == 13
    assert round_half_up(12.5) == 13
    assert round_half_up(12.49) == 12


@pytest.mark.parametrize("streak", [1, 2, 5, 20])
def test_failure_resets_regardless_of_streak(streak: int):
    item = _make_item(repetitions=streak, interval_days=40, last_reviewed_at=NOW)

    for grade in (0, 1, 2):
        updated = review(item, grade, NOW)
        assert updated.repetitions == 0
        assert updated.interval_days == 1
        assert updated.due_at == NOW + dt.timedelta(days=1)


def test_ease_factor_never_drops_below_floor():
    item = _make_item(ease_factor=1.3, last_reviewed_at=NOW)

    for _ in range(5):
        item = review(item, 0, NOW)
        assert item.ease_factor >= 1.3
    assert item.ease_factor == pytest.approx(1.3)


def test_ease_factor_has_no_upper_bound():
    item = _make_item(ease_factor=3.0, repetitions=4, interval_days=30, last_reviewed_at=NOW)

    updated = review(item, 5, NOW)

    assert updated.ease_factor == pytest.approx(3.1)
    assert updated.interval_days == 90


def test_intervals_grow_on_success_streak():
    item = new_item("doubles", "user-1", NOW)
    intervals = []
    for _ in range(10):
        before = item
        item = review(item, 4, NOW)
        if before.repetitions >= 2:
            assert item.interval_days >= before.interval_days
        intervals.append(item.interval_days)

    assert intervals[:3] == [1, 6, 15]
    assert intervals[-1] > 30


def test_review_does_not_mutate_input():
    item = _make_item(repetitions=1, interval_days=1, last_reviewed_at=NOW)

    review(item, 5, NOW)

    assert item.repetitions == 1
    assert item.interval_days == 1
    assert item.ease_factor == 2.5


@pytest.mark.parametrize("grade", [7, 6, -1, 4.5, 3.0, "4", None, True])
def test_invalid_grades_are_rejected(grade):
    with pytest.raises(InvalidGradeError):
        review(new_item("singles", "user-1", NOW), grade, NOW)


def test_invalid_grade_error_is_a_value_error():
    with pytest.raises(ValueError):
        SM2Scheduler().validate_grade(7)


def test_custom_config_changes_early_intervals():
    scheduler = SM2Scheduler(SM2Config(second_interval_days=3))
    item = _make_item(repetitions=1, interval_days=1, last_reviewed_at=NOW)

    updated = scheduler.review(item, 4, now=NOW)

    assert updated.interval_days == 3


def test_classify_buckets_and_order():
    yesterday = NOW - dt.timedelta(days=1)
    last_week = NOW - dt.timedelta(days=7)
    this_morning = NOW.replace(hour=6)
    tonight = NOW.replace(hour=23)
    tomorrow = NOW + dt.timedelta(days=1)
    next_week = NOW + dt.timedelta(days=7)

    items = [
        _make_item("a-upcoming-far", due_at=next_week, last_reviewed_at=last_week),
        _make_item("b-overdue-recent", due_at=yesterday, last_reviewed_at=last_week),
        _make_item("c-today-late", due_at=tonight, last_reviewed_at=last_week),
        _make_item("d-upcoming-near", due_at=tomorrow, last_reviewed_at=last_week),
        _make_item("e-overdue-old", due_at=last_week, last_reviewed_at=last_week),
        _make_item("f-today-early", due_at=this_morning, last_reviewed_at=last_week),
    ]

    buckets = classify(items, NOW)

    assert [i.item_id for i in buckets.overdue] == ["e-overdue-old", "b-overdue-recent"]
    assert [i.item_id for i in buckets.due_today] == ["f-today-early", "c-today-late"]
    assert [i.item_id for i in buckets.upcoming] == ["d-upcoming-near", "a-upcoming-far"]
    assert [i.item_id for i in buckets.queue] == [
        "e-overdue-old",
        "b-overdue-recent",
        "f-today-early",
        "c-today-late",
    ]


def test_classify_puts_never_reviewed_items_first():
    last_week = NOW - dt.timedelta(days=7)
    items = [
        _make_item("overdue", due_at=NOW - dt.timedelta(days=30), last_reviewed_at=last_week),
        _make_item("zeta-new", due_at=NOW + dt.timedelta(days=3)),
        _make_item("alpha-new", due_at=NOW),
    ]

    buckets = classify(items, NOW)

    assert [i.item_id for i in buckets.overdue] == ["alpha-new", "zeta-new", "overdue"]
    assert buckets.due_today == []
    assert buckets.upcoming == []


def test_classify_partitions_every_item_once_and_is_idempotent():
    items = [
        _make_item(
            f"p{i}",
            due_at=NOW + dt.timedelta(days=i - 5, hours=i),
            last_reviewed_at=None if i % 4 == 0 else NOW - dt.timedelta(days=10),
        )
        for i in range(12)
    ]

    first = classify(items, NOW)
    second = classify(items, NOW)

    ids = [i.item_id for i in first.overdue + first.due_today + first.upcoming]
    assert sorted(ids) == sorted(i.item_id for i in items)
    assert len(ids) == len(set(ids))
    assert len(first) == len(items)
    assert first == second


def test_classify_uses_now_timezone_for_calendar_day():
    # 23:30 UTC on the 10th is already the 11th in UTC+2.
    tz = dt.timezone(dt.timedelta(hours=2))
    now_local = dt.datetime(2025, 1, 11, 9, 0, tzinfo=tz)
    due_utc = dt.datetime(2025, 1, 10, 23, 30, tzinfo=dt.timezone.utc)
    item = _make_item("late-night", due_at=due_utc, last_reviewed_at=due_utc - dt.timedelta(days=1))

    buckets = classify([item], now_local)

    assert [i.item_id for i in buckets.due_today] == ["late-night"]


def test_classify_reads_naive_datetimes_as_utc():
    naive_now = NOW.replace(tzinfo=None)
    yesterday_aware = _make_item("aware", due_at=NOW - dt.timedelta(days=1), last_reviewed_at=NOW)
    yesterday_naive = _make_item(
        "naive",
        due_at=naive_now - dt.timedelta(days=1, hours=1),
        last_reviewed_at=naive_now,
    )
    later_today = _make_item("today", due_at=NOW + dt.timedelta(hours=6), last_reviewed_at=NOW)

    for now in (NOW, naive_now):
        buckets = classify([yesterday_aware, yesterday_naive, later_today], now)
        assert [i.item_id for i in buckets.overdue] == ["naive", "aware"]
        assert [i.item_id for i in buckets.due_today] == ["today"]


def test_calendar_day_with_naive_now_uses_utc():
    tz = dt.timezone(dt.timedelta(hours=-5))
    # 21:00 on the 9th at UTC-5 is 02:00 UTC on the 10th.
    moment = dt.datetime(2025, 1, 9, 21, 0, tzinfo=tz)

    assert calendar_day(moment, NOW.replace(tzinfo=None)) == dt.date(2025, 1, 10)
