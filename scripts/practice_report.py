"""
Print a practitioner's drum practice queue and stats from the database.

Read-only: loads the user's pattern memories, builds today's queue
with the SM-2 scheduler, and prints a summary. No database writes.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
from typing import List

from sqlalchemy import select

from drumtrainer.db.models import PatternMemory
from drumtrainer.db.session import AsyncSessionLocal
from drumtrainer.practice.patterns import get_pattern
from drumtrainer.practice.practice_service import PatternStats, PracticeService, TodayPlan
from drumtrainer.practice.scheduler import ReviewItem


async def load_memories(user_id: str) -> List[PatternMemory]:
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(PatternMemory).where(PatternMemory.user_id == user_id)
        )
        return list(result.scalars().all())


def _print_bucket(title: str, items: List[ReviewItem], now: dt.datetime) -> None:
    print(f"\n{title} ({len(items)}):")
    for item in items:
        pattern = get_pattern(item.item_id)
        if item.is_new:
            when = "new"
        else:
            days = (item.due_at.date() - now.date()).days
            when = f"due {item.due_at.date().isoformat()} ({days:+d}d)"
        print(f"  {pattern.name:22s} m{pattern.module} {when:28s} ef={item.ease_factor:.2f}")


def print_report(plan: TodayPlan, stats: PatternStats, now: dt.datetime) -> None:
    _print_bucket("Overdue", plan.buckets.overdue, now)
    _print_bucket("Due today", plan.buckets.due_today, now)
    _print_bucket("Upcoming", plan.buckets.upcoming, now)

    print("\nStats:")
    print(f"  Learned patterns:   {stats.learned_patterns}/{stats.total_patterns}")
    print(f"  Due today:          {stats.due_today}")
    print(f"  Average ease:       {stats.average_ease:.2f}")
    print(f"  Longest interval:   {stats.longest_interval}d")
    print(f"  Streak patterns:    {stats.streak_patterns}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Show a practitioner's drum practice queue and stats.",
    )
    parser.add_argument("user_id", help="Practitioner id as stored by the auth layer")
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of patterns in today's practice list",
    )
    args = parser.parse_args()

    now = dt.datetime.now(dt.timezone.utc)
    memories = asyncio.run(load_memories(args.user_id))
    print(f"Loaded {len(memories)} pattern memories for {args.user_id}")

    svc = PracticeService()
    plan = svc.today_queue(user_id=args.user_id, memories=memories, limit=args.limit, now=now)
    stats = svc.get_stats(user_id=args.user_id, memories=memories, now=now)
    print_report(plan, stats, now)

    print("\nPractice now:")
    for i, item in enumerate(plan.selected, start=1):
        print(f"  {i:2d}. {get_pattern(item.item_id).name}")


if __name__ == "__main__":
    main()
