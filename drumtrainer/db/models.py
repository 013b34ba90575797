from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


MEMORY_UNIQUE_CONSTRAINT = "uq_pattern_memory_user_pattern"


class PatternMemory(Base):
    """Per-practitioner SM-2 state for one drum pattern."""

    __tablename__ = "drum_pattern_memory"
    __table_args__ = (
        UniqueConstraint("user_id", "pattern_id", name=MEMORY_UNIQUE_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Opaque id handed to us by the auth layer.
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    pattern_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    ease_factor: Mapped[float] = mapped_column(Float, default=2.5, nullable=False)
    interval_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    repetitions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    next_review_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_quality: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 0-5
    last_practiced_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    # Optimistic locking: concurrent writers of the same row raise StaleDataError.
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}


class PracticeAttempt(Base):
    __tablename__ = "drum_practice_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    pattern_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    practiced_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    quality: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-5
    tempo_bpm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
