"""
Drum practice scheduling.

- SM-2 spaced repetition over immutable review items
- The drum pattern catalogue and grade scales
- DB-agnostic practice planning over stored pattern memories
"""

from .patterns import (
    DRUM_PATTERNS,
    MODULE_NAMES,
    QUALITY_RATINGS,
    SIMPLE_RATINGS,
    DrumPattern,
    UnknownPatternError,
    get_pattern,
    patterns_in_module,
)
from .scheduler import (
    InvalidGradeError,
    ReviewItem,
    SM2Config,
    SM2Scheduler,
    TodayQueue,
    classify,
    new_item,
    review,
)

__all__ = [
    "DRUM_PATTERNS",
    "MODULE_NAMES",
    "QUALITY_RATINGS",
    "SIMPLE_RATINGS",
    "DrumPattern",
    "UnknownPatternError",
    "get_pattern",
    "patterns_in_module",
    "InvalidGradeError",
    "ReviewItem",
    "SM2Config",
    "SM2Scheduler",
    "TodayQueue",
    "classify",
    "new_item",
    "review",
]
