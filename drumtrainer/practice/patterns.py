"""
Drum pattern catalogue and the grade scales shown to practitioners.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


class UnknownPatternError(KeyError):
    """Raised when a pattern id is not part of the catalogue."""

    def __init__(self, pattern_id: str) -> None:
        super().__init__(pattern_id)
        self.pattern_id = pattern_id

    def __str__(self) -> str:
        return f"Unknown drum pattern: {self.pattern_id}"


@dataclass(frozen=True)
class DrumPattern:
    id: str
    name: str
    module: int
    description: str


@dataclass(frozen=True)
class QualityRating:
    value: int
    label: str
    description: str
    icon: str


@dataclass(frozen=True)
class SimpleRating:
    quality: int
    label: str
    description: str
    icon: str


MODULE_NAMES: Dict[int, str] = {
    1: "Clean Sound",
    2: "Internal Clock",
    3: "Vocabulary",
    4: "The Audit",
}


DRUM_PATTERNS: Tuple[DrumPattern, ...] = (
    # Module 1
    DrumPattern("unison-strikes", "Unison Strikes", 1, "All limbs land as one voice"),
    DrumPattern("single-strokes", "Single Strokes", 1, "Alternating hands, even tone"),
    DrumPattern("rebound-control", "Rebound Control", 1, "Let the stick do the work"),
    # Module 2
    DrumPattern("quarter-pulse", "Quarter Note Pulse", 2, "The heartbeat of time"),
    DrumPattern("gap-drill-easy", "Gap Drill (Easy)", 2, "8 on, 4 off, hold the silence"),
    DrumPattern("gap-drill-hard", "Gap Drill (Hard)", 2, "4 on, 8 off, project through the void"),
    DrumPattern("offbeat-click", "Off-Beat Click", 2, "Feel the spaces between"),
    # Module 3
    DrumPattern("singles", "Single Stroke Roll", 3, "RLRL, the foundation"),
    DrumPattern("doubles", "Double Stroke Roll", 3, "RRLL, bounce, don't muscle"),
    DrumPattern("paradiddle", "Paradiddle", 3, "RLRR LRLL, accent the first"),
    DrumPattern("basic-rock", "Basic Rock Beat", 3, "Kick-hat-snare-hat"),
    DrumPattern("three-way-flow", "3-Way Flow", 3, "Singles into doubles into paradiddles"),
    # Module 4
    DrumPattern("flam-detection", "Flam Detection", 4, "One sound or two?"),
    DrumPattern("spacing-audit", "Spacing Audit", 4, "Every gap identical"),
    DrumPattern("volume-audit", "Volume Audit", 4, "Consistent dynamics throughout"),
)

_PATTERNS_BY_ID: Dict[str, DrumPattern] = {p.id: p for p in DRUM_PATTERNS}


QUALITY_RATINGS: Tuple[QualityRating, ...] = (
    QualityRating(0, "Blackout", "Complete blank, no memory at all", "grade0"),
    QualityRating(1, "Barely", "Struggled hard, barely got it", "grade1"),
    QualityRating(2, "Wrong", "Made mistakes, but recognized the answer", "grade2"),
    QualityRating(3, "Difficult", "Got it right, but required effort", "grade3"),
    QualityRating(4, "Good", "Brief hesitation, then correct", "grade4"),
    QualityRating(5, "Perfect", "Instant, effortless recall", "grade5"),
)

# Three-tier scale for casual practice; maps onto the 0-5 grades.
SIMPLE_RATINGS: Tuple[SimpleRating, ...] = (
    SimpleRating(2, "Struggled", "Needs more work", "refresh"),
    SimpleRating(4, "Good", "Solid execution", "thumbsUp"),
    SimpleRating(5, "Locked In", "Automatic, effortless", "flame"),
)


def get_pattern(pattern_id: str) -> DrumPattern:
    try:
        return _PATTERNS_BY_ID[pattern_id]
    except KeyError:
        raise UnknownPatternError(pattern_id) from None


def patterns_in_module(module: int) -> List[DrumPattern]:
    return [p for p in DRUM_PATTERNS if p.module == module]
