"""Practice progress: StarPower rewards and accuracy summaries.

StarPower is the reward currency for correct answers:
- wrong or skipped: 0
- correct without hints: 60
- correct with hints: 60 - 10 per hint, never below 20
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

BASE_STAR_POWER = 60
HINT_PENALTY = 10
MIN_STAR_POWER_WITH_HINTS = 20


def star_power_for_attempt(is_correct: bool, hints_used: int = 0, skipped: bool = False) -> int:
    """StarPower earned by one practice attempt."""
    if skipped or not is_correct:
        return 0
    if hints_used <= 0:
        return BASE_STAR_POWER
    return max(MIN_STAR_POWER_WITH_HINTS, BASE_STAR_POWER - HINT_PENALTY * hints_used)


def accuracy_percent(correct: int, total: int) -> int:
    """Rounded percent; 0 when there are no attempts."""
    return round(correct / total * 100) if total > 0 else 0


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Midnight of the most recent Sunday."""
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


@dataclass
class PracticeAttempt:
    """One answered (or skipped) practice question."""

    user_id: str
    grade: int
    subject: str
    is_correct: bool
    question_id: int | None = None
    teks_standard: str | None = None
    selected_answer: str | None = None
    hints_used: int = 0
    skipped: bool = False
    time_spent: int | None = None
    star_power_earned: int = 0
    attempt_id: int | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GradeAccuracy:
    grade: int
    attempts: int
    correct: int
    accuracy: int


@dataclass
class OverallAccuracy:
    """Accuracy across all of a user's attempts."""

    total_attempts: int = 0
    correct_attempts: int = 0
    overall_accuracy: int = 0
    math_accuracy: int = 0
    reading_accuracy: int = 0
    grade_breakdown: list[GradeAccuracy] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TeksAccuracy:
    teks_standard: str
    total_questions: int
    correct_answers: int
    accuracy: int
    last_attempted: str | None = None


@dataclass
class ModuleAccuracy:
    """Accuracy for one grade and subject, broken down by TEKS."""

    grade: int
    subject: str
    overall_accuracy: int = 0
    teks_standard_stats: list[TeksAccuracy] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StarPowerStats:
    """StarPower earned today, this week and in total."""

    daily_star_power: int = 0
    weekly_star_power: int = 0
    all_time_star_power: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
