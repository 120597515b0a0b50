"""Repository functions for practice attempts and StarPower history.

Timestamps are stored as UTC ISO-8601 strings so they compare in order.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from staarkids.core.progress import (
    GradeAccuracy,
    ModuleAccuracy,
    OverallAccuracy,
    PracticeAttempt,
    StarPowerStats,
    TeksAccuracy,
    accuracy_percent,
    star_power_for_attempt,
    start_of_day,
    start_of_week,
)
from staarkids.db.database import get_db

logger = structlog.get_logger(__name__)

_CORRECT_SUM = "COALESCE(SUM(CASE WHEN is_correct = 1 THEN 1 ELSE 0 END), 0)"


def _utc_iso(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def record_attempt(attempt: PracticeAttempt, now: datetime | None = None) -> PracticeAttempt:
    """Store an attempt and any StarPower it earns.

    Fills attempt_id, created_at and star_power_earned on the attempt.
    """
    created_at = _utc_iso(now or datetime.now(timezone.utc))
    earned = star_power_for_attempt(attempt.is_correct, attempt.hints_used, attempt.skipped)

    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO practice_attempts (
                user_id, question_id, grade, subject, teks_standard,
                selected_answer, is_correct, hints_used, skipped,
                time_spent, star_power_earned, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                attempt.user_id,
                attempt.question_id,
                attempt.grade,
                attempt.subject,
                attempt.teks_standard,
                attempt.selected_answer,
                int(attempt.is_correct),
                attempt.hints_used,
                int(attempt.skipped),
                attempt.time_spent,
                earned,
                created_at,
            ),
        )
        attempt.attempt_id = cursor.lastrowid

        if earned > 0:
            conn.execute(
                """
                INSERT INTO star_power_history (user_id, amount, source, attempt_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (attempt.user_id, earned, "practice", attempt.attempt_id, created_at),
            )

    attempt.created_at = created_at
    attempt.star_power_earned = earned
    logger.debug(
        "practice_attempt_recorded",
        user_id=attempt.user_id,
        attempt_id=attempt.attempt_id,
        star_power=earned,
    )
    return attempt


def get_overall_accuracy(user_id: str) -> OverallAccuracy:
    """Totals, per-subject accuracy and a per-grade breakdown."""
    with get_db() as conn:
        subject_rows = conn.execute(
            f"""
            SELECT subject, COUNT(*) AS total, {_CORRECT_SUM} AS correct
            FROM practice_attempts WHERE user_id = ?
            GROUP BY subject
            """,
            (user_id,),
        ).fetchall()
        grade_rows = conn.execute(
            f"""
            SELECT grade, COUNT(*) AS total, {_CORRECT_SUM} AS correct
            FROM practice_attempts WHERE user_id = ?
            GROUP BY grade ORDER BY grade
            """,
            (user_id,),
        ).fetchall()

    by_subject = {row["subject"]: (row["correct"], row["total"]) for row in subject_rows}
    total = sum(t for _, t in by_subject.values())
    correct = sum(c for c, _ in by_subject.values())

    return OverallAccuracy(
        total_attempts=total,
        correct_attempts=correct,
        overall_accuracy=accuracy_percent(correct, total),
        math_accuracy=accuracy_percent(*by_subject.get("math", (0, 0))),
        reading_accuracy=accuracy_percent(*by_subject.get("reading", (0, 0))),
        grade_breakdown=[
            GradeAccuracy(
                grade=row["grade"],
                attempts=row["total"],
                correct=row["correct"],
                accuracy=accuracy_percent(row["correct"], row["total"]),
            )
            for row in grade_rows
        ],
    )


def get_module_accuracy(user_id: str, grade: int, subject: str) -> ModuleAccuracy:
    """Accuracy for one grade and subject with a per-TEKS breakdown."""
    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT COALESCE(teks_standard, 'unknown') AS teks,
                   COUNT(*) AS total, {_CORRECT_SUM} AS correct,
                   MAX(created_at) AS last_attempted
            FROM practice_attempts
            WHERE user_id = ? AND grade = ? AND subject = ?
            GROUP BY teks ORDER BY teks
            """,
            (user_id, grade, subject),
        ).fetchall()

    total = sum(row["total"] for row in rows)
    correct = sum(row["correct"] for row in rows)

    return ModuleAccuracy(
        grade=grade,
        subject=subject,
        overall_accuracy=accuracy_percent(correct, total),
        teks_standard_stats=[
            TeksAccuracy(
                teks_standard=row["teks"],
                total_questions=row["total"],
                correct_answers=row["correct"],
                accuracy=accuracy_percent(row["correct"], row["total"]),
                last_attempted=row["last_attempted"],
            )
            for row in rows
        ],
    )


def get_star_power_stats(user_id: str, now: datetime | None = None) -> StarPowerStats:
    """StarPower earned today, since Sunday, and ever. Only positive entries count.

    Day and week boundaries are taken in now's timezone (UTC by default).
    """
    now = now or datetime.now(timezone.utc)
    day_start = _utc_iso(start_of_day(now))
    week_start = _utc_iso(start_of_week(now))

    with get_db() as conn:
        row = conn.execute(
            """
            SELECT
                COALESCE(SUM(CASE WHEN created_at >= ? THEN amount ELSE 0 END), 0) AS daily,
                COALESCE(SUM(CASE WHEN created_at >= ? THEN amount ELSE 0 END), 0) AS weekly,
                COALESCE(SUM(amount), 0) AS all_time
            FROM star_power_history
            WHERE user_id = ? AND amount > 0
            """,
            (day_start, week_start, user_id),
        ).fetchone()

    return StarPowerStats(
        daily_star_power=row["daily"],
        weekly_star_power=row["weekly"],
        all_time_star_power=row["all_time"],
    )


def add_star_power(user_id: str, amount: int, source: str, now: datetime | None = None) -> None:
    """Record a StarPower adjustment outside practice (negative for spending)."""
    with get_db() as conn:
        conn.execute(
            "INSERT INTO star_power_history (user_id, amount, source, created_at) VALUES (?, ?, ?, ?)",
            (user_id, amount, source, _utc_iso(now or datetime.now(timezone.utc))),
        )

    logger.debug("star_power_recorded", user_id=user_id, amount=amount, source=source)
