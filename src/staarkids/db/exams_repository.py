"""Repository functions for mock exams.

Exams live in mock_exams; their questions are stored in the questions
table and linked in order through mock_exam_questions.
"""

from __future__ import annotations

import random
import sqlite3

import structlog

from staarkids.core.exam_generator import MockExam, build_mock_exam, exam_name
from staarkids.core.question import VALID_GRADES, VALID_SUBJECTS
from staarkids.db.database import get_db
from staarkids.db.questions_repository import insert_questions, row_to_question

logger = structlog.get_logger(__name__)

DEFAULT_EXAMS_PER_SUBJECT = 6


def insert_exam(exam: MockExam) -> int:
    """Store an exam and its questions; sets exam_id and question ids.

    Raises:
        sqlite3.IntegrityError: If an exam with the same name exists
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO mock_exams (name, grade, subject, total_questions, time_limit)
            VALUES (?, ?, ?, ?, ?)
            """,
            (exam.name, exam.grade, exam.subject, exam.total_questions, exam.time_limit),
        )
        exam.exam_id = cursor.lastrowid
        question_ids = insert_questions(exam.questions, conn=conn)
        conn.executemany(
            "INSERT INTO mock_exam_questions (exam_id, question_id, position) VALUES (?, ?, ?)",
            [(exam.exam_id, qid, position) for position, qid in enumerate(question_ids)],
        )

    logger.debug("exam_inserted", exam_id=exam.exam_id, name=exam.name)
    return exam.exam_id  # type: ignore[return-value]


def _row_to_exam(row: sqlite3.Row) -> MockExam:
    return MockExam(
        exam_id=row["exam_id"],
        name=row["name"],
        grade=row["grade"],
        subject=row["subject"],
        total_questions=row["total_questions"],
        time_limit=row["time_limit"],
    )


def get_mock_exams(grade: int | None = None, subject: str | None = None) -> list[MockExam]:
    """Exams without their questions, ordered by id."""
    sql = "SELECT * FROM mock_exams WHERE 1 = 1"
    params: list[object] = []
    if grade is not None:
        sql += " AND grade = ?"
        params.append(grade)
    if subject is not None:
        sql += " AND subject = ?"
        params.append(subject)
    sql += " ORDER BY exam_id"

    with get_db() as conn:
        rows = conn.execute(sql, params).fetchall()

    return [_row_to_exam(row) for row in rows]


def get_exam_by_name(name: str) -> MockExam | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM mock_exams WHERE name = ?", (name,)).fetchone()

    return _row_to_exam(row) if row else None


def get_exam(exam_id: int) -> MockExam | None:
    """Get an exam with its questions in order.

    Returns:
        MockExam if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute("SELECT * FROM mock_exams WHERE exam_id = ?", (exam_id,)).fetchone()
        if row is None:
            return None
        question_rows = conn.execute(
            """
            SELECT q.* FROM mock_exam_questions meq
            JOIN questions q ON q.question_id = meq.question_id
            WHERE meq.exam_id = ?
            ORDER BY meq.position
            """,
            (exam_id,),
        ).fetchall()

    exam = _row_to_exam(row)
    exam.questions = [row_to_question(r) for r in question_rows]
    return exam


def initialize_mock_exams(
    exams_per_subject: int = DEFAULT_EXAMS_PER_SUBJECT,
    grades: tuple[int, ...] = VALID_GRADES,
    subjects: tuple[str, ...] = VALID_SUBJECTS,
    rng: random.Random | None = None,
) -> list[MockExam]:
    """Build and store missing practice tests.

    Exams whose name already exists are skipped, so repeated calls
    only fill gaps.

    Returns:
        The newly created exams
    """
    rng = rng or random.Random()
    created = []

    for grade in grades:
        for subject in subjects:
            for number in range(1, exams_per_subject + 1):
                name = exam_name(grade, subject, number)
                if get_exam_by_name(name) is not None:
                    logger.debug("mock_exam_exists", name=name)
                    continue
                exam = build_mock_exam(grade, subject, number, rng)
                insert_exam(exam)
                created.append(exam)

    logger.info("mock_exams_initialized", created=len(created))
    return created
