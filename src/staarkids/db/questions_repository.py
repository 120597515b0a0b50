"""Repository functions for the questions table."""

from __future__ import annotations

import json
import sqlite3

import structlog

from staarkids.core.question import AnswerChoice, Question
from staarkids.db.database import get_db

logger = structlog.get_logger(__name__)


def _insert(conn: sqlite3.Connection, question: Question) -> int:
    cursor = conn.execute(
        """
        INSERT INTO questions (
            grade, subject, teks_standard, question_text, answer_choices,
            correct_answer, explanation, difficulty, category, year,
            is_from_real_staar, has_image, image_description, svg_content,
            passage, method, confidence, model_used
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            question.grade,
            question.subject,
            question.teks_standard,
            question.question_text,
            json.dumps([c.to_dict() for c in question.answer_choices]),
            question.correct_answer,
            question.explanation,
            question.difficulty,
            question.category,
            question.year,
            int(question.is_from_real_staar),
            int(question.has_image),
            question.image_description,
            question.svg_content,
            question.passage,
            question.method,
            question.confidence,
            question.model_used,
        ),
    )
    question.question_id = cursor.lastrowid
    return question.question_id  # type: ignore[return-value]


def insert_question(question: Question) -> int:
    """Store a question and set its question_id.

    Returns:
        The new question_id
    """
    with get_db() as conn:
        question_id = _insert(conn, question)

    logger.debug("question_inserted", question_id=question_id)
    return question_id


def insert_questions(questions: list[Question], conn: sqlite3.Connection | None = None) -> list[int]:
    """Store several questions in one transaction."""
    if conn is not None:
        return [_insert(conn, q) for q in questions]

    with get_db() as own_conn:
        ids = [_insert(own_conn, q) for q in questions]

    logger.debug("questions_inserted", count=len(ids))
    return ids


def get_question_by_id(question_id: int) -> Question | None:
    """Get a question by ID.

    Returns:
        Question if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM questions WHERE question_id = ?", (question_id,)
        ).fetchone()

    if row is None:
        return None

    return row_to_question(row)


def get_questions(
    grade: int,
    subject: str,
    category: str | None = None,
    limit: int | None = None,
) -> list[Question]:
    """Stored questions for a grade and subject, oldest first."""
    sql = "SELECT * FROM questions WHERE grade = ? AND subject = ?"
    params: list[object] = [grade, subject]
    if category:
        sql += " AND category = ?"
        params.append(category)
    sql += " ORDER BY question_id"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    with get_db() as conn:
        rows = conn.execute(sql, params).fetchall()

    return [row_to_question(row) for row in rows]


def row_to_question(row: sqlite3.Row) -> Question:
    """Convert a questions row to a Question."""
    choices = [AnswerChoice(id=c["id"], text=c["text"]) for c in json.loads(row["answer_choices"])]
    return Question(
        question_id=row["question_id"],
        grade=row["grade"],
        subject=row["subject"],
        teks_standard=row["teks_standard"],
        question_text=row["question_text"],
        answer_choices=choices,
        correct_answer=row["correct_answer"],
        explanation=row["explanation"],
        difficulty=row["difficulty"],
        category=row["category"],
        year=row["year"],
        is_from_real_staar=bool(row["is_from_real_staar"]),
        has_image=bool(row["has_image"]),
        image_description=row["image_description"],
        svg_content=row["svg_content"],
        passage=row["passage"],
        method=row["method"],
        confidence=row["confidence"],
        model_used=row["model_used"],
    )
