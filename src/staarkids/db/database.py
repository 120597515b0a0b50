"""SQLite database connection and schema management.

Provides connection management and schema initialization for stored
questions, mock exams and practice progress.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from staarkids.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

# Current database path (module-level, set by init_db)
_db_path: Path | None = None

# Paths whose schema has been created in this process
_schema_ready: set[Path] = set()


def _resolve_path() -> Path:
    return _db_path or load_app_config().db_path


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to the configured db_path
    """
    global _db_path
    _db_path = db_path or load_app_config().db_path

    _schema_ready.discard(_db_path.resolve())
    with get_db():
        pass

    logger.info("database_initialized", path=str(_db_path))


def reset_db_path() -> None:
    """Forget the path set by init_db (for testing)."""
    global _db_path
    _db_path = None
    _schema_ready.clear()


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM questions").fetchall()
    """
    db_path = _resolve_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path.resolve() not in _schema_ready:
        _create_schema(conn)
        _schema_ready.add(db_path.resolve())

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Generated and stored questions; choices and vote are JSON
        CREATE TABLE IF NOT EXISTS questions (
            question_id INTEGER PRIMARY KEY AUTOINCREMENT,
            grade INTEGER NOT NULL CHECK(grade IN (3, 4, 5)),
            subject TEXT NOT NULL CHECK(subject IN ('math', 'reading')),
            teks_standard TEXT NOT NULL,
            question_text TEXT NOT NULL,
            answer_choices TEXT NOT NULL,
            correct_answer TEXT NOT NULL,
            explanation TEXT NOT NULL DEFAULT '',
            difficulty TEXT NOT NULL DEFAULT 'medium',
            category TEXT,
            year INTEGER,
            is_from_real_staar INTEGER NOT NULL DEFAULT 0,
            has_image INTEGER NOT NULL DEFAULT 0,
            image_description TEXT,
            svg_content TEXT,
            passage TEXT,
            method TEXT NOT NULL DEFAULT 'standard',
            confidence REAL,
            model_used TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS mock_exams (
            exam_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            grade INTEGER NOT NULL CHECK(grade IN (3, 4, 5)),
            subject TEXT NOT NULL CHECK(subject IN ('math', 'reading')),
            total_questions INTEGER NOT NULL,
            time_limit INTEGER NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS mock_exam_questions (
            exam_id INTEGER NOT NULL REFERENCES mock_exams(exam_id) ON DELETE CASCADE,
            question_id INTEGER NOT NULL REFERENCES questions(question_id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            PRIMARY KEY (exam_id, position)
        );

        -- Users are opaque ids; there is no user table
        CREATE TABLE IF NOT EXISTS practice_attempts (
            attempt_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            question_id INTEGER,
            grade INTEGER NOT NULL,
            subject TEXT NOT NULL,
            teks_standard TEXT,
            selected_answer TEXT,
            is_correct INTEGER NOT NULL,
            hints_used INTEGER NOT NULL DEFAULT 0,
            skipped INTEGER NOT NULL DEFAULT 0,
            time_spent INTEGER,
            star_power_earned INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS star_power_history (
            entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            amount INTEGER NOT NULL,
            source TEXT NOT NULL,
            attempt_id INTEGER REFERENCES practice_attempts(attempt_id) ON DELETE SET NULL,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_questions_grade_subject ON questions(grade, subject);
        CREATE INDEX IF NOT EXISTS idx_mock_exams_grade ON mock_exams(grade);
        CREATE INDEX IF NOT EXISTS idx_attempts_user ON practice_attempts(user_id);
        CREATE INDEX IF NOT EXISTS idx_star_power_user ON star_power_history(user_id);
        """
    )
