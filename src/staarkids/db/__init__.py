"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for questions, mock exams and practice progress
"""

from staarkids.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
