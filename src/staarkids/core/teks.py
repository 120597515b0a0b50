"""TEKS standards catalog and STAAR test blueprints.

Reporting categories and student expectations for grades 3-5, plus the
official STAAR question counts and category weights used to assemble
mock exams.
"""

from __future__ import annotations

import random
import re

TEKS_PATTERN = re.compile(r"^\d\.\d+[A-Z]$")

TEKS_STANDARDS: dict[int, dict[str, dict[str, list[str]]]] = {
    3: {
        "math": {
            "Number and Operations": ["3.2A", "3.2B", "3.2C", "3.2D", "3.3A", "3.3F"],
            "Algebraic Reasoning": ["3.4A", "3.4B", "3.4C", "3.4D", "3.4E", "3.4K", "3.5A"],
            "Geometry and Measurement": [
                "3.6A", "3.6B", "3.6C", "3.6D", "3.7A", "3.7B", "3.7C", "3.7D", "3.7E",
            ],
            "Data Analysis": ["3.8A", "3.8B"],
        },
        "reading": {
            "Reading Comprehension": [
                "3.6A", "3.6B", "3.6C", "3.6D", "3.6E", "3.6F", "3.6G", "3.6H",
            ],
            "Literary Elements": ["3.7A", "3.7B", "3.7C", "3.7D"],
            "Genre Features": ["3.8A", "3.8B", "3.8C", "3.8D"],
            "Author's Purpose": ["3.9A", "3.9B", "3.9C", "3.9D"],
        },
    },
    4: {
        "math": {
            "Number and Operations": [
                "4.2A", "4.2B", "4.2C", "4.2D", "4.2E", "4.2F", "4.2G", "4.2H", "4.3A",
            ],
            "Algebraic Reasoning": ["4.4A", "4.4B", "4.4C", "4.4D", "4.4E", "4.4F", "4.4G", "4.4H"],
            "Geometry and Measurement": [
                "4.5A", "4.5B", "4.5C", "4.5D", "4.6A", "4.6B", "4.6C", "4.6D",
                "4.7A", "4.7B", "4.7C", "4.7D", "4.7E",
            ],
            "Data Analysis": ["4.9A", "4.9B"],
        },
        "reading": {
            "Reading Comprehension": [
                "4.6A", "4.6B", "4.6C", "4.6D", "4.6E", "4.6F", "4.6G", "4.6H",
            ],
            "Literary Elements": ["4.7A", "4.7B", "4.7C", "4.7D", "4.7E", "4.7F"],
            "Genre Features": ["4.8A", "4.8B", "4.8C"],
            "Author's Purpose": ["4.9A", "4.9B", "4.9C", "4.9D"],
        },
    },
    5: {
        "math": {
            "Number and Operations": [
                "5.2A", "5.2B", "5.2C", "5.3A", "5.3B", "5.3C", "5.3D", "5.3E",
                "5.3F", "5.3G", "5.3H", "5.3I", "5.3J", "5.3K", "5.3L",
            ],
            "Algebraic Reasoning": ["5.4A", "5.4B", "5.4C", "5.4D", "5.4E", "5.4F", "5.4H"],
            "Geometry and Measurement": ["5.5A", "5.6A", "5.6B", "5.7A", "5.8A", "5.8B", "5.8C"],
            "Data Analysis": ["5.9A", "5.9B", "5.9C"],
        },
        "reading": {
            "Reading Comprehension": [
                "5.6A", "5.6B", "5.6C", "5.6D", "5.6E", "5.6F", "5.6G", "5.6H", "5.6I",
            ],
            "Literary Elements": ["5.7A", "5.7B", "5.7C", "5.7D"],
            "Genre Features": ["5.8A", "5.8B", "5.8C"],
            "Author's Purpose": ["5.9A", "5.9B", "5.9C", "5.9D", "5.9E"],
        },
    },
}

# Official STAAR question counts per grade and subject
STAAR_QUESTION_COUNTS: dict[int, dict[str, int]] = {
    3: {"math": 36, "reading": 40},
    4: {"math": 40, "reading": 44},
    5: {"math": 36, "reading": 46},
}

# Minutes allowed per mock exam
STAAR_TIME_LIMITS: dict[str, int] = {"math": 240, "reading": 180}

_READING_DISTRIBUTION = {
    "Reading Comprehension": 0.40,
    "Literary Elements": 0.30,
    "Genre Features": 0.15,
    "Author's Purpose": 0.15,
}

STAAR_CATEGORY_DISTRIBUTIONS: dict[int, dict[str, dict[str, float]]] = {
    3: {
        "math": {
            "Number and Operations": 0.45,
            "Geometry and Measurement": 0.35,
            "Data Analysis": 0.20,
        },
        "reading": _READING_DISTRIBUTION,
    },
    4: {
        "math": {
            "Number and Operations": 0.40,
            "Geometry and Measurement": 0.30,
            "Algebraic Reasoning": 0.30,
        },
        "reading": _READING_DISTRIBUTION,
    },
    5: {
        "math": {
            "Number and Operations": 0.35,
            "Algebraic Reasoning": 0.35,
            "Geometry and Measurement": 0.30,
        },
        "reading": _READING_DISTRIBUTION,
    },
}


class UnknownTeksError(Exception):
    """Raised when a grade/subject/category has no TEKS entries."""

    pass


def is_valid_teks(code: str | None) -> bool:
    """Check TEKS format, e.g. "3.4A" or "5.10B"."""
    return bool(code) and TEKS_PATTERN.match(code) is not None


def get_categories(grade: int, subject: str) -> list[str]:
    """Reporting categories for a grade and subject."""
    try:
        return list(TEKS_STANDARDS[grade][subject].keys())
    except KeyError as e:
        raise UnknownTeksError(f"No TEKS standards for grade {grade} {subject}") from e


def get_all_categories(subject: str) -> set[str]:
    """Every reporting category used for a subject across grades."""
    categories: set[str] = set()
    for by_subject in TEKS_STANDARDS.values():
        categories.update(by_subject.get(subject, {}).keys())
    return categories


def get_teks_standards(grade: int, subject: str, category: str | None = None) -> list[str]:
    """TEKS codes for a grade/subject, optionally limited to one category."""
    try:
        by_category = TEKS_STANDARDS[grade][subject]
    except KeyError as e:
        raise UnknownTeksError(f"No TEKS standards for grade {grade} {subject}") from e

    if category is None:
        return [code for codes in by_category.values() for code in codes]
    if category not in by_category:
        raise UnknownTeksError(f"Unknown category '{category}' for grade {grade} {subject}")
    return list(by_category[category])


def get_random_teks_standard(
    grade: int,
    subject: str,
    category: str | None = None,
    rng: random.Random | None = None,
) -> str:
    """Pick a random TEKS code for the grade/subject (and category)."""
    return (rng or random.Random()).choice(get_teks_standards(grade, subject, category))


def category_for_teks(grade: int, subject: str, teks_standard: str) -> str | None:
    """Find the reporting category that lists a TEKS code."""
    for category, codes in TEKS_STANDARDS.get(grade, {}).get(subject, {}).items():
        if teks_standard in codes:
            return category
    return None
