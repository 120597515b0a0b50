"""Authentic-pattern STAAR item bank.

Loads bundled items from data/bank/authentic_staar_v1.yaml.

Usage:
    from staarkids.core.authentic_bank import find_items

    items = find_items(grade=4, subject="math", category="Data Analysis")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from staarkids.core.question import AnswerChoice, CHOICE_LETTERS, strip_letter_prefix

logger = structlog.get_logger(__name__)

# Bank file (relative to project root)
BANK_FILE = Path(__file__).parent.parent.parent.parent / "data" / "bank" / "authentic_staar_v1.yaml"


@dataclass
class BankItem:
    """One authentic-pattern question."""

    grade: int
    subject: str
    category: str
    teks_standard: str
    year: int
    question_text: str
    answer_choices: list[str]
    correct_answer: str
    explanation: str = ""
    difficulty: str = "medium"

    def lettered_choices(self) -> list[AnswerChoice]:
        """Choices relabelled A-D in bank order."""
        return [
            AnswerChoice(id=letter, text=strip_letter_prefix(text))
            for letter, text in zip(CHOICE_LETTERS, self.answer_choices)
        ]

    def example_text(self) -> str:
        """Compact form used as a few-shot example in prompts."""
        choices = " | ".join(f"{c.id}) {c.text}" for c in self.lettered_choices())
        return (
            f"Question ({self.teks_standard}, {self.category}): {self.question_text}\n"
            f"Choices: {choices}\n"
            f"Correct: {self.correct_answer}"
        )


# Module-level cache
_cached_items: list[BankItem] | None = None


def _get_default_items() -> list[BankItem]:
    """Minimal bank used when the bank file is missing."""
    return [
        BankItem(
            grade=grade,
            subject="math",
            category="Number and Operations",
            teks_standard=f"{grade}.2A",
            year=2013,
            question_text="Which number has a 4 in the hundreds place and a 7 in the ones place?",
            answer_choices=["437", "347", "734", "473"],
            correct_answer="A",
            explanation="In 437 the 4 is in the hundreds place and the 7 is in the ones place.",
            difficulty="easy",
        )
        for grade in (3, 4, 5)
    ]


def _parse_item(data: dict[str, Any]) -> BankItem:
    return BankItem(
        grade=int(data["grade"]),
        subject=data["subject"],
        category=data["category"],
        teks_standard=str(data["teks_standard"]),
        year=int(data.get("year", 2013)),
        question_text=data["question_text"],
        answer_choices=[str(c) for c in data["answer_choices"]],
        correct_answer=str(data.get("correct_answer", "A")).upper(),
        explanation=data.get("explanation", ""),
        difficulty=data.get("difficulty", "medium"),
    )


def load_bank(force_reload: bool = False) -> list[BankItem]:
    """Load all bank items.

    Args:
        force_reload: If True, ignore cache and reload from file.
    """
    global _cached_items

    if _cached_items is not None and not force_reload:
        return _cached_items

    if not BANK_FILE.exists():
        logger.warning("authentic_bank_not_found", path=str(BANK_FILE))
        _cached_items = _get_default_items()
        return _cached_items

    data = yaml.safe_load(BANK_FILE.read_text(encoding="utf-8")) or {}
    _cached_items = [_parse_item(item) for item in data.get("items", [])]
    logger.debug("loaded_authentic_bank", count=len(_cached_items))
    return _cached_items


def find_items(
    grade: int,
    subject: str,
    category: str | None = None,
    teks_standard: str | None = None,
) -> list[BankItem]:
    """Bank items matching grade and subject, plus optional filters."""
    return [
        item
        for item in load_bank()
        if item.grade == grade
        and item.subject == subject
        and (category is None or item.category == category)
        and (teks_standard is None or item.teks_standard == teks_standard)
    ]


def clear_bank_cache() -> None:
    """Clear the bank cache."""
    global _cached_items
    _cached_items = None
