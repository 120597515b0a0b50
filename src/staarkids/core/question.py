"""Question data model shared by every generator.

A question always carries four lettered answer choices and the letter
of the correct one. Generators build choices as plain strings and call
``build_choices`` to shuffle and letter them.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

Subject = Literal["math", "reading"]
Difficulty = Literal["easy", "medium", "hard"]

VALID_GRADES = (3, 4, 5)
VALID_SUBJECTS = ("math", "reading")
CHOICE_LETTERS = ("A", "B", "C", "D")

_LETTER_PREFIX = re.compile(r"^\s*[A-J][.)]\s*")


@dataclass
class AnswerChoice:
    """One lettered answer choice."""

    id: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "text": self.text}


@dataclass
class Question:
    """A STAAR-style multiple choice question."""

    grade: int
    subject: Subject
    teks_standard: str
    question_text: str
    answer_choices: list[AnswerChoice]
    correct_answer: str
    explanation: str = ""
    difficulty: Difficulty = "medium"
    category: str | None = None
    year: int = field(default_factory=lambda: datetime.now(timezone.utc).year)
    is_from_real_staar: bool = False
    has_image: bool = False
    image_description: str | None = None
    svg_content: str | None = None
    passage: str | None = None
    question_id: int | None = None
    # Generation metadata
    method: str = "standard"
    confidence: float | None = None
    model_used: str | None = None
    ab_test_group: str | None = None
    ensemble_vote: dict[str, Any] | None = None

    def choice_text(self, letter: str) -> str | None:
        """Return the text of the choice with the given letter."""
        for choice in self.answer_choices:
            if choice.id == letter:
                return choice.text
        return None

    @property
    def correct_text(self) -> str | None:
        """Text of the correct answer choice."""
        return self.choice_text(self.correct_answer)

    def clear_visual(self) -> None:
        """Drop any attached diagram."""
        self.has_image = False
        self.image_description = None
        self.svg_content = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "question_id": self.question_id,
            "grade": self.grade,
            "subject": self.subject,
            "teks_standard": self.teks_standard,
            "question_text": self.question_text,
            "answer_choices": [c.to_dict() for c in self.answer_choices],
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "difficulty": self.difficulty,
            "category": self.category,
            "year": self.year,
            "is_from_real_staar": self.is_from_real_staar,
            "has_image": self.has_image,
            "image_description": self.image_description,
            "svg_content": self.svg_content,
            "passage": self.passage,
            "method": self.method,
            "confidence": self.confidence,
            "model_used": self.model_used,
            "ab_test_group": self.ab_test_group,
            "ensemble_vote": self.ensemble_vote,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """Build a question from its dictionary form."""
        choices = [
            AnswerChoice(id=c["id"], text=c["text"]) if isinstance(c, dict) else c
            for c in data.get("answer_choices", [])
        ]
        return cls(
            grade=data["grade"],
            subject=data["subject"],
            teks_standard=data.get("teks_standard", ""),
            question_text=data["question_text"],
            answer_choices=choices,
            correct_answer=data.get("correct_answer", ""),
            explanation=data.get("explanation") or "",
            difficulty=data.get("difficulty") or "medium",
            category=data.get("category"),
            year=data.get("year") or datetime.now(timezone.utc).year,
            is_from_real_staar=bool(data.get("is_from_real_staar", False)),
            has_image=bool(data.get("has_image", False)),
            image_description=data.get("image_description"),
            svg_content=data.get("svg_content"),
            passage=data.get("passage"),
            question_id=data.get("question_id"),
            method=data.get("method") or "standard",
            confidence=data.get("confidence"),
            model_used=data.get("model_used"),
            ab_test_group=data.get("ab_test_group"),
            ensemble_vote=data.get("ensemble_vote"),
        )


def strip_letter_prefix(text: str) -> str:
    """Remove a leading "A. " / "B) " style label from a choice."""
    return _LETTER_PREFIX.sub("", text).strip()


def build_choices(
    correct: str,
    distractors: list[str],
    rng: random.Random | None = None,
    shuffle: bool = True,
) -> tuple[list[AnswerChoice], str]:
    """Letter a correct answer and three distractors.

    Args:
        correct: Text of the correct answer
        distractors: Exactly three wrong answers
        rng: Random source used for shuffling
        shuffle: Keep the correct answer first when False

    Returns:
        Tuple of (lettered choices, letter of the correct answer)

    Raises:
        ValueError: If there are not exactly three distinct distractors
    """
    texts = [strip_letter_prefix(correct)] + [strip_letter_prefix(d) for d in distractors]
    if len(texts) != len(CHOICE_LETTERS):
        raise ValueError(f"Expected 3 distractors, got {len(distractors)}")
    if len(set(texts)) != len(texts):
        raise ValueError(f"Answer choices are not distinct: {texts}")

    order = list(range(len(texts)))
    if shuffle:
        (rng or random.Random()).shuffle(order)

    choices = [
        AnswerChoice(id=letter, text=texts[idx])
        for letter, idx in zip(CHOICE_LETTERS, order)
    ]
    correct_letter = CHOICE_LETTERS[order.index(0)]
    return choices, correct_letter


def is_valid_grade_subject(grade: int, subject: str) -> bool:
    """Check grade is 3-5 and subject is math or reading."""
    return grade in VALID_GRADES and subject in VALID_SUBJECTS
