"""Mock STAAR exam builder.

Responsibilities:
- Official question count and time limit per grade and subject
- Allocation of questions to reporting categories by the STAAR distribution
- Question generation per category from the template and diverse generators
- Scoring submitted answers against the stored keys

Exam names are deterministic: "STAAR Grade {g} {Mathematics|Reading} Practice Test {n}".
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import structlog

from staarkids.core.diverse_generator import (
    QUESTION_TYPE_CATEGORIES,
    generate_question_by_type,
    question_types_for,
)
from staarkids.core.question import VALID_GRADES, VALID_SUBJECTS, Question
from staarkids.core.teks import (
    STAAR_CATEGORY_DISTRIBUTIONS,
    STAAR_QUESTION_COUNTS,
    STAAR_TIME_LIMITS,
    category_for_teks,
)
from staarkids.core.template_generator import (
    EFFICIENT_QUESTION_TEMPLATES,
    TemplateError,
    build_from_template,
    generate_efficient_question,
)

logger = structlog.get_logger(__name__)

SUBJECT_TITLES = {"math": "Mathematics", "reading": "Reading"}
MAX_ITEM_RETRIES = 3


class ExamGenerationError(Exception):
    """Raised when an exam cannot be built for a grade and subject."""

    pass


@dataclass
class MockExam:
    """A full-length practice test."""

    name: str
    grade: int
    subject: str
    total_questions: int
    time_limit: int
    questions: list[Question] = field(default_factory=list)
    exam_id: int | None = None

    def to_dict(self, include_questions: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "exam_id": self.exam_id,
            "name": self.name,
            "grade": self.grade,
            "subject": self.subject,
            "total_questions": self.total_questions,
            "time_limit": self.time_limit,
        }
        if include_questions:
            data["questions"] = [q.to_dict() for q in self.questions]
        return data


@dataclass
class QuestionScore:
    question_id: int | None
    selected_answer: str | None
    correct_answer: str
    is_correct: bool


@dataclass
class ExamScore:
    """Result of scoring one submission."""

    exam_id: int | None
    total_questions: int
    correct_answers: int
    results: list[QuestionScore]

    @property
    def score(self) -> int:
        """Percent correct, rounded."""
        if self.total_questions == 0:
            return 0
        return round(self.correct_answers / self.total_questions * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exam_id": self.exam_id,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "score": self.score,
            "results": [vars(r) for r in self.results],
        }


def exam_name(grade: int, subject: str, exam_number: int) -> str:
    return f"STAAR Grade {grade} {SUBJECT_TITLES[subject]} Practice Test {exam_number}"


def allocate_category_counts(distribution: dict[str, float], total: int) -> dict[str, int]:
    """Split total across categories by weight.

    Each category gets floor(weight * total); the remainder goes one each
    to the heaviest categories (ties keep declaration order).
    """
    counts = {category: int(weight * total) for category, weight in distribution.items()}
    remainder = total - sum(counts.values())
    by_weight = sorted(distribution, key=lambda c: distribution[c], reverse=True)
    for category in by_weight[:remainder]:
        counts[category] += 1
    return counts


def _sources_for(grade: int, subject: str, category: str) -> list[tuple[str, str]]:
    """Template names and diverse types that produce items of a category."""
    templates = EFFICIENT_QUESTION_TEMPLATES.get(subject, {}).get(grade, {})
    sources = [
        ("template", name)
        for name, template in sorted(templates.items())
        if category_for_teks(grade, subject, template.teks_standard) == category
    ]
    sources += [
        ("diverse", question_type)
        for question_type in question_types_for(subject)
        if QUESTION_TYPE_CATEGORIES[question_type] == category
    ]
    return sources


def generate_category_question(
    grade: int, subject: str, category: str, rng: random.Random
) -> Question:
    """One question of the given reporting category.

    Falls back to an efficient-template question when no generator
    covers the category.
    """
    sources = _sources_for(grade, subject, category)
    if not sources:
        return generate_efficient_question(grade, subject, category, rng)

    kind, name = rng.choice(sources)
    if kind == "template":
        template = EFFICIENT_QUESTION_TEMPLATES[subject][grade][name]
        return build_from_template(template, grade, subject, rng, category)
    return generate_question_by_type(grade, subject, name, rng)


def build_mock_exam(
    grade: int,
    subject: str,
    exam_number: int = 1,
    rng: random.Random | None = None,
) -> MockExam:
    """Build a full-length practice test (not yet persisted).

    Args:
        grade: Grade level (3-5)
        subject: "math" or "reading"
        exam_number: Number used in the exam name
        rng: Random source

    Raises:
        ExamGenerationError: If grade or subject is unsupported
    """
    if grade not in VALID_GRADES or subject not in VALID_SUBJECTS:
        raise ExamGenerationError(f"No STAAR exam for grade {grade} {subject}")

    rng = rng or random.Random()
    total = STAAR_QUESTION_COUNTS[grade][subject]
    allocation = allocate_category_counts(STAAR_CATEGORY_DISTRIBUTIONS[grade][subject], total)

    questions: list[Question] = []
    for category, count in allocation.items():
        for _ in range(count):
            questions.append(_generate_with_retries(grade, subject, category, rng))

    exam = MockExam(
        name=exam_name(grade, subject, exam_number),
        grade=grade,
        subject=subject,
        total_questions=total,
        time_limit=STAAR_TIME_LIMITS[subject],
        questions=questions,
    )
    logger.info(
        "mock_exam_built",
        name=exam.name,
        questions=len(questions),
        allocation=allocation,
    )
    return exam


def _generate_with_retries(grade: int, subject: str, category: str, rng: random.Random) -> Question:
    for attempt in range(MAX_ITEM_RETRIES):
        try:
            return generate_category_question(grade, subject, category, rng)
        except TemplateError as e:
            logger.warning("exam_item_failed", category=category, attempt=attempt + 1, error=str(e))
    return generate_efficient_question(grade, subject, category, rng)


def score_exam(exam: MockExam, answers: dict[int, str]) -> ExamScore:
    """Score answers keyed by question_id against the exam's keys.

    Unanswered questions count as wrong.
    """
    results = []
    for question in exam.questions:
        selected = answers.get(question.question_id) if question.question_id is not None else None
        selected = selected.strip().upper() if selected else None
        results.append(
            QuestionScore(
                question_id=question.question_id,
                selected_answer=selected,
                correct_answer=question.correct_answer,
                is_correct=selected == question.correct_answer,
            )
        )

    score = ExamScore(
        exam_id=exam.exam_id,
        total_questions=len(exam.questions),
        correct_answers=sum(1 for r in results if r.is_correct),
        results=results,
    )
    logger.info("exam_scored", exam_id=exam.exam_id, score=score.score)
    return score
