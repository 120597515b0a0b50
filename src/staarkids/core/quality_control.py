"""Quality control for generated questions.

Responsibilities:
- Heuristic validation (math accuracy, reading structure, grade fit,
  TEKS alignment, diagram sanity) averaged into one score
- In-memory human review queue ordered by priority

Usage:
    from staarkids.core.quality_control import get_review_system, validate_question_quality

    result = validate_question_quality(question)
    if not result.is_valid:
        get_review_system().add_to_review_queue("q-1", question, result)
"""

from __future__ import annotations

import re
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from staarkids.config.app_config import load_app_config
from staarkids.core.question import Question
from staarkids.core.teks import get_all_categories, is_valid_teks

logger = structlog.get_logger(__name__)

Priority = Literal["low", "medium", "high"]

PRIORITY_RANK: dict[str, int] = {"high": 0, "medium": 1, "low": 2}

GRADE_NUMBER_LIMITS = {3: 1_000, 4: 10_000, 5: 100_000}
GRADE_PASSAGE_WORDS = {3: (50, 200), 4: (75, 300), 5: (100, 400)}
GRADE_COMPLEX_WORD_LIMITS = {3: 2, 4: 3, 5: 4}

MAX_SVG_WIDTH = 800
MAX_SVG_HEIGHT = 600
MAX_WORDS_PER_SENTENCE = 20

TEXT_REFERENCE_PHRASES = ("according to", "based on", "the text states", "the passage", "the story")

# Older labels still accepted next to the TEKS reporting categories
LEGACY_CATEGORIES = {
    "math": {"Geometry", "Measurement"},
    "reading": {"Literary Analysis", "Informational Text", "Vocabulary"},
}

_NUMBER = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?")
_NON_NUMERIC = re.compile(r"[^\d.\-]")
_SVG_WIDTH = re.compile(r'width="(\d+)"')
_SVG_HEIGHT = re.compile(r'height="(\d+)"')


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class CheckResult:
    """Outcome of one validation check."""

    score: float
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class QualityMetrics:
    """Per-check scores."""

    accuracy: float
    readability: float
    grade_appropriate: bool
    teks_alignment: bool
    image_quality: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "accuracy": self.accuracy,
            "readability": self.readability,
            "grade_appropriate": self.grade_appropriate,
            "teks_alignment": self.teks_alignment,
            "image_quality": self.image_quality,
        }


@dataclass
class ValidationResult:
    """Combined validation outcome."""

    is_valid: bool
    score: float
    issues: list[str]
    suggestions: list[str]
    metrics: QualityMetrics

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "score": round(self.score, 4),
            "issues": self.issues,
            "suggestions": self.suggestions,
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class ReviewRequest:
    """A question waiting for human review."""

    question_id: str
    question: Question
    validation_result: ValidationResult
    priority: Priority
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "question": self.question.to_dict(),
            "validation_result": self.validation_result.to_dict(),
            "priority": self.priority,
            "timestamp": self.timestamp,
        }


# =============================================================================
# CHECKS
# =============================================================================


def _numbers_in(text: str) -> list[float]:
    return [float(m.replace(",", "")) for m in _NUMBER.findall(text)]


def _numeric_value(text: str) -> float | None:
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        return float(cleaned)
    except ValueError:
        return None


def check_math_accuracy(question: Question) -> CheckResult:
    """Answer key present, sensible distractors, grade-sized numbers."""
    result = CheckResult(score=1.0)
    if question.subject != "math":
        return result

    letters = {c.id for c in question.answer_choices}
    if question.correct_answer not in letters:
        result.issues.append("Correct answer not found in answer choices")

    values = [
        v for v in (_numeric_value(c.text) for c in question.answer_choices) if v is not None
    ]
    if len(values) > 1:
        if max(values) - min(values) == 0:
            result.issues.append("All answer choices are identical")

        correct_text = question.correct_text
        correct_value = _numeric_value(correct_text) if correct_text else None
        if correct_value is not None and any(
            abs(v - correct_value) < 0.01 and v != correct_value for v in values
        ):
            result.suggestions.append("Consider making distractors more distinct from correct answer")

    limit = GRADE_NUMBER_LIMITS.get(question.grade, max(GRADE_NUMBER_LIMITS.values()))
    numbers = _numbers_in(question.question_text)
    if numbers and max(numbers) > limit:
        result.issues.append(f"Numbers too large for grade {question.grade}")

    result.score = max(0.0, 1 - 0.3 * len(result.issues))
    return result


def check_reading_comprehension(question: Question) -> CheckResult:
    """Passage length and sentence length for the grade, text-based wording."""
    result = CheckResult(score=1.0)
    if question.subject != "reading":
        return result

    if question.passage:
        word_count = len(question.passage.split())
        low, high = GRADE_PASSAGE_WORDS.get(question.grade, GRADE_PASSAGE_WORDS[4])
        if word_count < low:
            result.issues.append("Passage too short for grade level")
        elif word_count > high:
            result.issues.append("Passage too long for grade level")

        sentences = [s for s in re.split(r"[.!?]+", question.passage) if s.strip()]
        if sentences and word_count / len(sentences) > MAX_WORDS_PER_SENTENCE:
            result.suggestions.append("Consider shorter sentences for better readability")

    lowered = question.question_text.lower()
    if not any(phrase in lowered for phrase in TEXT_REFERENCE_PHRASES):
        result.suggestions.append("Consider adding text reference to ensure answer is passage-based")

    result.score = max(0.0, 1 - 0.2 * len(result.issues))
    return result


def _complex_words(text: str) -> list[str]:
    words = []
    for word in text.split():
        clean = re.sub(r"[^\w]", "", word).lower()
        if len(clean) > 8 or any(part in clean for part in ("tion", "sion", "ology", "ment")):
            words.append(clean)
    return words


def check_grade_appropriate(question: Question) -> CheckResult:
    """Vocabulary load and TEKS grade prefix."""
    result = CheckResult(score=1.0)

    limit = GRADE_COMPLEX_WORD_LIMITS.get(question.grade, GRADE_COMPLEX_WORD_LIMITS[4])
    if len(_complex_words(question.question_text)) > limit:
        result.suggestions.append("Consider simpler vocabulary for grade level")

    if not question.teks_standard or not question.teks_standard.startswith(f"{question.grade}."):
        result.issues.append("TEKS standard doesn't match grade level")

    result.score = 1.0 if not result.issues else 0.5
    return result


def check_teks_alignment(question: Question) -> CheckResult:
    """TEKS present and well formed, category known for the subject."""
    if not question.teks_standard:
        return CheckResult(score=0.0, issues=["Missing TEKS standard"])

    result = CheckResult(score=1.0)
    if not is_valid_teks(question.teks_standard):
        result.issues.append("Invalid TEKS format")

    known = get_all_categories(question.subject) | LEGACY_CATEGORIES.get(question.subject, set())
    if question.category and question.category not in known:
        result.suggestions.append("Verify category alignment with TEKS standards")

    result.score = 1.0 if not result.issues else 0.3
    return result


def check_image_content(question: Question) -> CheckResult:
    """SVG well formed, display-sized and labelled for screen readers."""
    result = CheckResult(score=1.0)
    svg = question.svg_content
    if not svg:
        return result

    if "<svg" not in svg or "</svg>" not in svg:
        result.issues.append("Invalid SVG structure")
    else:
        try:
            ET.fromstring(svg)
        except ET.ParseError:
            result.issues.append("SVG is not well-formed XML")

    width = _SVG_WIDTH.search(svg)
    height = _SVG_HEIGHT.search(svg)
    if width and height and (int(width.group(1)) > MAX_SVG_WIDTH or int(height.group(1)) > MAX_SVG_HEIGHT):
        result.suggestions.append("Consider smaller image dimensions for better display")

    if "aria-label" not in svg and "<title" not in svg:
        result.suggestions.append("Add accessibility labels to SVG")

    result.score = max(0.0, 1 - 0.4 * len(result.issues))
    return result


# =============================================================================
# VALIDATION PIPELINE
# =============================================================================


def validate_question_quality(
    question: Question | dict[str, Any],
    pass_threshold: float | None = None,
) -> ValidationResult:
    """Run every check and combine the results.

    Args:
        question: Question or its dictionary form
        pass_threshold: Minimum average score; defaults to the configured one

    Returns:
        ValidationResult; valid only when the average reaches the
        threshold and no check reported an issue
    """
    if isinstance(question, dict):
        question = Question.from_dict(question)
    if pass_threshold is None:
        pass_threshold = load_app_config().quality.pass_threshold

    checks = [
        check_math_accuracy(question),
        check_reading_comprehension(question),
        check_grade_appropriate(question),
        check_teks_alignment(question),
        check_image_content(question),
    ]

    issues = [issue for c in checks for issue in c.issues]
    suggestions = [s for c in checks for s in c.suggestions]
    average = sum(c.score for c in checks) / len(checks)

    return ValidationResult(
        is_valid=average >= pass_threshold and not issues,
        score=average,
        issues=issues,
        suggestions=suggestions,
        metrics=QualityMetrics(
            accuracy=checks[0].score,
            readability=checks[1].score,
            grade_appropriate=checks[2].score > 0.8,
            teks_alignment=checks[3].score > 0.8,
            image_quality=checks[4].score,
        ),
    )


def determine_priority(result: ValidationResult) -> Priority:
    """high: score < 0.6 or > 2 issues; medium: score < 0.8 or any issue."""
    if result.score < 0.6 or len(result.issues) > 2:
        return "high"
    if result.score < 0.8 or result.issues:
        return "medium"
    return "low"


# =============================================================================
# REVIEW QUEUE
# =============================================================================


class QualityReviewSystem:
    """Human-in-the-loop review queue.

    Kept ordered high -> medium -> low, first-in first-out within a
    priority. Adding an id that is already queued replaces the entry.
    """

    def __init__(self):
        self._queue: list[ReviewRequest] = []
        self._rejected: list[ReviewRequest] = []
        self._lock = threading.Lock()

    def add_to_review_queue(
        self,
        question_id: str,
        question: Question,
        validation_result: ValidationResult,
    ) -> ReviewRequest:
        request = ReviewRequest(
            question_id=str(question_id),
            question=question,
            validation_result=validation_result,
            priority=determine_priority(validation_result),
        )
        with self._lock:
            self._queue = [r for r in self._queue if r.question_id != request.question_id]
            self._queue.append(request)
            # sort is stable, so arrival order holds within a priority
            self._queue.sort(key=lambda r: PRIORITY_RANK[r.priority])

        logger.info(
            "question_queued_for_review",
            question_id=request.question_id,
            priority=request.priority,
            score=round(validation_result.score, 3),
        )
        return request

    def get_review_queue(self) -> list[ReviewRequest]:
        with self._lock:
            return list(self._queue)

    def _pop(self, question_id: str) -> ReviewRequest | None:
        with self._lock:
            for index, request in enumerate(self._queue):
                if request.question_id == str(question_id):
                    return self._queue.pop(index)
        return None

    def approve_question(self, question_id: str) -> bool:
        """Remove an approved question from the queue."""
        request = self._pop(question_id)
        if request is None:
            return False
        logger.info("question_approved", question_id=request.question_id)
        return True

    def reject_question(self, question_id: str, reason: str | None = None) -> bool:
        """Remove a rejected question and keep it in the rejection log."""
        request = self._pop(question_id)
        if request is None:
            return False
        with self._lock:
            self._rejected.append(request)
        logger.info("question_rejected", question_id=request.question_id, reason=reason)
        return True

    def get_rejected(self) -> list[ReviewRequest]:
        with self._lock:
            return list(self._rejected)

    def clear(self) -> None:
        with self._lock:
            self._queue.clear()
            self._rejected.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)


def review_generated_questions(
    questions: list[Question],
    system: QualityReviewSystem | None = None,
) -> list[ValidationResult]:
    """Validate a batch and queue every question that fails.

    Questions without an id are queued as ``generated-<index>``.
    """
    system = system or get_review_system()
    results = []
    for index, question in enumerate(questions):
        result = validate_question_quality(question)
        if not result.is_valid:
            question_id = question.question_id if question.question_id is not None else f"generated-{index}"
            system.add_to_review_queue(str(question_id), question, result)
        results.append(result)
    return results


# Module-level instance
_review_system: QualityReviewSystem | None = None


def get_review_system() -> QualityReviewSystem:
    """Get or create the review system singleton."""
    global _review_system
    if _review_system is None:
        _review_system = QualityReviewSystem()
    return _review_system


def reset_review_system() -> None:
    """Reset the review system (for testing)."""
    global _review_system
    _review_system = None
