"""Tests for quality validation and the review queue."""

import random
from unittest.mock import MagicMock

import pytest

from staarkids.core.quality_control import (
    QualityMetrics,
    QualityReviewSystem,
    ValidationResult,
    check_image_content,
    check_math_accuracy,
    check_reading_comprehension,
    check_teks_alignment,
    determine_priority,
    get_review_system,
    review_generated_questions,
    validate_question_quality,
)
from staarkids.core.question import AnswerChoice, Question
from staarkids.core.svg_diagrams import rectangle_area
from staarkids.core.template_generator import generate_efficient_question


def make_question(**overrides):
    data = {
        "grade": 3,
        "subject": "math",
        "teks_standard": "3.4A",
        "question_text": "Sam has 12 apples and buys 5 more. How many apples does he have?",
        "answer_choices": [
            AnswerChoice(id="A", text="17 apples"),
            AnswerChoice(id="B", text="7 apples"),
            AnswerChoice(id="C", text="15 apples"),
            AnswerChoice(id="D", text="19 apples"),
        ],
        "correct_answer": "A",
        "category": "Algebraic Reasoning",
    }
    data.update(overrides)
    return Question(**data)


def make_result(score, issues=()):
    return ValidationResult(
        is_valid=not issues,
        score=score,
        issues=list(issues),
        suggestions=[],
        metrics=QualityMetrics(1.0, 1.0, True, True, 1.0),
    )


class TestChecks:
    """Tests for the individual checks."""

    def test_math_missing_answer_key(self):
        result = check_math_accuracy(make_question(correct_answer="E"))
        assert "Correct answer not found in answer choices" in result.issues
        assert result.score == pytest.approx(0.7)

    def test_math_numbers_too_large(self):
        result = check_math_accuracy(make_question(question_text="What is 5,000 + 20?"))
        assert "Numbers too large for grade 3" in result.issues

    def test_math_identical_choices(self):
        choices = [AnswerChoice(id=letter, text="5") for letter in "ABCD"]
        result = check_math_accuracy(make_question(answer_choices=choices))
        assert "All answer choices are identical" in result.issues

    def test_reading_passage_too_short(self):
        question = make_question(
            subject="reading",
            teks_standard="3.6A",
            passage="The dog ran home.",
            question_text="According to the passage, where did the dog go?",
        )
        result = check_reading_comprehension(question)
        assert "Passage too short for grade level" in result.issues
        assert result.score == pytest.approx(0.8)

    def test_reading_suggests_text_reference(self):
        question = make_question(subject="reading", question_text="Where did the dog go?")
        result = check_reading_comprehension(question)
        assert any("text reference" in s for s in result.suggestions)
        assert not result.issues

    def test_teks_missing(self):
        result = check_teks_alignment(make_question(teks_standard=""))
        assert result.score == 0.0
        assert result.issues == ["Missing TEKS standard"]

    def test_teks_bad_format(self):
        result = check_teks_alignment(make_question(teks_standard="3.4"))
        assert result.issues == ["Invalid TEKS format"]
        assert result.score == 0.3

    def test_unknown_category_is_suggestion(self):
        result = check_teks_alignment(make_question(category="Cooking"))
        assert not result.issues
        assert result.suggestions

    def test_image_invalid_structure(self):
        result = check_image_content(make_question(svg_content="<div>no</div>"))
        assert "Invalid SVG structure" in result.issues

    def test_image_not_well_formed(self):
        result = check_image_content(make_question(svg_content="<svg><rect></svg>"))
        assert "SVG is not well-formed XML" in result.issues

    def test_image_catalog_diagram_passes(self):
        result = check_image_content(make_question(svg_content=rectangle_area(4, 3)))
        assert result.score == 1.0
        assert not result.issues
        assert not result.suggestions

    def test_image_large_dimensions(self):
        svg = '<svg width="1200" height="900" aria-label="x"></svg>'
        result = check_image_content(make_question(svg_content=svg))
        assert any("smaller image" in s for s in result.suggestions)


class TestValidateQuestionQuality:
    """Tests for the combined validation."""

    def test_good_question_is_valid(self):
        result = validate_question_quality(make_question())
        assert result.is_valid
        assert result.score == 1.0
        assert result.metrics.grade_appropriate
        assert result.metrics.teks_alignment

    def test_generated_questions_pass(self):
        rng = random.Random(21)
        for grade in (3, 4, 5):
            question = generate_efficient_question(grade, "math", rng=rng)
            assert validate_question_quality(question).is_valid

    def test_teks_grade_mismatch_is_invalid(self):
        result = validate_question_quality(make_question(teks_standard="5.4A"))
        assert not result.is_valid
        assert "TEKS standard doesn't match grade level" in result.issues
        assert not result.metrics.grade_appropriate

    def test_accepts_dict(self):
        result = validate_question_quality(make_question().to_dict())
        assert result.is_valid

    def test_threshold_override(self):
        """Any issue fails, whatever the threshold."""
        result = validate_question_quality(make_question(correct_answer="E"), pass_threshold=0.1)
        assert not result.is_valid


class TestDeterminePriority:
    def test_high(self):
        assert determine_priority(make_result(0.5)) == "high"
        assert determine_priority(make_result(0.9, ["a", "b", "c"])) == "high"

    def test_medium(self):
        assert determine_priority(make_result(0.7)) == "medium"
        assert determine_priority(make_result(0.95, ["a"])) == "medium"

    def test_low(self):
        assert determine_priority(make_result(0.9)) == "low"


class TestQualityReviewSystem:
    """Tests for the review queue."""

    def test_queue_ordering(self):
        """High before medium before low, arrival order within a priority."""
        system = QualityReviewSystem()
        question = make_question()
        system.add_to_review_queue("low-1", question, make_result(0.9))
        system.add_to_review_queue("high-1", question, make_result(0.4))
        system.add_to_review_queue("medium-1", question, make_result(0.7))
        system.add_to_review_queue("high-2", question, make_result(0.5))

        ids = [r.question_id for r in system.get_review_queue()]
        assert ids == ["high-1", "high-2", "medium-1", "low-1"]

    def test_requeue_replaces_entry(self):
        system = QualityReviewSystem()
        question = make_question()
        system.add_to_review_queue("q1", question, make_result(0.4))
        system.add_to_review_queue("q1", question, make_result(0.9))

        queue = system.get_review_queue()
        assert len(queue) == 1
        assert queue[0].priority == "low"

    def test_approve_removes(self):
        system = QualityReviewSystem()
        system.add_to_review_queue("q1", make_question(), make_result(0.4))
        assert system.approve_question("q1")
        assert len(system) == 0
        assert not system.approve_question("q1")

    def test_reject_logs(self):
        system = QualityReviewSystem()
        system.add_to_review_queue("q1", make_question(), make_result(0.4))
        assert system.reject_question("q1", "wrong key")
        assert len(system) == 0
        assert [r.question_id for r in system.get_rejected()] == ["q1"]

    def test_len_holds_lock(self):
        """Queue size is read under the same lock as queue updates."""
        system = QualityReviewSystem()
        system.add_to_review_queue("q1", make_question(), make_result(0.4))
        system._lock = MagicMock()

        assert len(system) == 1
        system._lock.__enter__.assert_called_once()
        system._lock.__exit__.assert_called_once()

    def test_reject_unknown(self):
        assert not QualityReviewSystem().reject_question("missing")

    def test_review_request_to_dict(self):
        system = QualityReviewSystem()
        request = system.add_to_review_queue("q1", make_question(), make_result(0.4))
        data = request.to_dict()
        assert data["question_id"] == "q1"
        assert data["priority"] == "high"
        assert data["timestamp"]
        assert data["question"]["correct_answer"] == "A"


class TestReviewGeneratedQuestions:
    def test_only_failures_are_queued(self):
        good = make_question()
        bad = make_question(teks_standard="5.4A")
        results = review_generated_questions([good, bad])

        assert [r.is_valid for r in results] == [True, False]
        queue = get_review_system().get_review_queue()
        assert [r.question_id for r in queue] == ["generated-1"]

    def test_stored_id_is_used(self):
        bad = make_question(teks_standard="5.4A", question_id=42)
        review_generated_questions([bad])
        assert get_review_system().get_review_queue()[0].question_id == "42"
