"""Tests for the diverse question-type generator."""

import random

import pytest

from staarkids.core.diverse_generator import (
    QUESTION_TYPE_CATEGORIES,
    _data_analysis_visual,
    _measurement_visual,
    _number_operations,
    _word_problem_visual,
    generate_diverse_questions,
    generate_question_by_type,
    question_types_for,
    round_to_place,
)
from staarkids.core.teks import get_teks_standards
from staarkids.core.template_generator import TemplateError


class ScriptedRandom(random.Random):
    """Random source that hands out fixed randint and random() values in order."""

    def __init__(self, ints, floats=()):
        super().__init__(0)
        self.ints = list(ints)
        self.floats = list(floats)

    def randint(self, a, b):
        value = self.ints.pop(0)
        assert a <= value <= b, f"{value} outside {a}-{b}"
        return value

    def random(self):
        return self.floats.pop(0)

    def getrandbits(self, k):
        return super().getrandbits(k)


class TestQuestionTypes:
    """Tests for the type catalog."""

    def test_math_and_reading_types(self):
        math_types = question_types_for("math")
        reading_types = question_types_for("reading")
        assert "visual-geometry" in math_types
        assert "author-purpose" in reading_types
        assert not set(math_types) & set(reading_types)

    def test_every_type_has_category(self):
        for question_type in question_types_for("math") + question_types_for("reading"):
            assert question_type in QUESTION_TYPE_CATEGORIES


class TestGenerateQuestionByType:
    """Tests for generate_question_by_type."""

    @pytest.mark.parametrize("subject", ["math", "reading"])
    @pytest.mark.parametrize("grade", [3, 4, 5])
    def test_every_type_builds(self, grade, subject):
        """Each type yields four distinct choices and a TEKS in its category."""
        rng = random.Random(grade * 10)
        for question_type in question_types_for(subject):
            question = generate_question_by_type(grade, subject, question_type, rng)
            category = QUESTION_TYPE_CATEGORIES[question_type]

            assert question.category == category
            assert question.teks_standard in get_teks_standards(grade, subject, category)
            assert len({c.text for c in question.answer_choices}) == 4
            assert question.correct_text is not None
            assert question.method == "diverse"

    def test_visual_types_have_svg(self):
        question = generate_question_by_type(3, "math", "visual-geometry", random.Random(1))
        assert question.has_image
        assert question.svg_content.startswith("<svg")

    def test_reading_has_no_svg(self):
        question = generate_question_by_type(4, "reading", "comprehension-passage", random.Random(1))
        assert not question.has_image
        assert question.passage

    def test_unknown_type_raises(self):
        with pytest.raises(TemplateError):
            generate_question_by_type(3, "math", "author-purpose", random.Random(1))


class TestGenerateDiverseQuestions:
    """Tests for batch generation."""

    def test_batch_size(self):
        questions = generate_diverse_questions(4, "math", count=8, rng=random.Random(5))
        assert len(questions) == 8
        assert all(q.grade == 4 for q in questions)

    def test_batch_mixes_types(self):
        questions = generate_diverse_questions(5, "reading", count=12, rng=random.Random(6))
        assert len({q.category for q in questions}) > 1

    def test_failed_items_are_skipped(self, monkeypatch):
        """A type that raises is logged and left out."""
        from staarkids.core import diverse_generator

        def broken(grade, rng):
            raise ValueError("boom")

        monkeypatch.setitem(diverse_generator.QUESTION_TYPE_BUILDERS, "number-operations", broken)
        monkeypatch.setattr(diverse_generator, "question_types_for", lambda subject: ["number-operations"])

        assert generate_diverse_questions(3, "math", count=3, rng=random.Random(0)) == []


class TestRoundToPlace:
    @pytest.mark.parametrize(
        "value,place,expected",
        [(50, 100, 100), (150, 100, 200), (250, 100, 300), (450, 100, 500),
         (249, 100, 200), (2500, 1000, 3000), (1499, 1000, 1000)],
    )
    def test_halves_round_up(self, value, place, expected):
        assert round_to_place(value, place) == expected


class TestAnswerCorrectness:
    """Correct choices match the arithmetic of the drawn numbers."""

    @pytest.mark.parametrize(
        "grade,first,second,estimate",
        [
            (3, 250, 150, "500"),
            (3, 450, 50, "600"),
            (3, 349, 149, "400"),
            (4, 2500, 1500, "5,000"),
            (5, 12500, 10500, "24,000"),
        ],
    )
    def test_estimate_rounds_halves_up(self, grade, first, second, estimate):
        draft = _number_operations(grade, ScriptedRandom([first, second], [0.9]))
        assert draft.correct == estimate
        assert estimate not in draft.distractors

    def test_estimate_explanation_names_rounded_values(self):
        draft = _number_operations(3, ScriptedRandom([250, 150], [0.9]))
        assert "250 rounds to 300" in draft.explanation
        assert "150 rounds to 200" in draft.explanation

    @pytest.mark.parametrize("grade,first,second", [(3, 250, 150), (4, 3456, 1789)])
    def test_sum(self, grade, first, second):
        draft = _number_operations(grade, ScriptedRandom([first, second], [0.1]))
        assert draft.correct == f"{first + second:,} stamps"
        assert draft.correct not in draft.distractors

    def test_marbles_word_problem(self):
        draft = _word_problem_visual(3, ScriptedRandom([45, 12, 20], [0.9]))
        assert draft.correct == "53 marbles"
        assert "53 marbles" not in draft.distractors
        assert draft.diagram[1]["values"] == [45, 12, 20, 53]

    def test_measurement_area(self):
        draft = _measurement_visual(3, ScriptedRandom([15, 7]))
        assert draft.correct == "105 square feet"
        assert "105 square feet" not in draft.distractors
        assert draft.diagram[1] == {"length": 15, "width": 7, "unit": "feet"}

    def test_data_analysis_difference(self):
        draft = _data_analysis_visual(4, ScriptedRandom([3, 5, 8, 2]))
        assert draft.correct == "5 students"
        assert "5 students" not in draft.distractors

    def test_data_analysis_raises_smaller_bar(self):
        """When the 3-book bar is not taller it is lifted above the 1-book bar."""
        draft = _data_analysis_visual(4, ScriptedRandom([6, 5, 4, 2, 3]))
        assert draft.diagram[1]["values"] == [6, 5, 9, 2]
        assert draft.correct == "3 students"
