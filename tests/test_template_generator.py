"""Tests for the efficient template generator."""

import random
import re

import pytest

from staarkids.core.template_generator import (
    EFFICIENT_QUESTION_TEMPLATES,
    QuestionTemplate,
    TemplateError,
    build_from_template,
    distinct_distractors,
    format_decimal,
    generate_efficient_question,
    substitute,
)


def numbers(text):
    return [int(n) for n in re.findall(r"\d+", text)]


class TestHelpers:
    """Tests for template helpers."""

    def test_substitute_leaves_unknown_names(self):
        assert substitute("{a} and {b}", {"a": 1}) == "1 and {b}"

    def test_distinct_distractors_replaces_collisions(self):
        """Duplicates and the answer itself are swapped for nearby values."""
        result = distinct_distractors(10, [10, 11, 11])
        assert len(set(result)) == 3
        assert 10 not in result
        assert all(v >= 1 for v in result)

    def test_distinct_distractors_respects_minimum(self):
        result = distinct_distractors(1, [0, -3, 1])
        assert all(v >= 1 for v in result)
        assert 1 not in result
        assert len(set(result)) == 3

    def test_format_decimal(self):
        assert format_decimal(0.5) == "0.5"
        assert format_decimal(0.375) == "0.375"
        assert format_decimal(2.0) == "2"


class TestGenerateEfficientQuestion:
    """Tests for generate_efficient_question."""

    @pytest.mark.parametrize("grade", [3, 4, 5])
    def test_math_questions_are_well_formed(self, grade):
        """Four distinct lettered choices with a valid key."""
        rng = random.Random(grade)
        for _ in range(15):
            question = generate_efficient_question(grade, "math", rng=rng)
            letters = [c.id for c in question.answer_choices]
            texts = [c.text for c in question.answer_choices]
            assert letters == ["A", "B", "C", "D"]
            assert len(set(texts)) == 4
            assert question.correct_answer in letters
            assert question.teks_standard.startswith(f"{grade}.")
            assert question.method == "efficient"
            assert question.category

    def test_division_answer_is_correct(self):
        """The keyed choice is total ÷ groups."""
        template = EFFICIENT_QUESTION_TEMPLATES["math"][3]["division"]
        rng = random.Random(11)
        for _ in range(10):
            question = build_from_template(template, 3, "math", rng)
            total, groups = numbers(question.question_text)[:2]
            assert numbers(question.correct_text)[0] == total // groups
            assert total % groups == 0

    def test_area_answer_is_correct(self):
        template = EFFICIENT_QUESTION_TEMPLATES["math"][3]["area"]
        question = build_from_template(template, 3, "math", random.Random(2))
        length, width = numbers(question.question_text)[:2]
        assert question.correct_text == f"{length * width} square feet"

    def test_multiplication_answer_is_correct(self):
        template = EFFICIENT_QUESTION_TEMPLATES["math"][4]["multiplication"]
        question = build_from_template(template, 4, "math", random.Random(8))
        teams, players = numbers(question.question_text)[:2]
        assert question.correct_text == f"{teams * players} players"

    def test_fraction_decimal_answer(self):
        template = EFFICIENT_QUESTION_TEMPLATES["math"][5]["fractions"]
        question = build_from_template(template, 5, "math", random.Random(1))
        numerator, denominator = numbers(question.question_text)[:2]
        assert float(question.correct_text) == pytest.approx(numerator / denominator)

    def test_math_questions_carry_diagram(self):
        question = generate_efficient_question(4, "math", rng=random.Random(3))
        assert question.has_image
        assert question.svg_content.startswith("<svg")
        assert question.image_description

    def test_include_visual_false(self):
        question = generate_efficient_question(4, "math", rng=random.Random(3), include_visual=False)
        assert not question.has_image
        assert question.svg_content is None

    def test_reading_template(self):
        question = generate_efficient_question(3, "reading", rng=random.Random(4))
        assert question.subject == "reading"
        assert question.teks_standard == "3.8B"
        assert not question.has_image
        assert question.correct_text

    def test_category_preference(self):
        """A category with a matching template picks that template."""
        rng = random.Random(9)
        for _ in range(10):
            question = generate_efficient_question(3, "math", "Geometry and Measurement", rng)
            assert question.teks_standard == "3.6C"
            assert question.category == "Geometry and Measurement"

    def test_same_seed_same_question(self):
        first = generate_efficient_question(3, "math", rng=random.Random(77))
        second = generate_efficient_question(3, "math", rng=random.Random(77))
        assert first.to_dict() == second.to_dict()

    def test_fallback_without_templates(self):
        """Reading grades without templates get the fixed question."""
        question = generate_efficient_question(5, "reading", rng=random.Random(0))
        assert question.method == "fallback"
        assert question.teks_standard == "5.6B"
        assert question.correct_text == "The most important message"

    def test_math_fallback(self):
        question = generate_efficient_question(6, "math", rng=random.Random(0))
        assert question.method == "fallback"
        assert question.correct_text == "14"


class TestBuildFromTemplate:
    """Tests for build_from_template error handling."""

    def test_duplicate_choices_raise_template_error(self):
        template = QuestionTemplate(
            question_text="What is {x} + 0?",
            choices=["{x}", "{x}", "1", "2"],
            explanation="",
            teks_standard="3.4A",
            variables={"x": lambda rng, values: 5},
        )
        with pytest.raises(TemplateError):
            build_from_template(template, 3, "math", random.Random(0))
