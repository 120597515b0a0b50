"""Tests for attaching diagrams to questions."""

import xml.etree.ElementTree as ET

from staarkids.core.question import AnswerChoice, Question
from staarkids.core.visual_generator import (
    attach_visual,
    extract_dimensions,
    extract_numbers,
    generate_question_visual,
)


class TestExtraction:
    """Tests for number and dimension extraction."""

    def test_extract_numbers_strips_commas(self):
        assert extract_numbers("The farm had 1,250 cows and 3.5 acres.") == [1250.0, 3.5]

    def test_extract_dimensions_normalizes_units(self):
        dims = extract_dimensions("A board is 4 foot long and 2 feet wide.")
        assert dims == [(4.0, "feet"), (2.0, "feet")]


class TestGenerateQuestionVisual:
    """Tests for generate_question_visual."""

    def test_area_uses_question_dimensions(self):
        result = generate_question_visual(
            "A rectangular garden has a length of 15 feet and a width of 6 feet. What is the area?",
            "math",
            3,
        )
        assert result.has_image
        assert result.visual_type == "area"
        assert "15 feet by 6 feet" in result.image_description
        assert "90 square feet" in result.svg_content
        ET.fromstring(result.svg_content)

    def test_division_reads_groups(self):
        result = generate_question_visual(
            "Maria has 36 stickers. She puts them into 4 equal albums. How many are in each album?",
            "math",
            3,
        )
        assert result.visual_type == "division"
        assert "36" in result.image_description
        assert "4 groups" in result.image_description

    def test_time_reads_clock(self):
        result = generate_question_visual("The clock shows 7:45. What time is it?", "math", 3)
        assert result.visual_type == "time"
        assert result.image_description == "Clock face showing 7:45"

    def test_money_totals_coins(self):
        result = generate_question_visual("Ana has $1.35 in coins.", "math", 3)
        assert result.visual_type == "money"
        assert result.image_description == "Coins showing a total of $1.35"

    def test_defaults_when_nothing_extractable(self):
        """A category with no numbers still gets a default diagram."""
        result = generate_question_visual("What time does the clock show?", "math", 3)
        assert result.has_image
        assert result.image_description == "Clock face showing 3:00"

    def test_forced_visual_type(self):
        result = generate_question_visual("Look at the picture.", "math", 4, visual_type="geometry")
        assert result.visual_type == "geometry"
        assert result.svg_content

    def test_reading_has_no_image(self):
        result = generate_question_visual("What is the area?", "reading", 3)
        assert not result.has_image
        assert result.svg_content is None

    def test_no_visual_needed(self):
        result = generate_question_visual("What is 8 + 6?", "math", 3)
        assert not result.has_image


class TestAttachVisual:
    """Tests for attach_visual."""

    def _question(self, text, subject="math"):
        return Question(
            grade=3,
            subject=subject,
            teks_standard="3.6C",
            question_text=text,
            answer_choices=[AnswerChoice(id=letter, text=value) for letter, value in zip("ABCD", "1234")],
            correct_answer="A",
        )

    def test_fills_fields(self):
        question = attach_visual(self._question("What is the area of a 4 feet by 3 feet rug?"))
        assert question.has_image
        assert question.svg_content.startswith("<svg")
        assert question.image_description

    def test_reading_is_cleared(self):
        question = self._question("What is the main idea?", subject="reading")
        question.has_image = True
        question.svg_content = "<svg></svg>"
        attach_visual(question)
        assert not question.has_image
        assert question.svg_content is None
