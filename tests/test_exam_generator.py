"""Tests for mock exam assembly and scoring."""

import random
from collections import Counter

import pytest

from staarkids.core.exam_generator import (
    ExamGenerationError,
    MockExam,
    allocate_category_counts,
    build_mock_exam,
    exam_name,
    generate_category_question,
    score_exam,
)
from staarkids.core.question import AnswerChoice, Question
from staarkids.core.teks import STAAR_CATEGORY_DISTRIBUTIONS, STAAR_QUESTION_COUNTS


def make_exam(keys):
    questions = [
        Question(
            grade=3,
            subject="math",
            teks_standard="3.4A",
            question_text=f"Question {i}",
            answer_choices=[AnswerChoice(id=letter, text=f"{letter}{i}") for letter in "ABCD"],
            correct_answer=key,
            question_id=100 + i,
        )
        for i, key in enumerate(keys)
    ]
    return MockExam(
        name="Test",
        grade=3,
        subject="math",
        total_questions=len(questions),
        time_limit=240,
        questions=questions,
        exam_id=9,
    )


class TestAllocateCategoryCounts:
    """Tests for category allocation."""

    def test_sums_to_total_for_every_blueprint(self):
        for grade, by_subject in STAAR_CATEGORY_DISTRIBUTIONS.items():
            for subject, distribution in by_subject.items():
                total = STAAR_QUESTION_COUNTS[grade][subject]
                counts = allocate_category_counts(distribution, total)
                assert sum(counts.values()) == total
                assert set(counts) == set(distribution)

    def test_remainder_goes_to_heaviest(self):
        """Grade 3 math: 16.2/12.6/7.2 floors to 16/12/7, one left over."""
        counts = allocate_category_counts(STAAR_CATEGORY_DISTRIBUTIONS[3]["math"], 36)
        assert counts == {
            "Number and Operations": 17,
            "Geometry and Measurement": 12,
            "Data Analysis": 7,
        }

    def test_reading_grade_five(self):
        counts = allocate_category_counts(STAAR_CATEGORY_DISTRIBUTIONS[5]["reading"], 46)
        assert counts["Reading Comprehension"] == 19
        assert sum(counts.values()) == 46


class TestBuildMockExam:
    """Tests for build_mock_exam."""

    def test_exam_name(self):
        assert exam_name(4, "reading", 2) == "STAAR Grade 4 Reading Practice Test 2"
        assert exam_name(3, "math", 1) == "STAAR Grade 3 Mathematics Practice Test 1"

    @pytest.mark.parametrize("grade,subject", [(3, "math"), (4, "reading")])
    def test_full_length_exam(self, grade, subject):
        exam = build_mock_exam(grade, subject, 1, random.Random(grade))

        assert exam.name == exam_name(grade, subject, 1)
        assert exam.total_questions == STAAR_QUESTION_COUNTS[grade][subject]
        assert len(exam.questions) == exam.total_questions
        assert exam.time_limit == (240 if subject == "math" else 180)
        assert all(q.grade == grade and q.subject == subject for q in exam.questions)

    def test_category_counts_follow_blueprint(self):
        exam = build_mock_exam(5, "math", 1, random.Random(5))
        counts = Counter(q.category for q in exam.questions)
        expected = allocate_category_counts(STAAR_CATEGORY_DISTRIBUTIONS[5]["math"], 36)
        assert dict(counts) == expected

    def test_invalid_grade(self):
        with pytest.raises(ExamGenerationError):
            build_mock_exam(6, "math")

    def test_invalid_subject(self):
        with pytest.raises(ExamGenerationError):
            build_mock_exam(3, "science")

    def test_to_dict_without_questions(self):
        exam = build_mock_exam(3, "reading", 2, random.Random(1))
        data = exam.to_dict(include_questions=False)
        assert "questions" not in data
        assert data["total_questions"] == 40


class TestGenerateCategoryQuestion:
    @pytest.mark.parametrize(
        "grade,category",
        [(3, "Data Analysis"), (4, "Algebraic Reasoning"), (5, "Geometry and Measurement")],
    )
    def test_category_is_honored(self, grade, category):
        rng = random.Random(grade)
        for _ in range(5):
            question = generate_category_question(grade, "math", category, rng)
            assert question.category == category


class TestScoreExam:
    """Tests for score_exam."""

    def test_all_correct(self):
        exam = make_exam(["A", "B", "C", "D"])
        score = score_exam(exam, {100: "A", 101: "B", 102: "C", 103: "D"})
        assert score.correct_answers == 4
        assert score.score == 100

    def test_unanswered_counts_as_wrong(self):
        exam = make_exam(["A", "B", "C"])
        score = score_exam(exam, {100: "A"})
        assert score.correct_answers == 1
        assert score.score == 33
        assert score.results[1].selected_answer is None
        assert not score.results[1].is_correct

    def test_answers_are_normalized(self):
        exam = make_exam(["B"])
        score = score_exam(exam, {100: " b "})
        assert score.results[0].is_correct

    def test_empty_exam(self):
        score = score_exam(make_exam([]), {})
        assert score.score == 0
        assert score.to_dict()["results"] == []

    def test_to_dict(self):
        data = score_exam(make_exam(["A", "C"]), {100: "A", 101: "B"}).to_dict()
        assert data["exam_id"] == 9
        assert data["score"] == 50
        assert data["results"][1] == {
            "question_id": 101,
            "selected_answer": "B",
            "correct_answer": "C",
            "is_correct": False,
        }
