"""Tests for the mock exam and practice progress endpoints."""

import pytest

from staarkids.core.exam_generator import MockExam
from staarkids.core.question import AnswerChoice, Question
from staarkids.db.exams_repository import insert_exam
from staarkids.db.questions_repository import insert_question


def make_question(index, key="A", teks="3.4A"):
    return Question(
        grade=3,
        subject="math",
        teks_standard=teks,
        question_text=f"What is {index} + 1?",
        answer_choices=[AnswerChoice(id=letter, text=f"{letter}{index}") for letter in "ABCD"],
        correct_answer=key,
        category="Number and Operations",
    )


@pytest.fixture
def exam(client):
    exam = MockExam(
        name="STAAR Grade 3 Mathematics Practice Test 1",
        grade=3,
        subject="math",
        total_questions=3,
        time_limit=240,
        questions=[make_question(1, "A"), make_question(2, "B"), make_question(3, "C")],
    )
    insert_exam(exam)
    return exam


class TestExams:
    """Tests for the mock exam endpoints."""

    def test_list(self, client, exam):
        data = client.get("/api/exams/3").json()
        assert data["count"] == 1
        assert data["exams"][0]["name"] == exam.name
        assert "questions" not in data["exams"][0]

    def test_list_other_grade_empty(self, client, exam):
        assert client.get("/api/exams/4").json()["count"] == 0

    def test_list_invalid_grade(self, client):
        assert client.get("/api/exams/7").status_code == 400

    def test_details(self, client, exam):
        data = client.get(f"/api/exams/details/{exam.exam_id}").json()
        assert [q["question_text"] for q in data["questions"]] == [
            "What is 1 + 1?",
            "What is 2 + 1?",
            "What is 3 + 1?",
        ]

    def test_details_missing(self, client):
        assert client.get("/api/exams/details/99").status_code == 404

    def test_submit(self, client, exam):
        ids = [q.question_id for q in exam.questions]
        response = client.post(
            f"/api/exams/{exam.exam_id}/submit",
            json={"answers": {str(ids[0]): "A", str(ids[1]): "d"}, "time_spent": 600},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["correct_answers"] == 1
        assert data["score"] == 33
        assert data["time_spent"] == 600
        assert data["results"][2]["selected_answer"] is None

    def test_submit_missing_exam(self, client):
        assert client.post("/api/exams/99/submit", json={"answers": {}}).status_code == 404


class TestPracticeAttempt:
    """Tests for POST /api/practice/attempt."""

    def test_explicit_result(self, client):
        response = client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-1", "grade": 3, "subject": "math", "is_correct": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["star_power_earned"] == 60
        assert data["attempt_id"] >= 1

    def test_hints_reduce_star_power(self, client):
        data = client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-1", "grade": 4, "subject": "reading",
                  "is_correct": True, "hints_used": 3},
        ).json()
        assert data["star_power_earned"] == 30

    def test_graded_against_stored_question(self, client):
        question = make_question(5, key="C")
        insert_question(question)

        right = client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-1", "question_id": question.question_id, "selected_answer": "c"},
        ).json()
        wrong = client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-1", "question_id": question.question_id, "selected_answer": "B"},
        ).json()

        assert right["is_correct"] is True
        assert wrong["is_correct"] is False
        assert wrong["star_power_earned"] == 0

    def test_skipped(self, client):
        data = client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-1", "grade": 3, "subject": "math", "skipped": True},
        ).json()
        assert data["is_correct"] is False
        assert data["star_power_earned"] == 0

    def test_unknown_question(self, client):
        response = client.post(
            "/api/practice/attempt", json={"user_id": "kid-1", "question_id": 404, "is_correct": True}
        )
        assert response.status_code == 404

    def test_missing_grade(self, client):
        response = client.post("/api/practice/attempt", json={"user_id": "kid-1", "is_correct": True})
        assert response.status_code == 400

    def test_missing_result(self, client):
        response = client.post(
            "/api/practice/attempt", json={"user_id": "kid-1", "grade": 3, "subject": "math"}
        )
        assert response.status_code == 400


class TestAccuracyAndStarPower:
    """Tests for the accuracy and StarPower summaries."""

    def attempt(self, client, is_correct, teks="3.4A", **extra):
        client.post(
            "/api/practice/attempt",
            json={"user_id": "kid-2", "grade": 3, "subject": "math",
                  "teks_standard": teks, "is_correct": is_correct, **extra},
        )

    def test_overall(self, client):
        self.attempt(client, True)
        self.attempt(client, False)
        data = client.get("/api/accuracy/kid-2").json()
        assert data["total_attempts"] == 2
        assert data["overall_accuracy"] == 50
        assert data["math_accuracy"] == 50
        assert data["reading_accuracy"] == 0
        assert data["grade_breakdown"][0]["grade"] == 3

    def test_module(self, client):
        self.attempt(client, True, teks="3.4A")
        self.attempt(client, True, teks="3.6C")
        self.attempt(client, False, teks="3.6C")
        data = client.get("/api/accuracy/kid-2/3/math").json()
        assert data["overall_accuracy"] == 67
        stats = {s["teks_standard"]: s["accuracy"] for s in data["teks_standard_stats"]}
        assert stats == {"3.4A": 100, "3.6C": 50}

    def test_module_invalid(self, client):
        assert client.get("/api/accuracy/kid-2/9/math").status_code == 400

    def test_star_power(self, client):
        self.attempt(client, True)
        self.attempt(client, True, hints_used=1)
        data = client.get("/api/star-power/kid-2").json()
        assert data == {
            "daily_star_power": 110,
            "weekly_star_power": 110,
            "all_time_star_power": 110,
        }

    def test_new_user(self, client):
        data = client.get("/api/star-power/nobody").json()
        assert data["all_time_star_power"] == 0
