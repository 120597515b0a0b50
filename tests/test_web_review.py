"""Tests for the quality review and model endpoints."""

import pytest


def payload(**overrides):
    data = {
        "grade": 3,
        "subject": "math",
        "teks_standard": "3.4A",
        "question_text": "Sam has 12 apples and buys 5 more. How many apples does he have?",
        "answer_choices": [
            {"id": "A", "text": "17 apples"},
            {"id": "B", "text": "7 apples"},
            {"id": "C", "text": "15 apples"},
            {"id": "D", "text": "19 apples"},
        ],
        "correct_answer": "A",
        "category": "Algebraic Reasoning",
    }
    data.update(overrides)
    return data


class TestValidate:
    """Tests for POST /api/quality/validate."""

    def test_valid_question(self, client):
        response = client.post("/api/quality/validate", json=payload())
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["score"] == 1.0
        assert data["queued"] is False

    def test_invalid_not_queued_by_default(self, client):
        data = client.post("/api/quality/validate", json=payload(teks_standard="5.4A")).json()
        assert data["is_valid"] is False
        assert data["queued"] is False
        assert client.get("/api/quality/review-queue").json()["count"] == 0

    def test_enqueue_failing_question(self, client):
        response = client.post(
            "/api/quality/validate",
            params={"enqueue": "true"},
            json=payload(teks_standard="5.4A", question_id=77),
        )
        data = response.json()
        assert data["queued"] is True
        assert data["priority"] in ("high", "medium", "low")

        queue = client.get("/api/quality/review-queue").json()
        assert queue["count"] == 1
        assert queue["items"][0]["question_id"] == "77"

    def test_anonymous_submission_gets_id(self, client):
        client.post(
            "/api/quality/validate", params={"enqueue": "true"}, json=payload(teks_standard="")
        )
        item = client.get("/api/quality/review-queue").json()["items"][0]
        assert item["question_id"].startswith("submitted-")

    def test_bad_choice_letter(self, client):
        bad = payload(answer_choices=[{"id": "E", "text": "x"}])
        assert client.post("/api/quality/validate", json=bad).status_code == 422


class TestReviewActions:
    """Tests for approve and reject."""

    @pytest.fixture
    def queued(self, client):
        client.post(
            "/api/quality/validate",
            params={"enqueue": "true"},
            json=payload(teks_standard="5.4A", question_id=5),
        )
        return "5"

    def test_approve(self, client, queued):
        response = client.post(f"/api/quality/review-queue/{queued}/approve")
        assert response.json() == {"question_id": "5", "status": "approved"}
        assert client.get("/api/quality/review-queue").json()["count"] == 0

    def test_reject_with_reason(self, client, queued):
        response = client.post(
            f"/api/quality/review-queue/{queued}/reject", json={"reason": "wrong grade"}
        )
        assert response.json()["status"] == "rejected"

    def test_reject_without_body(self, client, queued):
        assert client.post(f"/api/quality/review-queue/{queued}/reject").status_code == 200

    def test_unknown_id(self, client):
        assert client.post("/api/quality/review-queue/nope/approve").status_code == 404
        assert client.post("/api/quality/review-queue/nope/reject").status_code == 404


class TestModels:
    """Tests for the simulated model endpoints."""

    def test_stats(self, client):
        data = client.get("/api/models/stats").json()
        assert data["total_models"] == 12
        assert data["active_ab_tests"] == 6
        assert data["system_health"] == "Excellent"

    def test_world_class_generate(self, client):
        response = client.post(
            "/api/models/world-class/generate",
            json={"grade": 4, "subject": "math", "difficulty": "hard"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "world-class"
        assert data["difficulty"] == "hard"
        assert data["ab_test_group"] in ("A", "B")
        assert 0.92 <= data["confidence"] <= 0.98

    def test_world_class_invalid(self, client):
        response = client.post(
            "/api/models/world-class/generate", json={"grade": 6, "subject": "math"}
        )
        assert response.status_code == 400

    def test_optimize_without_history(self, client):
        assert client.post("/api/models/optimize").json() == {"optimized": [], "count": 0}
