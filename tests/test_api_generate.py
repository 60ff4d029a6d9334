"""
API tests for POST /api/generate-quiz
Gemini and Wikipedia are mocked at the service instances.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from app.services.gemini_service import ModelResponse, gemini_service
from app.services.retrieval_service import PageInfo, wikipedia_service
from app.utils.rate_limiter import rate_limiter


def _model_text(count=5):
    return json.dumps({
        "chosenTitle": "Photosynthesis",
        "questions": [
            {
                "question": f"Photosynthesis question {i + 1}?",
                "options": ["Option A", "Option B", "Option C", "Option D"],
                "answerIndex": (i + 1) % 4,
                "explanation": "Because.",
            }
            for i in range(count)
        ],
    })


@pytest.fixture
def mock_model():
    mock = AsyncMock(return_value=ModelResponse(
        text=_model_text(),
        usage={"prompt": 120, "completion": 480, "total": 600},
    ))
    with patch.object(gemini_service, "generate_text_json", mock):
        yield mock


@pytest.fixture
def mock_wikipedia():
    page_info = AsyncMock(return_value=PageInfo(title="Photosynthesis", extract="Plants convert light.", type="standard"))
    summary = AsyncMock(return_value=None)
    with patch.object(wikipedia_service, "fetch_page_info", page_info), \
            patch.object(wikipedia_service, "fetch_summary", summary):
        yield page_info


class TestGenerateQuiz:

    def test_generates_quiz(self, client_no_db, mock_model, mock_wikipedia):
        response = client_no_db.post("/api/generate-quiz", json={"topic": "  Photosynthesis  ", "difficulty": "Easy"})

        assert response.status_code == 200
        data = response.json()
        assert data["topic"] == "Photosynthesis"
        assert data["difficulty"] == "Easy"
        assert len(data["questions"]) == 5
        assert data["questions"][0]["answerIndex"] == 1
        assert data["_cacheHit"] is False
        assert data["_ambiguous"] is False
        assert data["_assumedTitle"] == "Photosynthesis"
        assert data["_usage"]["total"] == 600

        mock_wikipedia.assert_awaited_once_with("Photosynthesis")

    def test_second_request_is_cache_hit(self, client_no_db, mock_model, mock_wikipedia):
        client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})
        response = client_no_db.post("/api/generate-quiz", json={"topic": "photosynthesis"})

        assert response.status_code == 200
        assert response.json()["_cacheHit"] is True
        assert mock_model.await_count == 1

    def test_force_fresh_bypasses_cache(self, client_no_db, mock_model, mock_wikipedia):
        client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})
        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis", "forceFresh": True})

        assert response.json()["_cacheHit"] is False
        assert mock_model.await_count == 2

    def test_retrieval_can_be_disabled(self, client_no_db, mock_model, mock_wikipedia):
        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis", "useRetrieval": False})

        assert response.status_code == 200
        mock_wikipedia.assert_not_awaited()

    @pytest.mark.parametrize("body", [
        {},
        {"topic": "a"},
        {"topic": "Photosynthesis", "difficulty": "Extreme"},
        {"topic": 42},
    ])
    def test_invalid_body(self, client_no_db, mock_model, body):
        response = client_no_db.post("/api/generate-quiz", json=body)

        assert response.status_code == 400
        assert response.json()["ok"] is False
        mock_model.assert_not_awaited()

    def test_topic_empty_after_sanitizing(self, client_no_db, mock_model):
        response = client_no_db.post("/api/generate-quiz", json={"topic": "<>\x00<"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "Please provide a more specific topic."}
        mock_model.assert_not_awaited()

    def test_unparseable_model_output(self, client_no_db, mock_model, mock_wikipedia):
        mock_model.return_value = ModelResponse(text="Sorry, I can't do that.")

        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})

        assert response.status_code == 502
        assert response.json()["ok"] is False

    def test_falsy_model_output_is_unparseable(self, client_no_db, mock_model, mock_wikipedia):
        mock_model.return_value = ModelResponse(text="false")

        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})

        assert response.status_code == 502

    def test_no_valid_questions(self, client_no_db, mock_model, mock_wikipedia):
        mock_model.return_value = ModelResponse(text=json.dumps({"questions": [{"question": "Only text?"}]}))

        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})

        assert response.status_code == 400

    def test_missing_model_credential(self, client_no_db):
        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis", "useRetrieval": False})

        assert response.status_code == 503
        assert "GEMINI_API_KEY" in response.json()["error"]

    def test_rate_limited_after_twenty_requests(self, client_no_db, mock_model, mock_wikipedia):
        for _ in range(20):
            assert client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"}).status_code == 200

        response = client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})

        assert response.status_code == 429
        assert response.json()["ok"] is False
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_invalid_bodies_count_against_the_limit(self, client_no_db, mock_model):
        statuses = [
            client_no_db.post("/api/generate-quiz", json={"topic": "a"}).status_code
            for _ in range(21)
        ]

        assert statuses[:20] == [400] * 20
        assert statuses[20] == 429
        assert rate_limiter.counters
        mock_model.assert_not_awaited()

    def test_rate_limit_is_per_client(self, client_no_db, mock_model, mock_wikipedia):
        for _ in range(21):
            client_no_db.post("/api/generate-quiz", json={"topic": "Photosynthesis"})

        response = client_no_db.post(
            "/api/generate-quiz",
            json={"topic": "Photosynthesis"},
            headers={"X-Forwarded-For": "203.0.113.9"},
        )

        assert response.status_code == 200
