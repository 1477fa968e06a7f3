# =============================================================================
# API Tests — Health, Review and Streaming Endpoints
# =============================================================================
#
# Uses FastAPI's TestClient with dependency_overrides, so the endpoints run
# against StubClient instead of the real providers.
# =============================================================================

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from stubs import StubClient, full_script

from mcq_review.config import Settings, get_settings
from mcq_review.main import app
from mcq_review.services.inference import get_inference_client

_QUESTION = {
    "code": "E2-104",
    "chapter": "Ch 3",
    "unit": "Partnerships",
    "question": "Which form reports a partner's share of partnership income?",
    "optionA": "Form 1065",
    "optionB": "Schedule K-1",
    "optionC": "Form 1120-S",
    "optionD": "Schedule C",
    "rightOption": "B",
    "aiAnswer": "B",
    "finalAnswer": "B",
    "finalExplanation": "Schedule K-1 reports each partner's distributive share.",
    "difficulty": "Easy",
}


def _events(response) -> list[dict]:
    return [
        json.loads(line[len("data: "):])
        for line in response.text.splitlines()
        if line.startswith("data: ")
    ]


@pytest.fixture
def stub():
    client = StubClient(full_script())
    app.dependency_overrides[get_inference_client] = lambda: client
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def http():
    return TestClient(app)


# ---------------------------------------------------------------------------
# Test: GET /health
# ---------------------------------------------------------------------------


class TestHealth:
    """Tests for the health endpoint."""

    def test_reports_provider_credentials(self, http):
        app.dependency_overrides[get_settings] = lambda: Settings(
            groq_api_key="gsk_real", openrouter_api_key="your_openrouter_key",
        )
        try:
            response = http.get("/health")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["providers"] == {"groq": True, "openrouter": False}


# ---------------------------------------------------------------------------
# Test: POST /review
# ---------------------------------------------------------------------------


class TestReview:
    """Tests for single-question review."""

    def test_returns_review_result(self, http, stub):
        response = http.post("/review", json={"question": _QUESTION})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "done"
        assert body["finalAnswer"] == "B"
        assert body["needsHuman"] is False
        assert body["querySummary"] == "Kept as is — all checks passed"
        assert body["answerVerification"]["verdict"] == "both_correct"
        assert body["memoryAid"]["type"] == "association"
        assert body["conflictResolution"] is None

    def test_empty_question_text_rejected(self, http, stub):
        response = http.post("/review", json={"question": {**_QUESTION, "question": ""}})
        assert response.status_code == 422

    def test_missing_question_rejected(self, http, stub):
        assert http.post("/review", json={}).status_code == 422


class TestReviewStream:
    """Tests for the streamed single-question review."""

    def test_event_sequence(self, http, stub):
        response = http.post("/review/stream", json={"question": _QUESTION})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        events = _events(response)
        types = [e["type"] for e in events]
        assert types[-2:] == ["result", "done"]
        assert set(types[:-2]) == {"log"}
        assert events[0]["message"].startswith("🎯 Orchestrator")

    def test_streamed_lines_match_result_log(self, http, stub):
        events = _events(http.post("/review/stream", json={"question": _QUESTION}))

        streamed = [e["message"] for e in events if e["type"] == "log"]
        result = next(e["result"] for e in events if e["type"] == "result")
        assert streamed == result["log"]


# ---------------------------------------------------------------------------
# Test: POST /review-all
# ---------------------------------------------------------------------------


class TestReviewAll:
    """Tests for batch review over SSE."""

    def test_empty_batch_rejected(self, http, stub):
        response = http.post("/review-all", json={"questions": []})
        assert response.status_code == 400

    def test_batch_events(self, http, stub):
        questions = [
            {**_QUESTION, "code": "Q-0"},
            {**_QUESTION, "code": "Q-1", "aiAnswer": "C"},
        ]
        with patch("mcq_review.agents.pipeline.settings.batch_pause_seconds", 0):
            response = http.post("/review-all", json={"questions": questions})

        assert response.status_code == 200
        events = _events(response)
        types = [e["type"] for e in events]

        assert types[0] == "start"
        assert events[0]["total"] == 2
        assert types[-1] == "complete"
        assert types.count("progress") == 2
        assert types.count("question-done") == 2

        progress = [e for e in events if e["type"] == "progress"]
        assert [p["code"] for p in progress] == ["Q-0", "Q-1"]

        complete = events[-1]
        assert [r["index"] for r in complete["results"]] == [0, 1]
        assert [r["code"] for r in complete["results"]] == ["Q-0", "Q-1"]
        assert complete["results"][1]["hasConflict"] is True

    def test_questions_never_overlap(self, http, stub):
        questions = [{**_QUESTION, "code": f"Q-{i}"} for i in range(2)]
        with patch("mcq_review.agents.pipeline.settings.batch_pause_seconds", 0):
            events = _events(http.post("/review-all", json={"questions": questions}))

        # Every event of question 0 arrives before question 1 starts
        second_start = next(
            i for i, e in enumerate(events)
            if e["type"] == "progress" and e["index"] == 1
        )
        assert all(
            e.get("index") != 0
            for e in events[second_start:]
            if e["type"] in ("log", "question-done")
        )
