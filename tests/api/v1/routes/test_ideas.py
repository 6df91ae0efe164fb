import time

import pytest
from fastapi.testclient import TestClient
from fastapi import FastAPI
from unittest.mock import patch

from ideaboard.api.v1.routes.ideas import router, build_board, build_base_response
from ideaboard.api.v1.models.request import AnalysisOptions, IdeaInput
from ideaboard.api.v1.models.response import AnalysisResponse
from ideaboard.core.config import settings
from ideaboard.services.types import AnalysisResult

# Create a test app with the router
app = FastAPI()
app.include_router(router)
client = TestClient(app)

ANALYZE_ENDPOINT = "/analyze"
SUBMIT_ENDPOINT = "/ideas"

@pytest.fixture
def mock_ideas():
    return [
        {"id": "i1", "text": "daily streak rewards", "author": "Ana"},
        {"id": "i2", "text": "daily streak bonus program", "author": ""},
        {"id": "i3", "text": "redesign the onboarding flow completely"},
    ]

def test_analyze_success(mock_ideas):
    response = client.post(
        ANALYZE_ENDPOINT,
        json={"problem_statement": "", "ideas": mock_ideas}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["novelty_by_id"] == {"i1": 0, "i2": 0, "i3": 100}
    assert [cluster["idea_ids"] for cluster in data["clusters"]] == [["i1", "i2"], ["i3"]]
    assert data["clusters"][0]["primary_name"] == "Daily · Streak · Rewards"
    assert data["stats"]["max_novelty"] == 100
    assert [idea["id"] for idea in data["top_ideas"]] == ["i3", "i1", "i2"]
    assert data["novelty_details"] is None
    assert data["pairwise_similarity_matrix"] is None

def test_analyze_ranked_ideas(mock_ideas):
    response = client.post(
        ANALYZE_ENDPOINT,
        json={"problem_statement": "", "ideas": mock_ideas}
    )
    ranked = response.json()["ranked_ideas"]

    assert [idea["id"] for idea in ranked] == ["i3", "i1", "i2"]
    assert ranked[0]["badge"] == {"level": "high", "label": "Bold"}
    assert ranked[0]["cluster_id"] == "c2"
    assert ranked[1]["author"] == "Ana"
    assert ranked[2]["author"] == "Anonymous"

def test_analyze_empty_request():
    response = client.post(ANALYZE_ENDPOINT, json={"problem_statement": "", "ideas": []})

    assert response.status_code == 200
    data = response.json()
    assert data["clusters"] == []
    assert data["novelty_by_id"] == {}
    assert data["stats"] == {"avg_novelty": None, "max_novelty": None}
    assert data["top_ideas"] == []
    assert data["ranked_ideas"] == []

def test_analyze_with_options(mock_ideas):
    response = client.post(
        ANALYZE_ENDPOINT,
        json={
            "problem_statement": "reduce churn through daily habits",
            "ideas": mock_ideas,
            "options": {"novelty_details": True, "similarity_matrix": True}
        }
    )

    assert response.status_code == 200
    data = response.json()
    assert set(data["novelty_details"]) == {"i1", "i2", "i3"}
    assert set(data["novelty_details"]["i1"]) == {"relevance", "mean_neighbor_sim", "raw_novelty", "combined"}
    assert len(data["pairwise_similarity_matrix"]) == 3

def test_analyze_generates_missing_ids():
    ideas = [
        {"text": "daily streak rewards"},
        {"id": "i2", "text": "weekly digest"},
        {"id": 7, "text": "referral program"},
    ]
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": ideas})

    assert response.status_code == 200
    assert list(response.json()["novelty_by_id"]) == ["i3", "i2", "7"]

def test_analyze_invalid_idea():
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": [{"id": "1"}]})

    assert response.status_code == 422
    assert "Field required" in str(response.content)

def test_analyze_empty_idea_text():
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": [{"id": "i1", "text": "  "}]})

    assert response.status_code == 400
    assert "must not be empty" in response.json()["detail"]

def test_analyze_duplicate_ids():
    ideas = [{"id": "i1", "text": "weekly digest"}, {"id": "i1", "text": "daily streak"}]
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": ideas})

    assert response.status_code == 400
    assert "Duplicate" in response.json()["detail"]

def test_analyze_too_many_ideas(monkeypatch):
    monkeypatch.setattr(settings, "MAX_IDEAS", 2)
    ideas = [{"text": f"idea number {n}"} for n in range(3)]
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": ideas})

    assert response.status_code == 400
    assert "at most 2 ideas" in str(response.content)

def test_analyze_too_much_text(monkeypatch):
    monkeypatch.setattr(settings, "MAX_TOTAL_BYTES", 10)
    response = client.post(ANALYZE_ENDPOINT, json={"ideas": [{"text": "a rather long idea text"}]})

    assert response.status_code == 400
    assert "bytes" in str(response.content)

def test_analyze_at_request_limits_is_fast():
    # every idea uses its own words, so the vocabulary grows with the request
    words_per_idea = settings.MAX_TOTAL_BYTES // settings.MAX_IDEAS // len("idea000term000 ")
    ideas = [
        {"id": f"i{n}", "text": " ".join(f"idea{n:03d}term{k:03d}" for k in range(words_per_idea))}
        for n in range(settings.MAX_IDEAS)
    ]
    assert sum(len(idea["text"].encode("utf-8")) for idea in ideas) <= settings.MAX_TOTAL_BYTES

    started = time.perf_counter()
    response = client.post(ANALYZE_ENDPOINT, json={"problem_statement": "", "ideas": ideas})
    elapsed = time.perf_counter() - started

    assert response.status_code == 200
    data = response.json()
    assert len(data["clusters"]) == settings.MAX_IDEAS
    assert set(data["novelty_by_id"].values()) == {50}
    assert elapsed < 10

def test_analyze_uses_engine_result(mock_ideas):
    with patch("ideaboard.services.board.compute_analysis") as mock_analysis:
        mock_analysis.return_value = AnalysisResult(novelty_by_id={"i1": 42})

        response = client.post(ANALYZE_ENDPOINT, json={"problem_statement": "churn", "ideas": mock_ideas})

        assert response.status_code == 200
        problem_statement, ideas, _ = mock_analysis.call_args.args
        assert problem_statement == "churn"
        assert [idea.id for idea in ideas] == ["i1", "i2", "i3"]
        assert response.json()["ranked_ideas"][0]["novelty"] == 42
        assert response.json()["ranked_ideas"][1]["novelty"] is None

def test_submit_idea_standout(mock_ideas):
    response = client.post(
        SUBMIT_ENDPOINT,
        json={"ideas": mock_ideas[:2], "text": "  redesign the onboarding flow completely ", "author": "Ben"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["idea"]["id"] == "i3"
    assert data["idea"]["text"] == "redesign the onboarding flow completely"
    assert data["idea"]["author"] == "Ben"
    assert data["novelty"] == 100
    assert data["is_standout"] is True
    assert data["badge"]["label"] == "Bold"
    assert data["analysis"]["novelty_by_id"]["i3"] == 100

def test_submit_idea_not_standout(mock_ideas):
    response = client.post(
        SUBMIT_ENDPOINT,
        json={"ideas": [mock_ideas[0], mock_ideas[2]], "text": "daily streak bonus program"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["idea"]["id"] == "i4"
    assert data["idea"]["author"] == "Anonymous"
    assert data["is_standout"] is False

def test_submit_first_idea():
    response = client.post(SUBMIT_ENDPOINT, json={"problem_statement": "reduce churn", "text": "daily streak rewards"})

    assert response.status_code == 200
    data = response.json()
    assert data["idea"]["id"] == "i1"
    assert data["novelty"] == 50
    assert data["analysis"]["stats"]["avg_novelty"] == 50

def test_submit_empty_idea(mock_ideas):
    response = client.post(SUBMIT_ENDPOINT, json={"ideas": mock_ideas, "text": "   "})

    assert response.status_code == 400

def test_submit_respects_standout_threshold(monkeypatch, mock_ideas):
    monkeypatch.setattr(settings, "STANDOUT_NOVELTY_THRESHOLD", 101)
    response = client.post(
        SUBMIT_ENDPOINT,
        json={"ideas": mock_ideas[:2], "text": "redesign the onboarding flow completely"}
    )

    assert response.json()["novelty"] == 100
    assert response.json()["is_standout"] is False

def test_build_base_response_options():
    board = build_board("", [IdeaInput(id="i1", text="weekly digest"), IdeaInput(id="i2", text="weekly email")])
    analysis = board.analyze(include_similarity_matrix=True)

    plain = build_base_response(board, analysis)
    assert plain["novelty_details"] is None
    assert plain["pairwise_similarity_matrix"] is None

    full = build_base_response(board, analysis, AnalysisOptions(novelty_details=True, similarity_matrix=True))
    assert set(full["novelty_details"]) == {"i1", "i2"}
    assert full["pairwise_similarity_matrix"] == analysis.pairwise_similarity
    AnalysisResponse(**full)

@pytest.mark.asyncio
async def test_submit_idea_called_directly():
    from starlette.requests import Request
    from ideaboard.api.v1.routes.ideas import submit_idea
    from ideaboard.api.v1.models.request import SubmitIdeaRequest

    request = Request({"type": "http", "headers": [], "client": ("127.0.0.1", 1234)})
    result = await submit_idea(request, SubmitIdeaRequest(problem_statement="reduce churn", text="daily streak rewards"))

    assert result.idea.id == "i1"
    assert result.novelty == 50
    assert result.analysis.clusters[0].idea_ids == ["i1"]
