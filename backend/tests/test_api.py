"""Tests for the HTTP API with an in-memory store and a fake enricher."""

import pytest
from fastapi.testclient import TestClient

from benefit_insights.dependencies import get_enricher, get_store
from benefit_insights.engine.chat import NO_INSIGHT_REPLY
from benefit_insights.server import app


class FakeEnricher:
    def __init__(self):
        self.result = None
        self.error = None
        self.calls = 0

    def __call__(self, profile, draft):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def enricher():
    return FakeEnricher()


@pytest.fixture
def client(memory_store, enricher):
    app.dependency_overrides[get_store] = lambda: memory_store
    app.dependency_overrides[get_enricher] = lambda: enricher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def saved_sample(client, sample_profile):
    response = client.put("/api/profile/jordan", json=sample_profile.model_dump(mode="json"))
    assert response.status_code == 200
    return response.json()


# ============================================================================
# Health and profile
# ============================================================================


class TestHealth:
    def test_ok(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "ok"
        assert data["store"] == "memory"
        assert data["enrichment_enabled"] is False
        assert data["profiles_count"] == 0


class TestProfile:
    def test_unknown_user_gets_default(self, client):
        data = client.get("/api/profile/new-user").json()
        assert data["user_id"] == "new-user"
        assert data["physically_active"] is None
        assert data["derived"]["risk_factor_score"] == 22

    def test_put_hydrates_and_stores(self, client, memory_store):
        payload = {"full_name": "Ada Lovelace", "physically_active": False, "activity_list": ["gym"]}
        data = client.put("/api/profile/ada", json=payload).json()
        assert data["user_id"] == "ada"
        assert data["preferred_name"] == "Ada"
        assert data["activity_list"] == []
        assert memory_store.profiles.get("ada").full_name == "Ada Lovelace"

    def test_put_rejects_invalid_enum(self, client):
        response = client.put("/api/profile/ada", json={"coverage_preference": "everyone"})
        assert response.status_code == 422

    def test_delete_resets(self, client, saved_sample):
        data = client.delete("/api/profile/jordan").json()
        assert data["reset"] is True
        assert data["profile"]["full_name"] == ""
        assert client.get("/api/profile/jordan").json()["full_name"] == ""


# ============================================================================
# Questionnaire
# ============================================================================


class TestQuiz:
    def test_questions_include_answers(self, client):
        questions = client.get("/api/quiz/ada/questions").json()["questions"]
        assert questions[0]["id"] == "full_name"
        assert questions[0]["answer"] == ""
        assert "condition" not in questions[0]
        assert "activity_list" not in [q["id"] for q in questions]

    def test_answer_advances(self, client, memory_store):
        response = client.post("/api/quiz/ada/answer", json={"question_id": "full_name", "value": "Ada Lovelace"})
        assert response.status_code == 200
        data = response.json()
        assert data["next_step"] == 1
        assert data["complete"] is False
        assert memory_store.profiles.get("ada").full_name == "Ada Lovelace"

    def test_follow_up_appears_and_disappears(self, client):
        data = client.post("/api/quiz/ada/answer", json={"question_id": "physically_active", "value": True}).json()
        assert "activity_list" in [q["id"] for q in data["questions"]]

        client.post("/api/quiz/ada/answer", json={"question_id": "activity_list", "value": ["gym", "running"]})
        data = client.post("/api/quiz/ada/answer", json={"question_id": "physically_active", "value": False}).json()
        assert "activity_list" not in [q["id"] for q in data["questions"]]
        assert data["profile"]["activity_list"] == []

    def test_last_question_completes(self, client):
        data = client.post(
            "/api/quiz/ada/answer", json={"question_id": "consent_to_follow_up", "value": True}
        ).json()
        assert data["complete"] is True
        assert data["next_step"] == len(data["questions"]) - 1

    def test_next_step_is_clamped(self, client):
        data = client.post(
            "/api/quiz/ada/answer", json={"question_id": "full_name", "value": "Ada", "step": 99}
        ).json()
        assert data["next_step"] == len(data["questions"]) - 1

    def test_answer_outside_current_flow(self, client, memory_store):
        response = client.post("/api/quiz/ada/answer", json={"question_id": "activity_list", "value": ["gym"]})
        assert response.status_code == 422
        assert "not part of the current flow" in response.json()["detail"]
        assert memory_store.profiles.get("ada") is None

    def test_savings_rate_accepts_up_to_fifty(self, client):
        data = client.post("/api/quiz/ada/answer", json={"question_id": "savings_rate", "value": 45}).json()
        assert data["profile"]["savings_rate"] == 45
        slider = next(q for q in data["questions"] if q["id"] == "savings_rate")
        assert slider["max"] == 50

    def test_unknown_question(self, client):
        response = client.post("/api/quiz/ada/answer", json={"question_id": "shoe_size", "value": 9})
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "question_id, value",
        [("marital_status", "engaged"), ("age", "abc"), ("physically_active", "yes"), ("full_name", "  ")],
    )
    def test_invalid_answer(self, client, question_id, value):
        response = client.post("/api/quiz/ada/answer", json={"question_id": question_id, "value": value})
        assert response.status_code == 422


# ============================================================================
# Insights
# ============================================================================


class TestInsights:
    def test_missing_user_id(self, client):
        assert client.post("/api/insights", json={"user_id": "  "}).status_code == 400

    def test_missing_profile(self, client):
        assert client.post("/api/insights", json={"user_id": "ghost"}).status_code == 404
        assert client.get("/api/insights/ghost").status_code == 404

    def test_local_build(self, client, saved_sample, enricher):
        data = client.post("/api/insights", json={"user_id": "jordan"}).json()
        assert data["data_source"] == "local"
        assert data["enriched"] is False
        assert data["insights"]["persona"] == "Family Growth Architect"
        assert len(data["insights"]["timeline"]) == 3
        assert enricher.calls == 0
        assert client.get("/api/insights/jordan").json() == data["insights"]

    def test_priority_limit_from_config(self, client, saved_sample, monkeypatch):
        monkeypatch.setenv("BENEFIT_INSIGHTS_PRIORITY_LIMIT", "1")
        data = client.post("/api/insights", json={"user_id": "jordan"}).json()
        assert len(data["insights"]["priorities"]) == 1

    def test_enriched_build(self, client, saved_sample, enricher):
        enricher.result = {"persona": "Trailblazer", "timeline": []}
        data = client.post("/api/insights", json={"user_id": "jordan", "use_enrichment": True}).json()
        assert data["data_source"] == "enriched"
        assert data["insights"]["persona"] == "Trailblazer"
        assert len(data["insights"]["timeline"]) == 3

    def test_enrichment_failure_falls_back(self, client, saved_sample, enricher):
        enricher.error = RuntimeError("boom")
        response = client.post("/api/insights", json={"user_id": "jordan", "use_enrichment": True})
        assert response.status_code == 200
        data = response.json()
        assert data["data_source"] == "local"
        assert data["insights"]["persona"] == "Family Growth Architect"


# ============================================================================
# Chat
# ============================================================================


class TestChat:
    def test_before_insights(self, client):
        data = client.post("/api/chat", json={"user_id": "ada", "message": "hello"}).json()
        assert data["reply"] == NO_INSIGHT_REPLY
        assert data["has_insights"] is False

    def test_reply_and_history(self, client, saved_sample):
        client.post("/api/insights", json={"user_id": "jordan"})
        data = client.post("/api/chat", json={"user_id": "jordan", "message": "What is my timeline?"}).json()
        assert data["has_insights"] is True
        assert "Confirm core coverage" in data["reply"]
        assert [entry["speaker"] for entry in data["history"]] == ["User", "Assistant"]

        client.post("/api/chat", json={"user_id": "jordan", "message": "What is my timeline?"})
        history = client.get("/api/chat/jordan").json()["history"]
        assert len(history) == 2

    def test_blank_message(self, client):
        assert client.post("/api/chat", json={"user_id": "ada", "message": " "}).status_code == 400

    def test_blank_user_id(self, client):
        assert client.post("/api/chat", json={"user_id": "  ", "message": "hello"}).status_code == 400

    def test_cost_question(self, client, saved_sample):
        client.post("/api/insights", json={"user_id": "jordan"})
        data = client.post("/api/chat", json={"user_id": "jordan", "message": "What will it cost?"}).json()
        assert "$210/mo" in data["reply"]


# ============================================================================
# Report
# ============================================================================


class TestReport:
    def test_missing_user_id(self, client):
        assert client.post("/api/report", json={"user_id": " "}).status_code == 400

    def test_not_ready(self, client, saved_sample):
        response = client.post("/api/report", json={"user_id": "jordan"})
        assert response.status_code == 404
        assert "not ready" in response.json()["detail"]

    def test_selected_plan_by_default(self, client, saved_sample):
        client.post("/api/insights", json={"user_id": "jordan"})
        data = client.post("/api/report", json={"user_id": "jordan"}).json()
        assert data["plan_id"] == "plan-sample-user-2"
        assert data["report"].startswith("Benefits Insights Report\n")
        assert "Benefits Guidance (Balance)" in data["report"]

    def test_explicit_plan(self, client, saved_sample):
        client.post("/api/insights", json={"user_id": "jordan"})
        data = client.post("/api/report", json={"user_id": "jordan", "plan_id": "plan-sample-user-3"}).json()
        assert data["plan_id"] == "plan-sample-user-3"
        assert "Benefits Guidance (Accelerate)" in data["report"]

    def test_unknown_plan(self, client, saved_sample):
        client.post("/api/insights", json={"user_id": "jordan"})
        response = client.post("/api/report", json={"user_id": "jordan", "plan_id": "plan-nope"})
        assert response.status_code == 404
