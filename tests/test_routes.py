"""HTTP surface tests — FastAPI TestClient with dependency overrides.

``get_db`` yields an AsyncMock and ``get_orchestrator`` returns an
orchestrator backed by the in-memory MockRepository, so the routes,
camelCase bodies, and exception handlers run without a database.  The
lifespan handler is not entered (no ``with TestClient(...)``).
"""

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm.exc import StaleDataError

from helpers.language import UnavailableLanguage
from survey_engine.language.passthrough import PassthroughLanguage
from survey_server.app import create_app
from survey_server.config import ServerSettings, load_settings
from survey_server.dependencies import get_db, get_orchestrator

from test_orchestrator import MockRepository, make_orchestrator

SCRUM = "demo-scrum-daily-en"


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def mock_repo():
    return MockRepository()


def _client(orchestrator) -> TestClient:
    app = create_app(ServerSettings())

    async def override_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return TestClient(app)


@pytest.fixture
def client(store, mock_repo):
    return _client(make_orchestrator(store, PassthroughLanguage(), mock_repo))


def _init(client, external_id=SCRUM):
    response = client.post(f"/s/{external_id}/init")
    assert response.status_code == 200, response.text
    return response.json()


# =====================================================================
# Conversational endpoints
# =====================================================================


class TestConversation:

    def test_init_returns_first_question(self, client):
        body = _init(client)
        assert body["question"] == "What did you work on yesterday?"
        assert body["completed"] is False
        assert "message" not in body
        uuid.UUID(body["sessionId"])

    def test_full_conversation(self, client):
        sid = _init(client)["sessionId"]

        replies = []
        for answer in ("KCD-12", "KCD-14", "No, thanks"):
            response = client.post(
                f"/s/{SCRUM}/respond", json={"sessionId": sid, "answerText": answer},
            )
            assert response.status_code == 200, response.text
            replies.append(response.json())

        assert [r["completed"] for r in replies] == [False, False, True]
        assert replies[0]["message"].endswith("What are you planning to work on today?")
        assert replies[-1]["message"] == "Thank you! Have a productive day."
        assert all(r["sessionId"] == sid for r in replies)

        report = client.get(f"/api/v1/sessions/{sid}/report").json()
        assert report["flat"] == {
            "yesterdayWork": "KCD-12",
            "todayPlan": "KCD-14",
            "roadblocks": "No, thanks",
        }
        assert report["completed"] is True

    def test_respond_after_completion_is_conflict(self, client):
        sid = _init(client)["sessionId"]
        for answer in ("KCD-12", "KCD-14", "none"):
            client.post(f"/s/{SCRUM}/respond", json={"sessionId": sid, "answerText": answer})

        response = client.post(
            f"/s/{SCRUM}/respond", json={"sessionId": sid, "answerText": "again"},
        )
        assert response.status_code == 409
        assert response.json() == {"detail": "Session already completed"}

    def test_init_unknown_survey_is_not_found(self, client):
        response = client.post("/s/nope/init")
        assert response.status_code == 404
        assert response.json() == {"detail": "Resource not found"}

    def test_respond_unknown_session_is_not_found(self, client):
        response = client.post(
            f"/s/{SCRUM}/respond",
            json={"sessionId": str(uuid.uuid4()), "answerText": "KCD-12"},
        )
        assert response.status_code == 404

    def test_respond_with_session_of_other_survey_is_not_found(self, client):
        sid = _init(client)["sessionId"]
        response = client.post(
            "/s/demo-survey-en/respond", json={"sessionId": sid, "answerText": "Ann"},
        )
        assert response.status_code == 404

    def test_respond_requires_body_fields(self, client):
        response = client.post(f"/s/{SCRUM}/respond", json={"sessionId": "x"})
        assert response.status_code == 422

    def test_language_service_down_is_503(self, store, mock_repo):
        healthy = _client(make_orchestrator(store, PassthroughLanguage(), mock_repo))
        sid = _init(healthy)["sessionId"]

        broken = _client(make_orchestrator(store, UnavailableLanguage(), mock_repo))
        response = broken.post(
            f"/s/{SCRUM}/respond", json={"sessionId": sid, "answerText": "KCD-12"},
        )
        assert response.status_code == 503
        assert response.json() == {"detail": "Language service unavailable"}

    def test_concurrent_update_is_conflict(self, store, mock_repo):
        class StaleRepository(MockRepository):
            async def save_report(self, db, session, report):
                raise StaleDataError("0 rows matched")

        client = _client(make_orchestrator(store, PassthroughLanguage(), StaleRepository()))

        # start_session writes the report, which is where the version check fires
        response = client.post(f"/s/{SCRUM}/init")
        assert response.status_code == 409
        assert response.json() == {"detail": "Concurrent update, retry"}


# =====================================================================
# Session endpoints
# =====================================================================


class TestSessionEndpoints:

    def test_get_session(self, client):
        sid = _init(client)["sessionId"]
        body = client.get(f"/api/v1/sessions/{sid}").json()
        assert body["session_id"] == sid
        assert body["status"] == "in_progress"
        assert body["current_question_id"] == 1

    def test_get_unknown_session(self, client):
        response = client.get(f"/api/v1/sessions/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_list_sessions(self, client):
        first = _init(client)["sessionId"]
        second = _init(client)["sessionId"]
        _init(client, "demo-survey-en")

        body = client.get(f"/api/v1/surveys/{SCRUM}/sessions").json()
        assert {s["session_id"] for s in body} == {first, second}

        page = client.get(f"/api/v1/surveys/{SCRUM}/sessions", params={"limit": 1}).json()
        assert len(page) == 1

    def test_list_sessions_rejects_bad_limit(self, client):
        response = client.get(f"/api/v1/surveys/{SCRUM}/sessions", params={"limit": 0})
        assert response.status_code == 422

    def test_soft_then_hard_delete(self, client):
        sid = _init(client)["sessionId"]

        assert client.delete(f"/api/v1/sessions/{sid}").status_code == 204
        assert client.get(f"/api/v1/sessions/{sid}").status_code == 404
        assert client.delete(f"/api/v1/sessions/{sid}").status_code == 404

        assert client.delete(f"/api/v1/sessions/{sid}/permanent").status_code == 204
        assert client.delete(f"/api/v1/sessions/{sid}/permanent").status_code == 404


# =====================================================================
# Configuration
# =====================================================================


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("SERVER_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("SERVER_LOG_LEVEL", "debug")
    monkeypatch.setenv("SURVEY_DIR", "/srv/surveys")
    monkeypatch.setenv("SURVEY_LLM_BACKEND", "OpenAI")
    monkeypatch.setenv("SURVEY_LLM_MODEL", "gpt-test")
    monkeypatch.setenv("SURVEY_LLM_TIMEOUT", "5")

    settings = load_settings()

    assert settings.port == 9000
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
    assert settings.survey_dir == "/srv/surveys"
    assert settings.llm_backend == "openai"
    assert settings.llm_model == "gpt-test"
    assert settings.llm_timeout == 5.0
    assert settings.llm_base_url is None
