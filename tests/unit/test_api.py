"""Unit tests for the HTTP API (in-process, scripted provider)"""

import time

import pytest
from fastapi.testclient import TestClient

from accident_analytics.config.settings import settings
from accident_analytics.core.assistant import FALLBACK_REPLY
from accident_analytics.core.errors import AnalysisError
from accident_analytics.infrastructure.analysis import reset_analysis_provider, set_analysis_provider
from accident_analytics.infrastructure.storage import LocalStorage, reset_storage_provider, set_storage_provider
from accident_analytics.main import app


@pytest.fixture
def provider(scripted_provider, report_text):
    return scripted_provider([report_text])


@pytest.fixture
def client(tmp_path, provider, monkeypatch):
    monkeypatch.setattr(settings, "validation_step_delay_seconds", 0)
    monkeypatch.setattr(settings, "retry_cooldown_seconds", 0)
    monkeypatch.setattr(settings, "status_interval_seconds", 0.01)
    set_analysis_provider(provider)
    set_storage_provider(LocalStorage(str(tmp_path / "blobs")))

    with TestClient(app) as test_client:
        yield test_client

    reset_analysis_provider()
    reset_storage_provider()


def _wait_for(client, session_id, states, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/api/v1/intake/sessions/{session_id}").json()
        if body["state"] in states and not body["running"]:
            return body
        time.sleep(0.02)
    raise AssertionError(f"Session {session_id} never reached {states}")


def _session_with_video(client):
    session_id = client.post("/api/v1/intake/sessions").json()["session_id"]
    response = client.post(
        f"/api/v1/intake/sessions/{session_id}/evidence",
        files={"file": ("front.mp4", b"dashcam-bytes", "video/mp4")},
        data={"classification": "video"},
    )
    assert response.status_code == 201
    return session_id, response.json()


def _completed_case(client):
    session_id, _ = _session_with_video(client)
    response = client.post(f"/api/v1/intake/sessions/{session_id}/analysis", json={"jurisdiction": "California, USA"})
    assert response.status_code == 202
    return _wait_for(client, session_id, {"complete"})["case_id"]


@pytest.mark.unit
class TestIntakeRoutes:
    """Test the upload wizard flow end to end"""

    def test_open_session(self, client):
        response = client.post("/api/v1/intake/sessions")

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "intake"
        assert body["evidence"] == []

    def test_upload_evidence(self, client):
        session_id, body = _session_with_video(client)

        assert body["classification"] == "video"
        assert body["size"] == len(b"dashcam-bytes")
        listing = client.get(f"/api/v1/intake/sessions/{session_id}/evidence").json()
        assert listing["total"] == 1

    def test_upload_rejects_disallowed_type(self, client):
        session_id = client.post("/api/v1/intake/sessions").json()["session_id"]

        response = client.post(
            f"/api/v1/intake/sessions/{session_id}/evidence",
            files={"file": ("payload.exe", b"MZ", "application/octet-stream")},
            data={"classification": "other"},
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("form", [{}, {"classification": "hologram"}])
    def test_upload_requires_known_classification(self, client, form):
        session_id = client.post("/api/v1/intake/sessions").json()["session_id"]

        response = client.post(
            f"/api/v1/intake/sessions/{session_id}/evidence",
            files={"file": ("front.mp4", b"dashcam-bytes", "video/mp4")},
            data=form,
        )

        assert response.status_code == 422
        assert client.get(f"/api/v1/intake/sessions/{session_id}/evidence").json()["total"] == 0

    def test_remove_evidence(self, client):
        session_id, body = _session_with_video(client)

        response = client.delete(f"/api/v1/intake/sessions/{session_id}/evidence/{body['evidence_id']}")

        assert response.status_code == 204
        assert client.get(f"/api/v1/intake/sessions/{session_id}/evidence").json()["total"] == 0

    def test_remove_unknown_evidence(self, client):
        session_id, _ = _session_with_video(client)

        assert client.delete(f"/api/v1/intake/sessions/{session_id}/evidence/nope").status_code == 404

    def test_unknown_session(self, client):
        response = client.get("/api/v1/intake/sessions/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Intake session not found"

    def test_analysis_requires_evidence(self, client):
        session_id = client.post("/api/v1/intake/sessions").json()["session_id"]

        response = client.post(f"/api/v1/intake/sessions/{session_id}/analysis", json={"jurisdiction": "California, USA"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Select at least one evidence file to continue."

    def test_analysis_commits_case(self, client):
        session_id, _ = _session_with_video(client)

        client.post(f"/api/v1/intake/sessions/{session_id}/analysis", json={"jurisdiction": "California, USA"})
        body = _wait_for(client, session_id, {"complete"})

        assert body["case_id"]
        assert all(check["status"] in ("valid", "warning") for check in body["checks"])
        assert body["evidence"][0]["status"] == "complete"
        case_ids = [c["id"] for c in client.get("/api/v1/cases").json()["cases"]]
        assert case_ids[0] == body["case_id"]

    def test_failed_analysis_reports_safe_message(self, client, provider):
        provider.responses = [AnalysisError("quota exhausted")]
        session_id, _ = _session_with_video(client)

        client.post(f"/api/v1/intake/sessions/{session_id}/analysis", json={"jurisdiction": "California, USA"})
        body = _wait_for(client, session_id, {"intake"})

        assert body["error"] == "Analysis failed. Please retry."
        assert body["case_id"] is None
        assert len(body["evidence"]) == 1
        assert "quota" not in str(body)

    def test_cancel_session(self, client):
        session_id, _ = _session_with_video(client)

        assert client.delete(f"/api/v1/intake/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/v1/intake/sessions/{session_id}").status_code == 404


@pytest.mark.unit
class TestCaseRoutes:
    """Test case listing, reports and exports"""

    def test_list_seeded_cases(self, client):
        body = client.get("/api/v1/cases").json()

        assert body["total"] == 3
        assert {c["status"] for c in body["cases"]} == {"Admissible", "Processing", "Draft"}

    def test_report_for_case_without_report_is_labelled_placeholder(self, client):
        body = client.get("/api/v1/cases/c-101/report").json()

        assert body["placeholder"] is True
        assert body["report"]["executiveSummary"].startswith("PLACEHOLDER")

    def test_unknown_case(self, client):
        assert client.get("/api/v1/cases/c-999").status_code == 404
        assert client.get("/api/v1/cases/c-999/report").status_code == 404

    def test_committed_report(self, client):
        case_id = _completed_case(client)

        body = client.get(f"/api/v1/cases/{case_id}/report").json()

        assert body["placeholder"] is False
        assert body["report"]["liability"]["defendantPercentage"] == 90
        assert body["sections"]["human_impact"] == "present"
        assert body["sections"]["audio_forensics"] == "not_analyzed"
        assert body["integrity_flags"] == []
        assert set(body["environmental_risk"]) == {
            "Road Friction Risk", "Visibility Risk", "Hydroplaning Risk", "Light Risk", "Weather Severity",
        }

    def test_get_case(self, client):
        case_id = _completed_case(client)

        body = client.get(f"/api/v1/cases/{case_id}").json()

        assert body["location"] == "California, USA"
        assert body["report"]["physics"]["vehicleA_speed"] == 48

    @pytest.mark.parametrize("fmt, media_type", [("json", "application/json"), ("csv", "text/csv"), ("pdf", "application/pdf")])
    def test_export(self, client, fmt, media_type):
        case_id = _completed_case(client)

        response = client.get(f"/api/v1/cases/{case_id}/report/export", params={"format": fmt})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(media_type)
        assert f"ForensicReport_{case_id}_" in response.headers["content-disposition"]

    def test_export_unsupported_format(self, client):
        case_id = _completed_case(client)

        assert client.get(f"/api/v1/cases/{case_id}/report/export", params={"format": "svg"}).status_code == 422

    def test_export_without_report(self, client):
        assert client.get("/api/v1/cases/c-101/report/export").status_code == 404

    def test_hydroplaning(self, client):
        case_id = _completed_case(client)

        body = client.get(f"/api/v1/cases/{case_id}/report/hydroplaning", params={"tire_pressure_psi": 20}).json()

        assert body["threshold_mph"] == 46.3
        assert body["vehicle_speed_mph"] == 48
        assert body["at_risk"] is True


@pytest.mark.unit
class TestAssistantRoutes:
    def test_chat(self, client, provider):
        response = client.post("/api/v1/assistant/chat", json={
            "message": "What is delta-V?",
            "history": [{"role": "model", "text": "Hello! How can I help today?"}],
        })

        assert response.status_code == 200
        assert response.json()["reply"] == provider.chat_reply
        history, message = provider.chats[0]
        assert message == "What is delta-V?"
        assert history[0].role == "model"

    def test_chat_failure_returns_fallback(self, client, provider):
        provider.chat_reply = AnalysisError("quota")

        response = client.post("/api/v1/assistant/chat", json={"message": "Explain AIS"})

        assert response.json()["reply"] == FALLBACK_REPLY


@pytest.mark.unit
class TestAuthRoutes:
    def test_signup_login_session_logout(self, client):
        signup = client.post("/api/v1/auth/signup", json={
            "email": "ana@example.test", "password": "pw", "name": "Ana",
        })
        assert signup.status_code == 201
        token = signup.json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        session = client.get("/api/v1/auth/session", headers=headers)
        assert session.status_code == 200
        assert session.json()["agency_id"] == "AGENCY-GENERIC"

        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 204
        assert client.get("/api/v1/auth/session", headers=headers).status_code == 401

        login = client.post("/api/v1/auth/login", json={"email": "ana@example.test", "password": "pw"})
        assert login.status_code == 200
        assert login.json()["token"] != token

    def test_duplicate_signup(self, client):
        payload = {"email": "ana@example.test", "password": "pw", "name": "Ana"}
        client.post("/api/v1/auth/signup", json=payload)

        response = client.post("/api/v1/auth/signup", json=payload)

        assert response.status_code == 401
        assert response.json()["detail"] == "User already exists with this email."

    def test_bad_login(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "x@example.test", "password": "pw"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password."

    def test_session_requires_token(self, client):
        assert client.get("/api/v1/auth/session").status_code == 401
