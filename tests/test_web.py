"""Tests for the HTTP trigger."""

import datetime

import pytest
from fastapi.testclient import TestClient

from reservation_digest.config import reset_config
from reservation_digest.job import WeeklyDigestJob
from reservation_digest.web.app import app
from reservation_digest.web.cors import CORS_HEADERS
from reservation_digest.web.routes.api import get_job_factory

WEDNESDAY = datetime.date(2025, 10, 29)


@pytest.fixture()
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def use_job(fake_db, transport, branding):
    """Route /weekly-email to a job backed by the in-memory fakes."""
    job = WeeklyDigestJob(db=fake_db, transport=transport, branding=branding, today=WEDNESDAY)
    app.dependency_overrides[get_job_factory] = lambda: (lambda: job)
    return job


def _assert_cors(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


class TestPreflight:
    """OPTIONS requests get an empty 200 with CORS headers."""

    @pytest.mark.parametrize("path", ["/weekly-email", "/health", "/anything"])
    def test_options(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        _assert_cors(response)


class TestWeeklyEmail:
    """Tests for GET/POST /weekly-email."""

    def test_success_payload(self, client, use_job, fake_db, transport, make_reservation, recipients):
        fake_db.reservations = [
            make_reservation(datetime.date(2025, 11, 3)),
            make_reservation(datetime.date(2025, 11, 6)),
            make_reservation(datetime.date(2025, 11, 9)),
        ]
        transport.fail_for = {recipients[0].email}

        response = client.post("/weekly-email")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Weekly emails sent",
            "success": 4,
            "failures": 1,
            "reservations": 3,
            "start_date": "2025-11-03",
            "end_date": "2025-11-09",
        }
        _assert_cors(response)

    def test_get_also_triggers(self, client, use_job, transport):
        response = client.get("/weekly-email")

        assert response.status_code == 200
        assert len(transport.attempts) == 5

    def test_no_recipients(self, client, use_job, fake_db, transport):
        fake_db.recipients = []

        response = client.post("/weekly-email")

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "No recipients found"
        assert body["success"] == 0
        assert body["failures"] == 0
        assert transport.attempts == []

    def test_upstream_failure(self, client, use_job, fake_db, transport, upstream_error):
        fake_db.reservations_error = upstream_error

        response = client.post("/weekly-email")

        assert response.status_code == 500
        assert "reservations" in response.json()["error"]
        assert transport.attempts == []
        _assert_cors(response)

    def test_unexpected_failure(self, client, use_job, fake_db):
        fake_db.recipients_error = RuntimeError("boom")

        response = client.post("/weekly-email")

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}
        _assert_cors(response)

    def test_missing_configuration(self, client, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
        monkeypatch.setattr("reservation_digest.config.load_dotenv", lambda: None)
        reset_config()

        response = client.post("/weekly-email")

        assert response.status_code == 500
        assert "SUPABASE_URL" in response.json()["error"]
        _assert_cors(response)
        reset_config()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    _assert_cors(response)
