"""
Club Scheduling Service: API Tests
====================================
Run:  pytest test_main.py -v --cov=main --cov=scheduling --cov-report=term-missing
"""
import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import FUTURE
from main import app
from scheduling.core.dependencies import (
    get_eligibility, get_event_service, get_training_service,
)
from scheduling.core.errors import DirectoryUnavailable
from scheduling.middleware import normalize_path
from scheduling.services.eligibility import EligibilityResolver


@pytest.fixture
def client(training_service, event_service, eligibility):
    app.dependency_overrides[get_training_service] = lambda: training_service
    app.dependency_overrides[get_event_service] = lambda: event_service
    app.dependency_overrides[get_eligibility] = lambda: eligibility
    yield TestClient(app)
    app.dependency_overrides.clear()


# ── Helpers ──────────────────────────────────────────────────────────────
def _training_body(**overrides):
    body = {
        "discipline": "Football", "coachId": "coach-1", "location": "Main pitch",
        "date": FUTURE, "time": "18:00", "duration": "90 min", "maxCapacity": 2,
    }
    body.update(overrides)
    return body


def _event_body(**overrides):
    body = {
        "title": "Spring Cup", "type": "tournament", "date": FUTURE,
        "time": "10:00", "location": "Stadium", "capacity": 2,
    }
    body.update(overrides)
    return body


def _create_training(client, **overrides):
    r = client.post("/api/v1/trainings", json=_training_body(**overrides))
    assert r.status_code == 201, r.text
    return r.json()


def _create_event(client, **overrides):
    r = client.post("/api/v1/events", json=_event_body(**overrides))
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_ready(self, client):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_metrics(self, client):
        client.get("/api/v1/trainings")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "scheduling_requests_total" in r.text

    def test_request_id_echoed(self, client):
        r = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert r.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self, client):
        assert client.get("/health").headers["X-Request-ID"]

    def test_path_normalisation(self):
        assert normalize_path(f"/api/v1/trainings/{uuid.uuid4()}/enrollments/athlete-7") == \
            "/api/v1/trainings/{param}/enrollments/{param}"
        assert normalize_path("/") == "/"


# ═══════════════════════════════════════════════════════════════════════════
# TRAININGS
# ═══════════════════════════════════════════════════════════════════════════
class TestTrainings:
    def test_create(self, client):
        body = _create_training(client)
        assert body["status"] == "Scheduled"
        assert body["coach_id"] == "coach-1"
        assert body["attendees"] == 0

    def test_create_auto_assigns_coach(self, client):
        assert _create_training(client, coachId=None)["coach_id"] == "coach-4"

    def test_create_ineligible_coach(self, client):
        r = client.post("/api/v1/trainings", json=_training_body(coachId="coach-2"))
        assert r.status_code == 422
        assert r.json()["error"] == "IneligibleCoach"

    def test_create_no_eligible_coach(self, client):
        r = client.post("/api/v1/trainings",
                        json=_training_body(discipline="Curling", coachId=None))
        assert r.status_code == 422
        assert r.json()["error"] == "NoEligibleCoach"

    def test_create_invalid_payload(self, client):
        r = client.post("/api/v1/trainings", json=_training_body(date="31/12/2026"))
        assert r.status_code == 422

    def test_get_invalid_id(self, client):
        assert client.get("/api/v1/trainings/not-a-uuid").status_code == 400

    def test_get_missing(self, client):
        r = client.get(f"/api/v1/trainings/{uuid.uuid4()}")
        assert r.status_code == 404
        assert r.json()["error"] == "NotFound"

    def test_list_with_filters(self, client):
        training = _create_training(client)
        r = client.get("/api/v1/trainings", params={"status": "scheduled", "coachId": "coach-1"})
        assert r.status_code == 200
        assert [t["id"] for t in r.json()] == [training["id"]]

    def test_list_invalid_status(self, client):
        assert client.get("/api/v1/trainings", params={"status": "Done"}).status_code == 422

    def test_patch(self, client):
        training = _create_training(client)
        r = client.patch(f"/api/v1/trainings/{training['id']}", json={"location": "Hall B"})
        assert r.status_code == 200
        assert r.json()["location"] == "Hall B"

    def test_patch_null_clears_notes(self, client):
        training = _create_training(client, notes="Bring bibs")
        r = client.patch(f"/api/v1/trainings/{training['id']}", json={"notes": None})
        assert r.status_code == 200
        assert r.json()["notes"] is None
        assert r.json()["location"] == "Main pitch"

    def test_patch_capacity_below_attendees(self, client):
        training = _create_training(client)
        client.post(f"/api/v1/trainings/{training['id']}/enrollments",
                    json={"athleteId": "athlete-1"})
        client.post(f"/api/v1/trainings/{training['id']}/enrollments",
                    json={"athleteId": "athlete-2"})
        r = client.patch(f"/api/v1/trainings/{training['id']}", json={"maxCapacity": 1})
        assert r.status_code == 409
        assert r.json()["error"] == "CapacityBelowEnrollment"

    def test_delete_idempotent(self, client):
        training = _create_training(client)
        first = client.delete(f"/api/v1/trainings/{training['id']}")
        second = client.delete(f"/api/v1/trainings/{training['id']}")
        assert first.json()["deleted"] is True
        assert second.status_code == 200
        assert second.json()["deleted"] is False


class TestTrainingStatus:
    def test_complete(self, client):
        training = _create_training(client)
        r = client.post(f"/api/v1/trainings/{training['id']}/status",
                        json={"status": "completed"})
        assert r.status_code == 200
        assert r.json()["status"] == "Completed"

    def test_invalid_transition(self, client):
        training = _create_training(client)
        client.post(f"/api/v1/trainings/{training['id']}/status", json={"status": "Cancelled"})
        r = client.post(f"/api/v1/trainings/{training['id']}/status",
                        json={"status": "Completed"})
        assert r.status_code == 409
        assert r.json()["error"] == "InvalidTransition"

    def test_unknown_status(self, client):
        training = _create_training(client)
        r = client.post(f"/api/v1/trainings/{training['id']}/status", json={"status": "Done"})
        assert r.status_code == 422


class TestEnrollmentAndAttendance:
    def test_enroll_until_full(self, client):
        training = _create_training(client)
        url = f"/api/v1/trainings/{training['id']}/enrollments"
        assert client.post(url, json={"athleteId": "athlete-1"}).status_code == 201
        assert client.post(url, json={"athleteId": "athlete-2"}).status_code == 201
        r = client.post(url, json={"athleteId": "athlete-3"})
        assert r.status_code == 409
        assert r.json()["error"] == "CapacityExceeded"

    def test_duplicate(self, client):
        training = _create_training(client)
        url = f"/api/v1/trainings/{training['id']}/enrollments"
        client.post(url, json={"athleteId": "athlete-1"})
        r = client.post(url, json={"athleteId": "athlete-1"})
        assert r.status_code == 409
        assert r.json()["error"] == "DuplicateRegistration"

    def test_unenroll_idempotent(self, client):
        training = _create_training(client)
        client.post(f"/api/v1/trainings/{training['id']}/enrollments",
                    json={"athleteId": "athlete-1"})
        url = f"/api/v1/trainings/{training['id']}/enrollments/athlete-1"
        assert client.delete(url).json()["removed"] is True
        assert client.delete(url).json()["removed"] is False

    def test_mark_and_list_attendance(self, client):
        training = _create_training(client)
        url = f"/api/v1/trainings/{training['id']}/attendance"
        r = client.post(url, json={"athleteId": "athlete-1", "status": "late"})
        assert r.status_code == 200
        assert r.json()["status"] == "Late"
        records = client.get(url).json()
        assert [(a["athlete_id"], a["status"]) for a in records] == [("athlete-1", "Late")]

    def test_attendance_closed(self, client):
        training = _create_training(client)
        client.post(f"/api/v1/trainings/{training['id']}/status", json={"status": "Completed"})
        r = client.post(f"/api/v1/trainings/{training['id']}/attendance",
                        json={"athleteId": "athlete-1", "status": "Present"})
        assert r.status_code == 409
        assert r.json()["error"] == "SessionClosed"

    def test_closed_session_enrollments_are_read_only(self, client):
        training = _create_training(client)
        base = f"/api/v1/trainings/{training['id']}"
        client.post(f"{base}/enrollments", json={"athleteId": "athlete-1"})
        client.post(f"{base}/status", json={"status": "Completed"})

        r = client.delete(f"{base}/enrollments/athlete-1")
        assert r.status_code == 409
        assert r.json()["error"] == "SessionClosed"
        r = client.post(f"{base}/enrollments", json={"athleteId": "athlete-2", "status": "Absent"})
        assert r.status_code == 409
        assert r.json()["error"] == "SessionClosed"
        records = client.get(f"{base}/attendance").json()
        assert [(a["athlete_id"], a["status"]) for a in records] == [("athlete-1", "Present")]

    def test_detail_lists_attendance(self, client):
        training = _create_training(client)
        client.post(f"/api/v1/trainings/{training['id']}/enrollments",
                    json={"athleteId": "athlete-1"})
        body = client.get(f"/api/v1/trainings/{training['id']}").json()
        assert body["attendees"] == 1
        assert body["attendance"][0]["athlete_id"] == "athlete-1"


# ═══════════════════════════════════════════════════════════════════════════
# EVENTS
# ═══════════════════════════════════════════════════════════════════════════
class TestEvents:
    def test_create(self, client):
        body = _create_event(client)
        assert body["type"] == "Tournament"
        assert body["status"] == "Upcoming"

    def test_register_until_full(self, client):
        event = _create_event(client, capacity=1)
        url = f"/api/v1/events/{event['id']}/participants"
        assert client.post(url, json={"userId": "athlete-1"}).status_code == 201
        r = client.post(url, json={"userId": "athlete-2"})
        assert r.status_code == 409
        assert r.json()["error"] == "CapacityExceeded"

    def test_record_result(self, client):
        event = _create_event(client)
        client.post(f"/api/v1/events/{event['id']}/participants", json={"userId": "athlete-1"})
        r = client.patch(f"/api/v1/events/{event['id']}/participants/athlete-1",
                         json={"result": "2nd"})
        assert r.status_code == 200
        assert r.json()["result"] == "2nd"

    def test_status_flow(self, client):
        event = _create_event(client)
        url = f"/api/v1/events/{event['id']}/status"
        assert client.post(url, json={"status": "Completed"}).status_code == 409
        assert client.post(url, json={"status": "Ongoing"}).status_code == 200
        assert client.post(url, json={"status": "Completed"}).json()["status"] == "Completed"

    def test_list_by_type(self, client):
        social = _create_event(client, type="Social")
        _create_event(client)
        r = client.get("/api/v1/events", params={"type": "social"})
        assert [e["id"] for e in r.json()] == [social["id"]]

    def test_invalid_id(self, client):
        assert client.delete("/api/v1/events/42").status_code == 400

    def test_unregister_from_cancelled_event(self, client):
        event = _create_event(client)
        client.post(f"/api/v1/events/{event['id']}/participants", json={"userId": "athlete-1"})
        client.post(f"/api/v1/events/{event['id']}/status", json={"status": "Cancelled"})
        r = client.delete(f"/api/v1/events/{event['id']}/participants/athlete-1")
        assert r.status_code == 409
        assert r.json()["error"] == "SessionClosed"
        assert client.get(f"/api/v1/events/{event['id']}").json()["registered"] == 1

    def test_patch_null_clears_description(self, client):
        event = _create_event(client, description="Bring boots")
        r = client.patch(f"/api/v1/events/{event['id']}", json={"description": None})
        assert r.status_code == 200
        assert r.json()["description"] is None


# ═══════════════════════════════════════════════════════════════════════════
# DISCIPLINES
# ═══════════════════════════════════════════════════════════════════════════
class TestDisciplines:
    def test_available(self, client):
        r = client.get("/api/v1/disciplines")
        assert r.json() == ["Basketball", "Football", "swimming", "Tennis"]

    def test_coaches(self, client):
        body = client.get("/api/v1/disciplines/football/coaches").json()
        assert body["total"] == 2
        assert [c["id"] for c in body["coaches"]] == ["coach-4", "coach-1"]

    def test_directory_unavailable(self, client):
        directory = MagicMock()
        directory.list_teams.side_effect = DirectoryUnavailable("Member directory unavailable")
        app.dependency_overrides[get_eligibility] = lambda: EligibilityResolver(directory)
        r = client.get("/api/v1/disciplines")
        assert r.status_code == 503
        assert r.json()["error"] == "directory_unavailable"
