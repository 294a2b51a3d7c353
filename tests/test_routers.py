import httpx
import pytest
from fastapi.testclient import TestClient

from app.client import ClinicApiManager, get_clinic_api
from server import app
from fakes import FakeClinicApi, appt, upstream_error


@pytest.fixture
def api():
    fake = FakeClinicApi(
        [
            appt(1, "scheduled", patient="Maria Souza"),
            appt(2, "checked_in", patient="João Pereira", when="2026-10-18T10:30:00+00:00"),
            appt(3, "cancelled", patient="Carla Dias"),
        ]
    )
    app.dependency_overrides[get_clinic_api] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def test_list_with_search_and_status(api, client):
    response = client.get("/v1/appointments", params={"search": "joão", "status": "pending"})

    assert response.status_code == 200
    body = response.json()
    assert [row["appointment"]["id"] for row in body["rows"]] == [2]
    assert body["rows"][0]["actions"]["can_start"] is True
    assert body["total"] == 3


def test_unknown_status_filter_is_rejected(api, client):
    assert client.get("/v1/appointments", params={"status": "Pendente"}).status_code == 422


def test_check_in_returns_reloaded_list(api, client):
    response = client.post("/v1/appointments/1/check-in")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["notifications"][0]["level"] == "success"
    assert len(body["appointments"]) == 3
    assert "status_code" not in body


def test_cancel_cancelled_is_409_with_outcome(api, client):
    response = client.post("/v1/appointments/3/cancel")

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "ACTION_FAILED"
    assert body["message"] == "Could not cancel the appointment"
    assert body["details"]["success"] is False
    assert len(body["details"]["appointments"]) == 3
    assert "timestamp" in body
    assert api.calls_to("PATCH") == []


def test_create_with_missing_fields(api, client):
    response = client.post("/v1/appointments", json={"patient_id": 1})
    assert response.status_code == 422
    assert response.json()["message"] == "Fill in all required fields"


def test_create_success_is_201(api, client):
    response = client.post(
        "/v1/appointments",
        json={
            "patient_id": 11,
            "doctor_id": 7,
            "clinic_id": 1,
            "scheduled_datetime": "2026-10-20T09:00:00Z",
        },
    )
    assert response.status_code == 201
    assert response.json()["success"] is True


def test_drop_reschedules(api, client):
    response = client.post("/v1/appointments/1/drop", json={"start": "2026-10-19T14:00:00Z"})

    assert response.status_code == 200
    (_, path, body) = api.calls_to("PUT")[0]
    assert path == "/api/appointments/1"
    assert body["scheduled_datetime"] == "2026-10-19T14:00:00+00:00"
    assert body["patient_id"] == 11


def test_upstream_5xx_becomes_502(api, client):
    api.failures[("PATCH", "/api/appointments/2/status")] = upstream_error(500, "db down")
    response = client.post("/v1/appointments/2/start")
    assert response.status_code == 502
    assert response.json()["details"]["notifications"][0]["description"] == "db down"


def test_calendar(api, client):
    events = client.get("/v1/appointments/calendar").json()["events"]
    assert [e["id"] for e in events] == [1, 2, 3]
    assert events[0]["end"] == "2026-10-18T10:30:00Z"
    assert events[2]["draggable"] is False


def test_queue(api, client):
    response = client.get("/v1/appointments/queue", params={"now": "2026-10-18T11:00:00Z"})
    panels = response.json()["panels"]
    assert [e["appointment"]["id"] for e in panels["waiting"]] == [2]
    assert [a["id"] for a in panels["schedulable"]] == [1]
    assert panels["day"] == "2026-10-18"


def test_directory_failure_is_empty_list(api, client):
    api.failures[("GET", "/api/users/doctors")] = upstream_error(500)
    response = client.get("/v1/directory/doctors")
    assert response.status_code == 200
    assert response.json() == []


def test_portal_errors_use_error_envelope(api, client):
    api.failures[("GET", "/api/patient/exam-results")] = upstream_error(401, "Not authenticated")
    response = client.get("/v1/portal/exam-results")
    assert response.status_code == 401
    assert response.json()["error"] == "UPSTREAM_ERROR"


def test_portal_upstream_outage_becomes_502(api, client):
    api.failures[("GET", "/api/patient/prescriptions")] = upstream_error(500, "db down")
    response = client.get("/v1/portal/prescriptions")
    assert response.status_code == 502
    assert response.json()["message"] == "db down"


def test_availability_fallback(api, client):
    api.failures[("GET", "/api/appointments/doctor/7/availability")] = upstream_error(503)
    body = client.get("/v1/portal/availability/7", params={"date": "2026-10-20"}).json()
    assert body["fallback"] is True
    assert body["slots"][0] == {"time": "08:00", "available": True, "datetime": None}


def test_product_toggle(api, client):
    api.responses[("GET", "/api/v1/products")] = [{"id": 5, "name": "Gaze", "category": "medical_supply", "is_active": True}]
    response = client.post("/v1/products/5/toggle-active")
    assert response.status_code == 200
    assert api.calls_to("PUT") == [("PUT", "/api/v1/products/5", {"is_active": False})]


def test_request_id_and_server_timing_headers(api, client):
    response = client.get("/v1/appointments/calendar", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"
    assert "app;dur=" in response.headers["Server-Timing"]


def test_health_reports_upstream(client):
    def handler(request):
        return httpx.Response(200, json={"status": "ok"})

    app.state.clinic_api = ClinicApiManager("http://clinic.test", transport=httpx.MockTransport(handler))
    try:
        body = client.get("/health").json()
    finally:
        del app.state.clinic_api

    assert body["status"] == "Healthy"
    assert body["clinic_api"]["healthy"] is True
    assert body["version"] == "0.1.0"


def test_health_degraded_when_upstream_down(client):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    app.state.clinic_api = ClinicApiManager("http://clinic.test", transport=httpx.MockTransport(handler))
    try:
        body = client.get("/health").json()
    finally:
        del app.state.clinic_api

    assert body["status"] == "Degraded"
    assert body["clinic_api"]["healthy"] is False


def test_metrics(client):
    body = client.get("/metrics").json()
    assert set(body) == {"logger", "persistence", "backends"}
