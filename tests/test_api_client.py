import json

import httpx
import pytest

from app.client import ClinicApiClient, ClinicApiManager, extract_error_message
from app.schemas import AppointmentStatus, StatusChange
from common import RemoteApiError
from common.context_vars import request_timer_context_var
from common.logger.logger_middleware import UPSTREAM_TIMER_KEY, RequestTimer


def make_client(handler, token="tok-123") -> ClinicApiClient:
    http = httpx.AsyncClient(base_url="http://clinic.test", transport=httpx.MockTransport(handler))
    return ClinicApiClient(http, token=token)


@pytest.mark.asyncio
async def test_get_sends_bearer_token_and_decodes_json():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[{"id": 1}])

    result = await make_client(handler).get("/api/appointments", params={"date": "2026-10-18"})

    assert result == [{"id": 1}]
    assert seen["auth"] == "Bearer tok-123"
    assert seen["url"] == "http://clinic.test/api/appointments?date=2026-10-18"


@pytest.mark.asyncio
async def test_no_token_means_no_authorization_header():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={})

    await make_client(handler, token=None).get("/api/patients")
    assert seen["auth"] is None


@pytest.mark.asyncio
async def test_model_bodies_are_sent_as_json_without_nulls():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    result = await make_client(handler).patch(
        "/api/appointments/5/status", StatusChange(status=AppointmentStatus.CHECKED_IN)
    )

    assert result is None
    assert seen == {"method": "PATCH", "body": {"status": "checked_in"}}


@pytest.mark.asyncio
async def test_error_status_raises_with_server_message():
    def handler(request):
        return httpx.Response(409, json={"detail": "Doctor already booked at this time"})

    with pytest.raises(RemoteApiError) as exc:
        await make_client(handler).put("/api/appointments/5", {"patient_id": 1})

    assert exc.value.status_code == 409
    assert exc.value.message == "Doctor already booked at this time"
    assert exc.value.method == "PUT"
    assert exc.value.path == "/api/appointments/5"
    assert exc.value.gateway_status == 409


@pytest.mark.asyncio
async def test_error_without_body_uses_generic_message():
    def handler(request):
        return httpx.Response(500)

    with pytest.raises(RemoteApiError) as exc:
        await make_client(handler).get("/api/appointments")

    assert exc.value.message == "Clinic API request failed (HTTP 500)"
    assert exc.value.gateway_status == 502


@pytest.mark.asyncio
async def test_timeout_becomes_504():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RemoteApiError) as exc:
        await make_client(handler).get("/api/appointments")

    assert exc.value.status_code == 504
    assert exc.value.message == "The clinic server took too long to respond"


@pytest.mark.asyncio
async def test_connection_error_becomes_502():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RemoteApiError) as exc:
        await make_client(handler).get("/api/appointments")

    assert exc.value.status_code == 502
    assert exc.value.message == "Could not reach the clinic server"


@pytest.mark.asyncio
async def test_calls_are_recorded_in_the_request_timer():
    def handler(request):
        return httpx.Response(200, json=[])

    client = make_client(handler)
    timer = RequestTimer()
    token = request_timer_context_var.set(timer)
    try:
        await client.get("/api/patients")
        await client.get("/api/users/doctors")
    finally:
        request_timer_context_var.reset(token)

    assert timer.counters[UPSTREAM_TIMER_KEY] == 2
    assert timer.timings[UPSTREAM_TIMER_KEY] >= 0


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"message": "Slot taken", "detail": "ignored"}, "Slot taken"),
        ({"detail": "Not authenticated"}, "Not authenticated"),
        (
            {"detail": [{"loc": ["body", "doctor_id"], "msg": "field required"}, {"msg": "bad date"}]},
            "body.doctor_id: field required, bad date",
        ),
        ({"detail": {"message": "nested"}}, "nested"),
        ({"other": 1}, "fallback"),
        (None, "fallback"),
        ("plain text error", "plain text error"),
    ],
)
def test_extract_error_message(payload, expected):
    assert extract_error_message(payload, "fallback") == expected


@pytest.mark.asyncio
async def test_manager_health_check_and_verify():
    def handler(request):
        return httpx.Response(404)

    manager = ClinicApiManager("http://clinic.test", transport=httpx.MockTransport(handler))
    try:
        reachable = await manager.verify_connection()
        health = await manager.health_check()
    finally:
        await manager.dispose()

    assert reachable is True
    assert manager.is_verified
    assert health["healthy"] is True
    assert health["upstream_status"] == 404


@pytest.mark.asyncio
async def test_manager_verify_only_warns_when_unreachable():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    manager = ClinicApiManager("http://clinic.test", transport=httpx.MockTransport(handler))
    try:
        reachable = await manager.verify_connection()
        health = await manager.health_check()
    finally:
        await manager.dispose()

    assert reachable is False
    assert health["healthy"] is False
