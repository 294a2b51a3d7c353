from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from app.schemas import Appointment
from common import RemoteApiError


def appt(
    id: int,
    status: str = "scheduled",
    when: str = "2026-10-18T10:00:00+00:00",
    patient: str = "Maria Souza",
    doctor: str = "Dr. Paulo Lima",
    **extra: Any,
) -> dict:
    data = {
        "id": id,
        "scheduled_datetime": when,
        "status": status,
        "appointment_type": "consultation",
        "patient_id": 10 + id,
        "doctor_id": 7,
        "patient_name": patient,
        "doctor_name": doctor,
    }
    data.update(extra)
    return data


def model(**kwargs: Any) -> Appointment:
    return Appointment.model_validate(appt(**kwargs))


def upstream_error(status_code: int = 400, message: Optional[str] = "Rejected by clinic") -> RemoteApiError:
    payload = {"detail": message} if message else None
    return RemoteApiError(message or f"Clinic API request failed (HTTP {status_code})", status_code=status_code, payload=payload)


class FakeClinicApi:
    """
    Stand-in for ClinicApiClient.

    GET /api/appointments serves `appointments` and an accepted
    PATCH /api/appointments/{id}/status updates it; anything in `responses`
    wins, anything in `failures` raises. Every call is recorded.
    """

    def __init__(self, appointments: Optional[list] = None):
        self.appointments = list(appointments or [])
        self.responses: dict = {}
        self.failures: dict = {}
        self.calls: list = []

    def calls_to(self, method: str, path: Optional[str] = None) -> list:
        return [c for c in self.calls if c[0] == method and (path is None or c[1] == path)]

    async def _handle(self, method: str, path: str, body: Any = None, params: Any = None) -> Any:
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json", exclude_none=True)
        self.calls.append((method, path, body if params is None else params))

        key = (method, path)
        if key in self.failures:
            failure = self.failures[key]
            if isinstance(failure, list):
                failure = failure.pop(0) if failure else None
            if failure is not None:
                raise failure
        if method == "PATCH" and path.endswith("/status"):
            self._apply_status(path, body)
        if key in self.responses:
            return self.responses[key]
        if key == ("GET", "/api/appointments"):
            return list(self.appointments)
        return None

    def _apply_status(self, path: str, body: dict) -> None:
        appointment_id = int(path.split("/")[-2])
        for item in self.appointments:
            if item["id"] == appointment_id:
                item["status"] = body["status"]

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self._handle("GET", path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self._handle("POST", path, body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self._handle("PUT", path, body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self._handle("PATCH", path, body)

    async def delete(self, path: str) -> Any:
        return await self._handle("DELETE", path)


FIXED_NOW = datetime.fromisoformat("2026-10-18T11:00:00+00:00")
