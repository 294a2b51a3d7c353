"""
Read-only views for the patient portal.

Prescriptions, exam results and the patient's own appointments surface
upstream errors to the caller (RemoteApiError). Doctor availability is the
exception: when the clinic API cannot answer, a default grid of half-hour
slots is returned instead so booking is still possible.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Iterable, Optional
from pydantic import ValidationError
from app.client import ClinicApiClient
from app.schemas import (
    Appointment,
    AppointmentStatus,
    Availability,
    ExamResult,
    PatientAppointments,
    Prescription,
    TimeSlot,
)
from common import RemoteApiError, get_app_logger
from .clock import to_local
from .payloads import parse_list

logger = get_app_logger(__name__)

S = AppointmentStatus

PRESCRIPTIONS_PATH = "/api/patient/prescriptions"
EXAM_RESULTS_PATH = "/api/patient/exam-results"
PATIENT_APPOINTMENTS_PATH = "/api/appointments/patient-appointments"

DEFAULT_DAY_START = time(8, 0)
DEFAULT_DAY_END = time(18, 0)
DEFAULT_SLOT_LENGTH = timedelta(minutes=30)

_CLOSED = frozenset({S.COMPLETED, S.CANCELLED})


def availability_path(doctor_id: int) -> str:
    return f"/api/appointments/doctor/{doctor_id}/availability"


def default_slots(
    day_start: time = DEFAULT_DAY_START,
    day_end: time = DEFAULT_DAY_END,
    step: timedelta = DEFAULT_SLOT_LENGTH,
) -> list[TimeSlot]:
    """Every `step` from day_start up to (not including) day_end, all available."""
    anchor = date(2000, 1, 1)
    cursor = datetime.combine(anchor, day_start)
    end = datetime.combine(anchor, day_end)

    slots: list[TimeSlot] = []
    while cursor < end:
        slots.append(TimeSlot(time=cursor.strftime("%H:%M"), available=True))
        cursor += step
    return slots


def split_patient_appointments(
    appointments: Iterable[Appointment],
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> PatientAppointments:
    """
    upcoming: in the future and still open, soonest first
    past: already happened, or completed/cancelled whatever the date, latest first
    """
    current = to_local(now or datetime.now(timezone.utc), tz)

    upcoming: list[Appointment] = []
    past: list[Appointment] = []
    for appointment in appointments:
        starts = to_local(appointment.scheduled_datetime, tz)
        if starts > current and appointment.status_enum not in _CLOSED:
            upcoming.append(appointment)
        elif starts < current or appointment.status_enum in _CLOSED:
            past.append(appointment)

    upcoming.sort(key=lambda a: to_local(a.scheduled_datetime, tz))
    past.sort(key=lambda a: to_local(a.scheduled_datetime, tz), reverse=True)
    return PatientAppointments(upcoming=upcoming, past=past)


class PortalService:
    def __init__(self, api: ClinicApiClient, tz: tzinfo = timezone.utc):
        self.api = api
        self.tz = tz

    async def list_prescriptions(self) -> list[Prescription]:
        payload = await self.api.get(PRESCRIPTIONS_PATH)
        return parse_list(Prescription, payload, source=PRESCRIPTIONS_PATH)

    async def list_exam_results(self) -> list[ExamResult]:
        payload = await self.api.get(EXAM_RESULTS_PATH)
        return parse_list(ExamResult, payload, source=EXAM_RESULTS_PATH)

    async def patient_appointments(
        self, now: Optional[datetime] = None
    ) -> PatientAppointments:
        payload = await self.api.get(PATIENT_APPOINTMENTS_PATH)
        appointments = parse_list(Appointment, payload, source=PATIENT_APPOINTMENTS_PATH)
        return split_patient_appointments(appointments, now=now, tz=self.tz)

    async def availability(self, doctor_id: int, day: date) -> Availability:
        day_str = day.isoformat()
        try:
            payload = await self.api.get(
                availability_path(doctor_id), params={"date": day_str}
            )
            slots = self._parse_slots(payload)
        except (RemoteApiError, ValidationError) as e:
            logger.warning(
                "Availability lookup failed, using default slots",
                doctor_id=doctor_id,
                date=day_str,
                error=str(e),
            )
            return Availability(
                doctor_id=doctor_id, date=day_str, slots=default_slots(), fallback=True
            )

        return Availability(doctor_id=doctor_id, date=day_str, slots=slots)

    @staticmethod
    def _parse_slots(payload: Any) -> list[TimeSlot]:
        raw = payload.get("slots") if isinstance(payload, dict) else None
        return [TimeSlot.model_validate(item) for item in raw or []]


__all__ = [
    "PortalService",
    "PRESCRIPTIONS_PATH",
    "EXAM_RESULTS_PATH",
    "PATIENT_APPOINTMENTS_PATH",
    "availability_path",
    "default_slots",
    "split_patient_appointments",
]
