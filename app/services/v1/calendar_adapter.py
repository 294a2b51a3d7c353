"""
Appointment <-> calendar event projection.

Events always span EVENT_DURATION from the scheduled start; the backend's
duration_minutes is not used for display.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional
from app.schemas import (
    Appointment,
    AppointmentStatus,
    AppointmentUpdate,
    CalendarEvent,
    EventKind,
)
from common import ScheduleRuleError

EVENT_DURATION = timedelta(minutes=30)

# Substrings of appointment_type, checked in order; the backend sends both
# English and Portuguese labels.
_KIND_MARKERS: tuple[tuple[EventKind, tuple[str, ...]], ...] = (
    (EventKind.EMERGENCY, ("emergency", "emergencia", "emergência", "urgent", "urgência", "urgencia")),
    (EventKind.PROCEDURE, ("procedure", "procedimento", "exam", "exame")),
    (EventKind.FOLLOW_UP, ("follow", "return", "retorno")),
)

_TITLES = {
    EventKind.CONSULTATION: "Consultation",
    EventKind.PROCEDURE: "Procedure",
    EventKind.FOLLOW_UP: "Follow-up",
    EventKind.EMERGENCY: "Emergency",
}


def classify_kind(appointment_type: Optional[str]) -> EventKind:
    label = (appointment_type or "").strip().lower()
    for kind, markers in _KIND_MARKERS:
        if any(marker in label for marker in markers):
            return kind
    return EventKind.CONSULTATION


def event_title(appointment: Appointment) -> str:
    label = (appointment.appointment_type or "").strip()
    kind = classify_kind(label)
    if not label or label.lower() == kind.value:
        return _TITLES[kind]
    return label.replace("_", " ").capitalize()


def is_draggable(appointment: Appointment) -> bool:
    return appointment.status_enum != AppointmentStatus.CANCELLED


def to_calendar_event(appointment: Appointment) -> CalendarEvent:
    start = appointment.scheduled_datetime
    movable = is_draggable(appointment)
    return CalendarEvent(
        id=appointment.id,
        title=event_title(appointment),
        start=start,
        end=start + EVENT_DURATION,
        status=appointment.status,
        kind=classify_kind(appointment.appointment_type),
        patient_name=appointment.patient_name,
        doctor_name=appointment.doctor_name,
        draggable=movable,
        resizable=movable,
        appointment=appointment,
    )


def to_calendar_events(appointments: Iterable[Appointment]) -> list[CalendarEvent]:
    return [to_calendar_event(appointment) for appointment in appointments]


def build_reschedule(appointment: Appointment, new_start: datetime) -> AppointmentUpdate:
    """
    PUT body for a drag or resize.

    Only the start matters: a resize reports a new end too, but events have a
    fixed length so it is dropped. patient_id, doctor_id and appointment_type
    are resent unchanged.

    Raises:
        ScheduleRuleError: the appointment is cancelled and cannot be moved
    """
    if not is_draggable(appointment):
        raise ScheduleRuleError(
            "Cancelled appointments cannot be rescheduled",
            details={"appointment_id": appointment.id, "status": appointment.status},
        )
    return AppointmentUpdate(
        scheduled_datetime=new_start,
        patient_id=appointment.patient_id,
        doctor_id=appointment.doctor_id,
        appointment_type=appointment.appointment_type,
    )


__all__ = [
    "EVENT_DURATION",
    "classify_kind",
    "event_title",
    "is_draggable",
    "to_calendar_event",
    "to_calendar_events",
    "build_reschedule",
]
