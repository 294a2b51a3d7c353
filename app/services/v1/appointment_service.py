"""
Appointment views and mutations for the secretary and doctor dashboards.

Every mutation follows the same shape:

1. local checks (required fields, status machine); a refusal sends nothing
2. one call to the clinic API
3. a full reload of GET /api/appointments, never a local patch

Status changes and drag-reschedules reload on success and on failure so a
rejected move snaps back. Create and edit reload on success only; on failure
the form keeps its data and no list is returned.

Upstream errors never escape: each one becomes an error notification on the
returned MutationOutcome.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional, Union
from app.client import ClinicApiClient
from app.schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentFormRequest,
    AppointmentListView,
    AppointmentRow,
    AppointmentStatus,
    AppointmentUpdate,
    CalendarView,
    Doctor,
    EventDropRequest,
    MutationOutcome,
    Patient,
    QueueView,
    StatusChange,
)
from app.client.api_client import extract_error_message
from common import RemoteApiError, ScheduleRuleError, get_app_logger
from .appointment_filter import StatusFilter, filter_appointments
from .calendar_adapter import build_reschedule, to_calendar_events
from .directory_service import DirectoryService
from .notifier import Notifier
from .payloads import parse_list
from .queue_partitioner import partition_queue
from .status_machine import (
    StatusLike,
    actions_for,
    can_cancel,
    can_check_in,
    can_finish,
    can_start,
)

logger = get_app_logger(__name__)

S = AppointmentStatus

APPOINTMENTS_PATH = "/api/appointments"


def appointment_path(appointment_id: int) -> str:
    return f"{APPOINTMENTS_PATH}/{appointment_id}"


def status_path(appointment_id: int) -> str:
    return f"{APPOINTMENTS_PATH}/{appointment_id}/status"


def describe_error(error: RemoteApiError, fallback: str) -> str:
    """Server message when the error body has one, else the operation fallback."""
    if error.payload:
        return extract_error_message(error.payload, fallback)
    return error.message or fallback


@dataclass(frozen=True)
class StatusAction:
    operation: str
    target: AppointmentStatus
    allowed: Callable[[StatusLike], bool]
    success_title: str
    error_title: str
    refused: str


CHECK_IN = StatusAction(
    operation="check_in",
    target=S.CHECKED_IN,
    allowed=can_check_in,
    success_title="Patient checked in",
    error_title="Could not check in the patient",
    refused="Only scheduled appointments can be checked in",
)
CANCEL = StatusAction(
    operation="cancel",
    target=S.CANCELLED,
    allowed=can_cancel,
    success_title="Appointment cancelled",
    error_title="Could not cancel the appointment",
    refused="Completed or cancelled appointments cannot be cancelled",
)
START = StatusAction(
    operation="start_consultation",
    target=S.IN_CONSULTATION,
    allowed=can_start,
    success_title="Consultation started",
    error_title="Could not start the consultation",
    refused="Only checked-in patients can start a consultation",
)
FINISH = StatusAction(
    operation="finish_consultation",
    target=S.COMPLETED,
    allowed=can_finish,
    success_title="Consultation finished",
    error_title="Could not finish the consultation",
    refused="Only a consultation in progress can be finished",
)


def _outcome(
    notifier: Notifier,
    *,
    success: bool,
    appointments: Optional[list[Appointment]] = None,
    status_code: int = 200,
) -> MutationOutcome:
    return MutationOutcome(
        success=success,
        notifications=notifier.notifications,
        appointments=appointments,
        status_code=status_code,
    )


def _find(appointments: list[Appointment], appointment_id: int) -> Optional[Appointment]:
    return next((a for a in appointments if a.id == appointment_id), None)


def _missing_fields(form: AppointmentFormRequest) -> list[str]:
    required = {
        "patient_id": form.patient_id,
        "doctor_id": form.doctor_id,
        "scheduled_datetime": form.scheduled_datetime,
    }
    return [name for name, value in required.items() if not value]


class AppointmentSchedulingService:
    def __init__(self, api: ClinicApiClient, tz: tzinfo = timezone.utc):
        self.api = api
        self.tz = tz
        self.directory = DirectoryService(api)

    # Reads

    async def fetch_appointments(self) -> list[Appointment]:
        """
        GET /api/appointments.

        Raises:
            RemoteApiError: the clinic API failed
        """
        payload = await self.api.get(APPOINTMENTS_PATH)
        return parse_list(Appointment, payload, source=APPOINTMENTS_PATH)

    async def reload(self, notifier: Notifier) -> list[Appointment]:
        """Fresh list, or an empty one plus an error notification."""
        try:
            return await self.fetch_appointments()
        except RemoteApiError as e:
            notifier.error(
                "Could not load appointments",
                describe_error(e, "The appointments could not be loaded"),
                status_code=e.status_code,
            )
            return []

    async def load_all(
        self, notifier: Notifier
    ) -> tuple[list[Appointment], list[Patient], list[Doctor]]:
        """
        Initial dashboard load: appointments, patients and doctors fetched
        concurrently. Only an appointments failure is reported to the user.
        """
        appointments, patients, doctors = await asyncio.gather(
            self.reload(notifier),
            self.directory.list_patients(),
            self.directory.list_doctors(),
        )
        return appointments, patients, doctors

    async def list_view(
        self,
        search_term: str = "",
        filter_status: Union[StatusFilter, str] = StatusFilter.ALL,
    ) -> AppointmentListView:
        status_filter = StatusFilter(filter_status)
        notifier = Notifier("list_appointments")
        appointments, patients, doctors = await self.load_all(notifier)

        visible = filter_appointments(appointments, search_term, status_filter)
        return AppointmentListView(
            rows=[
                AppointmentRow(
                    appointment=a, status=a.status_enum, actions=actions_for(a)
                )
                for a in visible
            ],
            total=len(appointments),
            patients=patients,
            doctors=doctors,
            notifications=notifier.notifications,
        )

    async def calendar_view(self) -> CalendarView:
        notifier = Notifier("calendar")
        appointments = await self.reload(notifier)
        return CalendarView(
            events=to_calendar_events(appointments),
            notifications=notifier.notifications,
        )

    async def queue_view(self, now: Optional[datetime] = None) -> QueueView:
        notifier = Notifier("queue")
        appointments = await self.reload(notifier)
        return QueueView(
            panels=partition_queue(appointments, tz=self.tz, now=now),
            notifications=notifier.notifications,
        )

    # Form mutations: reload on success only

    async def create(self, form: AppointmentFormRequest) -> MutationOutcome:
        notifier = Notifier("create_appointment")

        missing = _missing_fields(form)
        if missing:
            notifier.error("Fill in all required fields", ", ".join(missing))
            return _outcome(notifier, success=False, status_code=422)
        if not form.clinic_id:
            notifier.error("Could not identify the clinic")
            return _outcome(notifier, success=False, status_code=422)

        body = AppointmentCreate(
            patient_id=form.patient_id,
            doctor_id=form.doctor_id,
            clinic_id=form.clinic_id,
            scheduled_datetime=form.scheduled_datetime,
            appointment_type=form.appointment_type,
            reason=form.reason or None,
        )
        try:
            await self.api.post(APPOINTMENTS_PATH, body)
        except RemoteApiError as e:
            notifier.error(
                "Could not create the appointment",
                describe_error(e, "The appointment could not be created"),
                status_code=e.status_code,
            )
            return _outcome(notifier, success=False, status_code=e.gateway_status)

        notifier.success("Appointment created")
        appointments = await self.reload(notifier)
        return _outcome(notifier, success=True, appointments=appointments, status_code=201)

    async def update(
        self, appointment_id: int, form: AppointmentFormRequest
    ) -> MutationOutcome:
        notifier = Notifier("update_appointment")

        missing = _missing_fields(form)
        if missing:
            notifier.error("Fill in all required fields", ", ".join(missing))
            return _outcome(notifier, success=False, status_code=422)

        body = AppointmentUpdate(
            scheduled_datetime=form.scheduled_datetime,
            appointment_type=form.appointment_type,
            reason=form.reason or None,
            patient_id=form.patient_id,
            doctor_id=form.doctor_id,
        )
        try:
            await self.api.put(appointment_path(appointment_id), body)
        except RemoteApiError as e:
            notifier.error(
                "Could not update the appointment",
                describe_error(e, "The appointment could not be updated"),
                status_code=e.status_code,
                appointment_id=appointment_id,
            )
            return _outcome(notifier, success=False, status_code=e.gateway_status)

        notifier.success("Appointment updated")
        appointments = await self.reload(notifier)
        return _outcome(notifier, success=True, appointments=appointments)

    # Calendar and status mutations: reload on success and failure

    async def reschedule(
        self, appointment_id: int, drop: EventDropRequest
    ) -> MutationOutcome:
        """
        Drag or resize on the calendar. Only drop.start is used; events keep
        their fixed length.
        """
        notifier = Notifier("reschedule_appointment")
        error_title = "Could not reschedule the appointment"

        located = await self._locate(appointment_id, notifier, error_title)
        if isinstance(located, MutationOutcome):
            return located
        appointments, appointment = located

        try:
            body = build_reschedule(appointment, drop.start)
        except ScheduleRuleError as e:
            notifier.error(error_title, e.message, appointment_id=appointment_id)
            return _outcome(
                notifier,
                success=False,
                appointments=appointments,
                status_code=e.status_code,
            )

        try:
            await self.api.put(appointment_path(appointment_id), body)
        except RemoteApiError as e:
            notifier.error(
                error_title,
                describe_error(e, "The new time was not accepted"),
                status_code=e.status_code,
                appointment_id=appointment_id,
            )
            return _outcome(
                notifier,
                success=False,
                appointments=await self.reload(notifier),
                status_code=e.gateway_status,
            )

        notifier.success("Appointment rescheduled")
        return _outcome(notifier, success=True, appointments=await self.reload(notifier))

    async def check_in(self, appointment_id: int) -> MutationOutcome:
        return await self.change_status(appointment_id, CHECK_IN)

    async def cancel(self, appointment_id: int) -> MutationOutcome:
        return await self.change_status(appointment_id, CANCEL)

    async def start_consultation(self, appointment_id: int) -> MutationOutcome:
        return await self.change_status(appointment_id, START)

    async def finish_consultation(self, appointment_id: int) -> MutationOutcome:
        return await self.change_status(appointment_id, FINISH)

    async def change_status(
        self, appointment_id: int, action: StatusAction
    ) -> MutationOutcome:
        """
        PATCH /api/appointments/{id}/status, gated by the status machine.

        The current status comes from a fresh fetch; a transition the machine
        does not allow is refused with 409 and nothing is sent.
        """
        notifier = Notifier(action.operation)

        located = await self._locate(appointment_id, notifier, action.error_title)
        if isinstance(located, MutationOutcome):
            return located
        appointments, appointment = located

        if not action.allowed(appointment.status):
            error = ScheduleRuleError(action.refused)
            notifier.error(
                action.error_title,
                error.message,
                appointment_id=appointment_id,
                current_status=appointment.status,
            )
            return _outcome(
                notifier,
                success=False,
                appointments=appointments,
                status_code=error.status_code,
            )

        try:
            await self.api.patch(
                status_path(appointment_id), StatusChange(status=action.target)
            )
        except RemoteApiError as e:
            notifier.error(
                action.error_title,
                describe_error(e, "The status change was not accepted"),
                status_code=e.status_code,
                appointment_id=appointment_id,
            )
            return _outcome(
                notifier,
                success=False,
                appointments=await self.reload(notifier),
                status_code=e.gateway_status,
            )

        notifier.success(action.success_title)
        return _outcome(notifier, success=True, appointments=await self.reload(notifier))

    async def _locate(
        self, appointment_id: int, notifier: Notifier, error_title: str
    ) -> Union[tuple[list[Appointment], Appointment], MutationOutcome]:
        try:
            appointments = await self.fetch_appointments()
        except RemoteApiError as e:
            notifier.error(
                error_title,
                describe_error(e, "The appointments could not be loaded"),
                status_code=e.status_code,
            )
            return _outcome(
                notifier, success=False, appointments=[], status_code=e.gateway_status
            )

        appointment = _find(appointments, appointment_id)
        if appointment is None:
            notifier.error(
                error_title,
                f"Appointment {appointment_id} was not found",
                appointment_id=appointment_id,
            )
            return _outcome(
                notifier, success=False, appointments=appointments, status_code=404
            )
        return appointments, appointment


__all__ = [
    "AppointmentSchedulingService",
    "StatusAction",
    "CHECK_IN",
    "CANCEL",
    "START",
    "FINISH",
    "APPOINTMENTS_PATH",
    "appointment_path",
    "status_path",
    "describe_error",
]
