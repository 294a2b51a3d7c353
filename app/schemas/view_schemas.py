from pydantic import BaseModel, Field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from .appointment_schemas import Appointment, AppointmentStatus
from .directory_schemas import Doctor, Patient
from .notification_schemas import Notification


class EventKind(str, Enum):
    CONSULTATION = "consultation"
    PROCEDURE = "procedure"
    FOLLOW_UP = "follow-up"
    EMERGENCY = "emergency"


class CalendarEvent(BaseModel):
    """Calendar projection of one appointment. Rebuilt on every fetch."""

    id: int
    title: str
    start: datetime
    end: datetime
    status: str
    kind: EventKind
    patient_name: str
    doctor_name: str
    draggable: bool
    resizable: bool
    appointment: Appointment


class QueuePriority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


class QueueEntry(BaseModel):
    appointment: Appointment
    wait_minutes: int = Field(0, ge=0)
    priority: QueuePriority = QueuePriority.NORMAL


class QueuePanels(BaseModel):
    """Today's appointments split into the two side-by-side panels."""

    day: date
    waiting: list[QueueEntry] = Field(default_factory=list)
    schedulable: list[Appointment] = Field(default_factory=list)
    current: Optional[Appointment] = None


class AppointmentActions(BaseModel):
    """Which row buttons the dashboard shows for an appointment."""

    can_check_in: bool
    can_cancel: bool
    can_start: bool
    can_finish: bool
    can_edit: bool


class AppointmentRow(BaseModel):
    appointment: Appointment
    status: Optional[AppointmentStatus]
    actions: AppointmentActions


class AppointmentListView(BaseModel):
    """Secretary list: filtered rows plus the data the create/edit form needs."""

    rows: list[AppointmentRow] = Field(default_factory=list)
    total: int = 0
    patients: list[Patient] = Field(default_factory=list)
    doctors: list[Doctor] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


class CalendarView(BaseModel):
    events: list[CalendarEvent] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


class QueueView(BaseModel):
    panels: QueuePanels
    notifications: list[Notification] = Field(default_factory=list)


__all__ = [
    "EventKind",
    "CalendarEvent",
    "QueuePriority",
    "QueueEntry",
    "QueuePanels",
    "AppointmentActions",
    "AppointmentRow",
    "AppointmentListView",
    "CalendarView",
    "QueueView",
]
