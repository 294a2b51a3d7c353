"""
Today's queue for the doctor and reception screens.

partition_queue() splits the appointments scheduled for the current clinic
day into two disjoint panels:

- waiting: patients on site (checked_in or in_consultation), the one in
  consultation first, then by scheduled time
- schedulable: booked but not arrived (scheduled, including the "confirmed"
  label), by scheduled time

completed and cancelled appointments appear in neither panel.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, Optional
from app.schemas import (
    Appointment,
    AppointmentStatus,
    QueueEntry,
    QueuePanels,
    QueuePriority,
)
from .clock import local_today, minutes_between, to_local

S = AppointmentStatus

HIGH_PRIORITY_WAIT_MINUTES = 30

WAITING_STATUSES = frozenset({S.CHECKED_IN, S.IN_CONSULTATION})
SCHEDULABLE_STATUSES = frozenset({S.SCHEDULED})


def is_on_day(appointment: Appointment, day: date, tz: tzinfo) -> bool:
    return to_local(appointment.scheduled_datetime, tz).date() == day


def wait_minutes(appointment: Appointment, now: datetime, tz: tzinfo) -> int:
    arrived = appointment.checked_in_at or appointment.scheduled_datetime
    return minutes_between(arrived, now, tz)


def _queue_entry(appointment: Appointment, now: datetime, tz: tzinfo) -> QueueEntry:
    waited = wait_minutes(appointment, now, tz)
    return QueueEntry(
        appointment=appointment,
        wait_minutes=waited,
        priority=(
            QueuePriority.HIGH
            if waited > HIGH_PRIORITY_WAIT_MINUTES
            else QueuePriority.NORMAL
        ),
    )


def partition_queue(
    appointments: Iterable[Appointment],
    today: Optional[date] = None,
    tz: tzinfo = timezone.utc,
    now: Optional[datetime] = None,
) -> QueuePanels:
    """
    Build QueuePanels for `today` (defaults to the current date in `tz`).

    `now` drives the wait-time figures and defaults to the current time.
    """
    now = now or datetime.now(timezone.utc)
    day = today or local_today(tz, now)

    waiting: list[Appointment] = []
    schedulable: list[Appointment] = []
    for appointment in appointments:
        if not is_on_day(appointment, day, tz):
            continue
        status = appointment.status_enum
        if status in WAITING_STATUSES:
            waiting.append(appointment)
        elif status in SCHEDULABLE_STATUSES:
            schedulable.append(appointment)

    waiting.sort(
        key=lambda a: (
            a.status_enum != S.IN_CONSULTATION,
            to_local(a.scheduled_datetime, tz),
        )
    )
    schedulable.sort(key=lambda a: to_local(a.scheduled_datetime, tz))

    current = next(
        (a for a in waiting if a.status_enum == S.IN_CONSULTATION),
        None,
    )

    return QueuePanels(
        day=day,
        waiting=[_queue_entry(a, now, tz) for a in waiting],
        schedulable=schedulable,
        current=current,
    )


__all__ = [
    "HIGH_PRIORITY_WAIT_MINUTES",
    "WAITING_STATUSES",
    "SCHEDULABLE_STATUSES",
    "is_on_day",
    "wait_minutes",
    "partition_queue",
]
