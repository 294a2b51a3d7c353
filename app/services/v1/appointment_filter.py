"""
Search + status filter behind the appointment list.

The list view calls filter_appointments() on every keystroke; results are
memoised on (appointments, search_term, filter_status), which works because
Appointment is frozen and therefore hashable.
"""

from enum import Enum
from functools import lru_cache
from datetime import timezone, tzinfo
from typing import Iterable, Union
from app.schemas import Appointment, AppointmentStatus
from .clock import to_local

S = AppointmentStatus


class StatusFilter(str, Enum):
    ALL = "all"
    SCHEDULED = S.SCHEDULED.value
    CHECKED_IN = S.CHECKED_IN.value
    IN_CONSULTATION = S.IN_CONSULTATION.value
    COMPLETED = S.COMPLETED.value
    CANCELLED = S.CANCELLED.value
    PENDING = "pending"  # "Em Andamento" on the secretary dashboard


_FILTER_STATUSES: dict[StatusFilter, frozenset[AppointmentStatus]] = {
    StatusFilter.SCHEDULED: frozenset({S.SCHEDULED}),
    StatusFilter.CHECKED_IN: frozenset({S.CHECKED_IN}),
    StatusFilter.IN_CONSULTATION: frozenset({S.IN_CONSULTATION}),
    StatusFilter.COMPLETED: frozenset({S.COMPLETED}),
    StatusFilter.CANCELLED: frozenset({S.CANCELLED}),
    StatusFilter.PENDING: frozenset({S.CHECKED_IN, S.IN_CONSULTATION}),
}


def matches_search(appointment: Appointment, search_term: str) -> bool:
    needle = search_term.strip().casefold()
    if not needle:
        return True
    return (
        needle in appointment.patient_name.casefold()
        or needle in appointment.doctor_name.casefold()
    )


def matches_status(appointment: Appointment, status_filter: StatusFilter) -> bool:
    if status_filter == StatusFilter.ALL:
        return True
    return appointment.status_enum in _FILTER_STATUSES[status_filter]


@lru_cache(maxsize=64)
def _filter_cached(
    appointments: tuple[Appointment, ...],
    search_term: str,
    status_filter: StatusFilter,
) -> tuple[Appointment, ...]:
    return tuple(
        appointment
        for appointment in appointments
        if matches_search(appointment, search_term)
        and matches_status(appointment, status_filter)
    )


def filter_appointments(
    appointments: Iterable[Appointment],
    search_term: str = "",
    filter_status: Union[StatusFilter, str] = StatusFilter.ALL,
) -> list[Appointment]:
    """
    Appointments whose patient or doctor name contains search_term
    (case-insensitive) and whose status falls under filter_status.

    Raises:
        ValueError: filter_status is not a StatusFilter value
    """
    status_filter = StatusFilter(filter_status)
    return list(_filter_cached(tuple(appointments), search_term or "", status_filter))


def clear_filter_cache() -> None:
    _filter_cached.cache_clear()


def sort_by_time(
    appointments: Iterable[Appointment],
    newest_first: bool = False,
    tz: tzinfo = timezone.utc,
) -> list[Appointment]:
    return sorted(
        appointments,
        key=lambda a: to_local(a.scheduled_datetime, tz),
        reverse=newest_first,
    )


__all__ = [
    "StatusFilter",
    "filter_appointments",
    "matches_search",
    "matches_status",
    "clear_filter_cache",
    "sort_by_time",
]
