r"""
Appointment lifecycle.

    scheduled -> checked_in -> in_consultation -> completed
        \____________\_______________\___________-> cancelled

completed and cancelled are terminal. Rescheduling is a PUT and never moves
an appointment through this machine.
"""

from typing import Optional, Union
from app.schemas import Appointment, AppointmentActions, AppointmentStatus

S = AppointmentStatus

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED})

_FORWARD: dict[AppointmentStatus, AppointmentStatus] = {
    S.SCHEDULED: S.CHECKED_IN,
    S.CHECKED_IN: S.IN_CONSULTATION,
    S.IN_CONSULTATION: S.COMPLETED,
}

StatusLike = Union[AppointmentStatus, str, None]


def _coerce(status: StatusLike) -> Optional[AppointmentStatus]:
    return AppointmentStatus.parse(status)


def is_terminal(status: StatusLike) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def allowed_targets(status: StatusLike) -> frozenset[AppointmentStatus]:
    current = _coerce(status)
    if current is None or current in TERMINAL_STATUSES:
        return frozenset()
    return frozenset({_FORWARD[current], S.CANCELLED})


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    target_status = _coerce(target)
    return target_status is not None and target_status in allowed_targets(current)


def can_check_in(status: StatusLike) -> bool:
    return _coerce(status) == S.SCHEDULED


def can_cancel(status: StatusLike) -> bool:
    return can_transition(status, S.CANCELLED)


def can_start(status: StatusLike) -> bool:
    return _coerce(status) == S.CHECKED_IN


def can_finish(status: StatusLike) -> bool:
    return _coerce(status) == S.IN_CONSULTATION


def actions_for(appointment: Appointment) -> AppointmentActions:
    status = appointment.status
    return AppointmentActions(
        can_check_in=can_check_in(status),
        can_cancel=can_cancel(status),
        can_start=can_start(status),
        can_finish=can_finish(status),
        can_edit=not is_terminal(status),
    )


__all__ = [
    "TERMINAL_STATUSES",
    "is_terminal",
    "allowed_targets",
    "can_transition",
    "can_check_in",
    "can_cancel",
    "can_start",
    "can_finish",
    "actions_for",
]
