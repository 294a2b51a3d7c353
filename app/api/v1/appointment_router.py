from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from app.schemas import (
    AppointmentFormRequest,
    AppointmentListView,
    CalendarView,
    EventDropRequest,
    MutationOutcome,
    QueueView,
)
from app.services.v1 import AppointmentSchedulingService, StatusFilter
from .deps import get_scheduling_service
from .outcomes import unwrap_outcome

appointment_router = APIRouter(
    prefix="/v1/appointments",
    tags=["Appointments"],
)

_MUTATION_RESPONSES = {
    404: {"description": "Appointment not found"},
    409: {"description": "Transition not allowed from the current status"},
    502: {"description": "Clinic API rejected or failed the request"},
    504: {"description": "Clinic API timed out"},
}


@appointment_router.get(
    "",
    response_model=AppointmentListView,
    status_code=status.HTTP_200_OK,
    summary="List appointments",
    description="""
    Secretary dashboard list. Appointments, patients and doctors are fetched
    concurrently from the clinic API; rows are then filtered by name search
    and status.

    **Upstream Calls:** 3 (in parallel)
    """,
)
async def list_appointments(
    search: str = Query("", description="Matches patient or doctor name, case-insensitive"),
    status_filter: StatusFilter = Query(StatusFilter.ALL, alias="status"),
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return await service.list_view(search, status_filter)


@appointment_router.post(
    "",
    response_model=MutationOutcome,
    status_code=status.HTTP_201_CREATED,
    summary="Create appointment",
    responses={422: {"description": "Required fields missing"}, **_MUTATION_RESPONSES},
)
async def create_appointment(
    form: AppointmentFormRequest,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.create(form), response)


@appointment_router.get(
    "/calendar",
    response_model=CalendarView,
    summary="Calendar events",
    description="One 30-minute event per appointment; cancelled ones are locked.",
)
async def calendar_events(
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return await service.calendar_view()


@appointment_router.get(
    "/queue",
    response_model=QueueView,
    summary="Today's queue",
    description="""
    Today's appointments (clinic time zone) split into the waiting panel
    (checked in or in consultation) and the schedulable panel (not arrived yet).
    """,
)
async def todays_queue(
    now: Optional[datetime] = Query(None, description="Reference time, defaults to now"),
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return await service.queue_view(now=now)


@appointment_router.put(
    "/{appointment_id}",
    response_model=MutationOutcome,
    summary="Edit appointment",
    responses={422: {"description": "Required fields missing"}, **_MUTATION_RESPONSES},
)
async def update_appointment(
    appointment_id: int,
    form: AppointmentFormRequest,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.update(appointment_id, form), response)


@appointment_router.post(
    "/{appointment_id}/drop",
    response_model=MutationOutcome,
    summary="Reschedule from the calendar",
    description="Drag or resize result. Only `start` is used; the list is reloaded either way.",
    responses=_MUTATION_RESPONSES,
)
async def drop_appointment(
    appointment_id: int,
    drop: EventDropRequest,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.reschedule(appointment_id, drop), response)


@appointment_router.post(
    "/{appointment_id}/check-in",
    response_model=MutationOutcome,
    summary="Check in patient",
    responses=_MUTATION_RESPONSES,
)
async def check_in(
    appointment_id: int,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.check_in(appointment_id), response)


@appointment_router.post(
    "/{appointment_id}/cancel",
    response_model=MutationOutcome,
    summary="Cancel appointment",
    responses=_MUTATION_RESPONSES,
)
async def cancel(
    appointment_id: int,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.cancel(appointment_id), response)


@appointment_router.post(
    "/{appointment_id}/start",
    response_model=MutationOutcome,
    summary="Start consultation",
    responses=_MUTATION_RESPONSES,
)
async def start_consultation(
    appointment_id: int,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.start_consultation(appointment_id), response)


@appointment_router.post(
    "/{appointment_id}/finish",
    response_model=MutationOutcome,
    summary="Finish consultation",
    responses=_MUTATION_RESPONSES,
)
async def finish_consultation(
    appointment_id: int,
    response: Response,
    service: AppointmentSchedulingService = Depends(get_scheduling_service),
):
    return unwrap_outcome(await service.finish_consultation(appointment_id), response)


__all__ = ["appointment_router"]
