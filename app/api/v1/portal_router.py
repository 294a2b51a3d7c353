from datetime import date
from fastapi import APIRouter, Depends, Query
from app.schemas import Availability, ExamResult, PatientAppointments, Prescription
from app.services.v1 import PortalService
from .deps import get_portal_service

portal_router = APIRouter(
    prefix="/v1/portal",
    tags=["Patient portal"],
)


@portal_router.get(
    "/prescriptions",
    response_model=list[Prescription],
    summary="Patient prescriptions",
)
async def list_prescriptions(service: PortalService = Depends(get_portal_service)):
    return await service.list_prescriptions()


@portal_router.get(
    "/exam-results",
    response_model=list[ExamResult],
    summary="Patient exam results",
)
async def list_exam_results(service: PortalService = Depends(get_portal_service)):
    return await service.list_exam_results()


@portal_router.get(
    "/appointments",
    response_model=PatientAppointments,
    summary="Patient appointments",
    description="Upcoming (soonest first) and past (latest first) appointments of the caller.",
)
async def patient_appointments(service: PortalService = Depends(get_portal_service)):
    return await service.patient_appointments()


@portal_router.get(
    "/availability/{doctor_id}",
    response_model=Availability,
    summary="Doctor availability",
    description="""
    Free slots for one day. When the clinic API cannot answer, a default grid
    (08:00 to 18:00 every 30 minutes) is returned with `fallback: true`.
    """,
)
async def doctor_availability(
    doctor_id: int,
    day: date = Query(..., alias="date"),
    service: PortalService = Depends(get_portal_service),
):
    return await service.availability(doctor_id, day)


__all__ = ["portal_router"]
