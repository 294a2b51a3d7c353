from fastapi import APIRouter, Depends
from app.schemas import Doctor, Patient
from app.services.v1 import DirectoryService
from .deps import get_directory_service

directory_router = APIRouter(
    prefix="/v1/directory",
    tags=["Directory"],
)


@directory_router.get(
    "/patients",
    response_model=list[Patient],
    summary="Patients for selection lists",
    description="Empty list when the clinic API fails; the failure is only logged.",
)
async def list_patients(service: DirectoryService = Depends(get_directory_service)):
    return await service.list_patients()


@directory_router.get(
    "/doctors",
    response_model=list[Doctor],
    summary="Doctors for selection lists",
    description="Empty list when the clinic API fails; the failure is only logged.",
)
async def list_doctors(service: DirectoryService = Depends(get_directory_service)):
    return await service.list_doctors()


__all__ = ["directory_router"]
