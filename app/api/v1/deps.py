from fastapi import Depends
from app.client import ClinicApiClient, get_clinic_api
from app.services.v1 import (
    AppointmentSchedulingService,
    DirectoryService,
    PortalService,
    ProductService,
)
from common import get_config


async def get_scheduling_service(
    api: ClinicApiClient = Depends(get_clinic_api),
) -> AppointmentSchedulingService:
    return AppointmentSchedulingService(api, tz=get_config().tz)


async def get_directory_service(
    api: ClinicApiClient = Depends(get_clinic_api),
) -> DirectoryService:
    return DirectoryService(api)


async def get_product_service(
    api: ClinicApiClient = Depends(get_clinic_api),
) -> ProductService:
    return ProductService(api)


async def get_portal_service(
    api: ClinicApiClient = Depends(get_clinic_api),
) -> PortalService:
    return PortalService(api, tz=get_config().tz)


__all__ = [
    "get_scheduling_service",
    "get_directory_service",
    "get_product_service",
    "get_portal_service",
]
