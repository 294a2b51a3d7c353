from app.client import ClinicApiClient
from app.schemas import Doctor, Patient
from common import RemoteApiError, get_app_logger
from .payloads import parse_list

logger = get_app_logger(__name__)

PATIENTS_PATH = "/api/patients"
DOCTORS_PATH = "/api/users/doctors"


class DirectoryService:
    """
    Patient and doctor lists for the appointment form selects.

    A failed lookup only costs the select its options: the error is logged
    and an empty list is returned, the caller never sees a notification.
    """

    def __init__(self, api: ClinicApiClient):
        self.api = api

    async def list_patients(self) -> list[Patient]:
        try:
            payload = await self.api.get(PATIENTS_PATH)
        except RemoteApiError as e:
            logger.error(
                "Failed to load patients", status_code=e.status_code, error=e.message
            )
            return []
        return parse_list(Patient, payload, source=PATIENTS_PATH)

    async def list_doctors(self) -> list[Doctor]:
        try:
            payload = await self.api.get(DOCTORS_PATH)
        except RemoteApiError as e:
            logger.error(
                "Failed to load doctors", status_code=e.status_code, error=e.message
            )
            return []
        return parse_list(Doctor, payload, source=DOCTORS_PATH)


__all__ = ["DirectoryService", "PATIENTS_PATH", "DOCTORS_PATH"]
