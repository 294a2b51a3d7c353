from pydantic import BaseModel, Field, ConfigDict, field_validator, field_serializer
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"  # Booked, patient not arrived yet
    CHECKED_IN = "checked_in"  # Patient arrived at the clinic
    IN_CONSULTATION = "in_consultation"  # Patient is with the doctor
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> Optional["AppointmentStatus"]:
        """
        Lenient lookup for values coming back from the API.

        Accepts any casing, enum-shaped dicts ({"value": "scheduled"}) and the
        older labels in _STATUS_ALIASES; returns None for anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            value = value.get("value")
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        try:
            return cls(_STATUS_ALIASES.get(key, key))
        except ValueError:
            return None


# Labels some endpoints still return for the same states.
_STATUS_ALIASES = {
    "confirmed": AppointmentStatus.SCHEDULED.value,
    "in_progress": AppointmentStatus.IN_CONSULTATION.value,
}


class Appointment(BaseModel):
    """
    Appointment as returned by GET /api/appointments.

    status is kept as the raw lowercase string so labels the backend adds
    later (e.g. "confirmed") survive a round trip; use status_enum for logic.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    scheduled_datetime: datetime
    status: str
    appointment_type: Optional[str] = None
    patient_id: int
    doctor_id: int
    patient_name: str = ""
    doctor_name: str = ""

    clinic_id: Optional[int] = None
    notes: Optional[str] = None
    reason: Optional[str] = None
    duration_minutes: Optional[int] = None
    checked_in_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v: Any) -> str:
        if isinstance(v, dict):
            v = v.get("value", "")
        if isinstance(v, Enum):
            v = v.value
        return str(v or "").strip().lower()

    @field_validator("patient_name", "doctor_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return v or ""

    @property
    def status_enum(self) -> Optional[AppointmentStatus]:
        return AppointmentStatus.parse(self.status)


class AppointmentCreate(BaseModel):
    # POST /api/appointments
    patient_id: int = Field(..., gt=0)
    doctor_id: int = Field(..., gt=0)
    clinic_id: int = Field(..., gt=0)
    scheduled_datetime: datetime = Field(..., description="Start of the appointment")
    appointment_type: str = Field("consultation", max_length=50)
    reason: Optional[str] = Field(None, max_length=1000)

    @field_serializer("scheduled_datetime")
    def serialize_datetime(self, v: datetime) -> str:
        return v.isoformat()


class AppointmentUpdate(BaseModel):
    # PUT /api/appointments/{id}; never carries status
    scheduled_datetime: Optional[datetime] = None
    appointment_type: Optional[str] = Field(None, max_length=50)
    reason: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = None
    patient_id: Optional[int] = Field(None, gt=0)
    doctor_id: Optional[int] = Field(None, gt=0)

    @field_serializer("scheduled_datetime")
    def serialize_datetime(self, v: Optional[datetime]) -> Optional[str]:
        return v.isoformat() if v else None


class StatusChange(BaseModel):
    # PATCH /api/appointments/{id}/status
    status: AppointmentStatus


class AppointmentFormRequest(BaseModel):
    """
    Create/edit form as posted by the dashboard.

    Everything is optional here so a half-filled form reaches the service and
    gets the "fill all required fields" notification instead of a 422.
    """

    patient_id: Optional[int] = Field(None, ge=0)
    doctor_id: Optional[int] = Field(None, ge=0)
    clinic_id: Optional[int] = Field(None, ge=0)
    scheduled_datetime: Optional[datetime] = None
    appointment_type: str = "consultation"
    reason: Optional[str] = None


class EventDropRequest(BaseModel):
    # What the calendar reports after a drag or a resize
    start: datetime
    end: Optional[datetime] = None


__all__ = [
    "AppointmentStatus",
    "Appointment",
    "AppointmentCreate",
    "AppointmentUpdate",
    "StatusChange",
    "AppointmentFormRequest",
    "EventDropRequest",
]
