from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .appointment_schemas import Appointment


class Prescription(BaseModel):
    # Only the identifying fields are typed; the rest passes through.
    model_config = ConfigDict(extra="allow")

    id: int
    medication_name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    is_active: Optional[bool] = None
    issued_date: Optional[datetime] = None


class ExamResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    exam_type: Optional[str] = None
    status: Optional[str] = None
    requested_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None


class PatientAppointments(BaseModel):
    upcoming: list[Appointment] = Field(default_factory=list)
    past: list[Appointment] = Field(default_factory=list)


class TimeSlot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    available: bool = True
    starts_at: Optional[str] = Field(None, alias="datetime")


class Availability(BaseModel):
    doctor_id: int
    date: str
    slots: list[TimeSlot] = Field(default_factory=list)
    fallback: bool = Field(False, description="True when the default grid was used")


__all__ = [
    "Prescription",
    "ExamResult",
    "PatientAppointments",
    "TimeSlot",
    "Availability",
]
