from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import Optional
from .appointment_schemas import Appointment


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """A toast: short title plus optional detail line."""

    level: NotificationLevel
    title: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)


class MutationOutcome(BaseModel):
    """
    Result of a dashboard action.

    appointments is the list as reloaded after the action (None when the
    action does not reload, e.g. a create form that failed validation).
    """

    success: bool
    notifications: list[Notification] = Field(default_factory=list)
    appointments: Optional[list[Appointment]] = None
    status_code: int = Field(200, exclude=True)


__all__ = ["NotificationLevel", "Notification", "MutationOutcome"]
