from pydantic import BaseModel, ConfigDict, computed_field
from typing import Optional


def _join_names(*parts: Optional[str]) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip())


class Patient(BaseModel):
    """Minimal identity record used to fill selection lists."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None

    @computed_field
    @property
    def display_name(self) -> str:
        return _join_names(self.first_name, self.last_name)


class Doctor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None

    @computed_field
    @property
    def display_name(self) -> str:
        return (
            self.full_name
            or _join_names(self.first_name, self.last_name)
            or (self.username or "")
        )


__all__ = ["Patient", "Doctor"]
