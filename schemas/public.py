from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.reminder import SweepResult


REQUIRED_FIELDS = ("name", "email", "phone", "dateTime")


class BookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    # e.g. "2025-03-01T11:00:00", local time of the booking calendar
    date_time: Optional[str] = Field(default=None, alias="dateTime")

    @field_validator("name", "email", "phone", "date_time")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    def missing_fields(self) -> List[str]:
        values = {"name": self.name, "email": self.email, "phone": self.phone, "dateTime": self.date_time}
        return [field for field in REQUIRED_FIELDS if not values[field]]


class BookingResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class ReminderFailure(BaseModel):
    record_id: Optional[str] = None
    error: str


class ReminderSweepResponse(BaseModel):
    message: str
    count: int
    sent: int = 0
    failed: int = 0
    failures: List[ReminderFailure] = []

    @classmethod
    def from_result(cls, result: SweepResult) -> "ReminderSweepResponse":
        return cls(
            message="Reminders sent",
            count=result.count,
            sent=result.sent,
            failed=len(result.failures),
            failures=[
                ReminderFailure(record_id=o.record_id, error=o.error or "") for o in result.failures
            ],
        )
