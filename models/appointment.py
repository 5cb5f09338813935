from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import InvalidDateTimeError


SLOT_FORMAT = "%Y-%m-%dT%H:%M:%S"


class AppointmentStatus(str, Enum):
    booked = "Booked"
    completed = "Completed"
    cancelled = "Cancelled"


class AppointmentRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    email: str = ""
    phone: str = ""
    # ISO-8601 text exactly as submitted/stored, e.g. "2025-03-01T11:00:00"
    date_time: str = Field(alias="dateTime")
    status: AppointmentStatus = AppointmentStatus.booked
    reminder_sent: bool = Field(default=False, alias="reminderSent")


def parse_slot(value: str, tz: tzinfo) -> datetime:
    """Turn a submitted dateTime into an aware datetime.

    Strings without an offset are local times in ``tz``; strings carrying an
    offset (or a trailing ``Z``) keep it.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError) as exc:
        raise InvalidDateTimeError(f"Unrecognised dateTime: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def format_slot(value: datetime) -> str:
    return value.strftime(SLOT_FORMAT)
