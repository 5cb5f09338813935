from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from models.appointment import AppointmentRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore(ABC):
    """Appointment table hosted by an external service.

    Implementations translate these calls into the backend's filter API and
    raise ``RecordStoreError`` for any client failure.
    """

    @abstractmethod
    async def find_booked_at(self, slot: datetime) -> List[AppointmentRecord]:
        """Booked records whose date/time equals ``slot``."""

    @abstractmethod
    async def find_due_reminders(self, start: datetime, end: datetime) -> List[AppointmentRecord]:
        """Booked, not yet reminded records with date/time in ``[start, end]``."""

    @abstractmethod
    async def create(self, record: AppointmentRecord) -> AppointmentRecord:
        ...

    @abstractmethod
    async def mark_reminder_sent(self, record_id: str) -> None:
        ...
