from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core.config import AppSettings, settings
from core.exceptions import MailDeliveryError, MissingFieldsError, SlotConflictError
from models.appointment import AppointmentRecord, AppointmentStatus, parse_slot
from repositories.base import RecordStore
from schemas.public import BookingRequest
from .communication import EmailService


logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Appointment Confirmation"
OPERATOR_SUBJECT = "New Appointment Booked"


def confirmation_body(name: str, date_time: str) -> str:
    return f"Hello {name},\n\nYour appointment has been booked for {date_time}.\n\nThank you!"


def operator_body(name: str, email: str, phone: str, date_time: str) -> str:
    return f"A new appointment was booked by {name} ({email}, {phone}) for {date_time}."


class BookingService:
    """Conflict-check, persist and confirm a consultation booking.

    The check and the create are two separate calls to the record store, so
    two simultaneous requests for the same slot can both succeed. Nothing is
    rolled back when an email fails after the record was created.
    """

    def __init__(self, store: RecordStore, mailer: EmailService, cfg: Optional[AppSettings] = None) -> None:
        self.store = store
        self.mailer = mailer
        self.cfg = cfg or settings

    async def _send(self, to_email: str, subject: str, body: str) -> None:
        ok, detail = await asyncio.to_thread(self.mailer.send, to_email, subject, body)
        if not ok:
            raise MailDeliveryError(f"Failed to send '{subject}' to {to_email}: {detail}")

    async def book(self, request: BookingRequest) -> AppointmentRecord:
        missing = request.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        slot = parse_slot(request.date_time, self.cfg.tzinfo)

        existing = await self.store.find_booked_at(slot)
        if existing:
            logger.info("booking.conflict", extra={"date_time": request.date_time, "matches": len(existing)})
            raise SlotConflictError()

        record = await self.store.create(
            AppointmentRecord(
                name=request.name,
                email=request.email,
                phone=request.phone,
                date_time=request.date_time,
                status=AppointmentStatus.booked,
                reminder_sent=False,
            )
        )
        logger.info("booking.created", extra={"record_id": record.id, "date_time": record.date_time})

        await self._send(record.email, CONFIRMATION_SUBJECT, confirmation_body(record.name, record.date_time))

        operator = self.cfg.operator_address
        if self.cfg.notify_operator and operator:
            await self._send(
                operator,
                OPERATOR_SUBJECT,
                operator_body(record.name, record.email, record.phone, record.date_time),
            )
        return record
