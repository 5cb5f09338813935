from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from core.config import AppSettings, get_settings
from db.database import get_record_store
from repositories.base import RecordStore
from services.booking import BookingService
from services.communication import EmailService
from services.reminders import ReminderService


@lru_cache(maxsize=1)
def get_mailer() -> EmailService:
    return EmailService(get_settings())


def get_booking_service(
    store: RecordStore = Depends(get_record_store),
    mailer: EmailService = Depends(get_mailer),
    cfg: AppSettings = Depends(get_settings),
) -> BookingService:
    return BookingService(store, mailer, cfg)


def get_reminder_service(
    store: RecordStore = Depends(get_record_store),
    mailer: EmailService = Depends(get_mailer),
    cfg: AppSettings = Depends(get_settings),
) -> ReminderService:
    return ReminderService(store, mailer, cfg)
