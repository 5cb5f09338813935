from __future__ import annotations

from datetime import timezone
from itertools import count
from typing import Dict, List, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from api.v1.dependencies import get_booking_service, get_reminder_service
from core.config import AppSettings
from core.exceptions import RecordStoreError
from main import app
from models.appointment import AppointmentRecord, AppointmentStatus, parse_slot
from repositories.base import RecordStore
from services.booking import BookingService
from services.reminders import ReminderService


OPERATOR = "consultant@example.com"


class InMemoryRecordStore(RecordStore):
    """Record store double that evaluates the same predicates in memory."""

    def __init__(self, tz=timezone.utc) -> None:
        self.tz = tz
        self.records: Dict[str, AppointmentRecord] = {}
        self.fail_queries = False
        self.fail_creates = False
        self.fail_mark_ids: Set[str] = set()
        self.marked: List[str] = []
        self._ids = count(1)

    def add(self, **fields) -> AppointmentRecord:
        record = AppointmentRecord(id=f"page-{next(self._ids)}", **fields)
        self.records[record.id] = record
        return record

    def _check(self) -> None:
        if self.fail_queries:
            raise RecordStoreError("record store unreachable")

    async def find_booked_at(self, slot):
        self._check()
        return [
            r for r in self.records.values()
            if r.status == AppointmentStatus.booked and parse_slot(r.date_time, self.tz) == slot
        ]

    async def find_due_reminders(self, start, end):
        self._check()
        return [
            r for r in self.records.values()
            if r.status == AppointmentStatus.booked
            and not r.reminder_sent
            and start <= parse_slot(r.date_time, self.tz) <= end
        ]

    async def create(self, record):
        if self.fail_creates:
            raise RecordStoreError("create rejected")
        stored = record.model_copy(update={"id": f"page-{next(self._ids)}"})
        self.records[stored.id] = stored
        return stored

    async def mark_reminder_sent(self, record_id):
        if record_id in self.fail_mark_ids:
            raise RecordStoreError(f"update failed for {record_id}")
        self.records[record_id] = self.records[record_id].model_copy(update={"reminder_sent": True})
        self.marked.append(record_id)


class FakeMailer:
    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, str]] = []
        self.fail_for: Set[str] = set()

    def send(self, to_email, subject, body):
        if to_email in self.fail_for:
            return False, "SMTP connection refused"
        self.sent.append((to_email, subject, body))
        return True, "<msg@test>"


@pytest.fixture
def cfg() -> AppSettings:
    return AppSettings(
        environment="test",
        email_user=OPERATOR,
        email_pass="app-password",
        appointment_timezone="UTC",
        notify_operator=True,
    )


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def booking_service(store, mailer, cfg) -> BookingService:
    return BookingService(store, mailer, cfg)


@pytest.fixture
def reminder_service(store, mailer, cfg) -> ReminderService:
    return ReminderService(store, mailer, cfg)


@pytest.fixture
def client(booking_service, reminder_service):
    app.dependency_overrides[get_booking_service] = lambda: booking_service
    app.dependency_overrides[get_reminder_service] = lambda: reminder_service
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
