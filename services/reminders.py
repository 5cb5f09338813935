from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from core.config import AppSettings, ReminderMarkPolicy, settings
from core.exceptions import AppointmentError
from models.appointment import AppointmentRecord
from models.reminder import ReminderOutcome, SweepResult
from repositories.base import RecordStore
from .communication import EmailService


logger = logging.getLogger(__name__)


def reminder_subject(lead_hours: int = 24) -> str:
    return f"Appointment Reminder ({lead_hours}h)"


def reminder_body(name: str, date_time: str, lead_hours: int = 24) -> str:
    return (
        f"Hello {name},\n\nThis is a reminder that your appointment is scheduled in {lead_hours} hours "
        f"(on {date_time}).\n\nThank you!"
    )


def reminder_window(now: datetime, lead: timedelta, half_width: timedelta) -> tuple[datetime, datetime]:
    target = now + lead
    return target - half_width, target + half_width


class ReminderService:
    """Email every booked appointment that starts about a day from now.

    Each matched record is flagged ``reminder_sent`` so later sweeps skip it.
    A failure on one record is recorded in its outcome and the sweep moves on;
    only a failing query aborts the whole run.
    """

    def __init__(self, store: RecordStore, mailer: EmailService, cfg: Optional[AppSettings] = None) -> None:
        self.store = store
        self.mailer = mailer
        self.cfg = cfg or settings

    @property
    def policy(self) -> ReminderMarkPolicy:
        return self.cfg.reminder_mark_policy

    async def run_sweep(self, now: Optional[datetime] = None) -> SweepResult:
        tz = self.cfg.tzinfo
        if now is None:
            now = datetime.now(tz)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=tz)

        start, end = reminder_window(
            now,
            timedelta(hours=self.cfg.reminder_lead_hours),
            timedelta(minutes=self.cfg.reminder_window_minutes),
        )
        logger.info(
            "reminders.sweep_started",
            extra={"window_start": start.isoformat(), "window_end": end.isoformat(), "policy": self.policy.value},
        )

        records = await self.store.find_due_reminders(start, end)

        result = SweepResult(window_start=start.isoformat(), window_end=end.isoformat())
        for record in records:
            result.outcomes.append(await self._remind(record))

        logger.info(
            "reminders.sweep_finished",
            extra={"count": result.count, "sent": result.sent, "failed": len(result.failures)},
        )
        return result

    async def _remind(self, record: AppointmentRecord) -> ReminderOutcome:
        outcome = ReminderOutcome(record_id=record.id)
        lead_hours = self.cfg.reminder_lead_hours
        if record.email:
            try:
                ok, detail = await asyncio.to_thread(
                    self.mailer.send,
                    record.email,
                    reminder_subject(lead_hours),
                    reminder_body(record.name or "Guest", record.date_time, lead_hours),
                )
            except Exception as exc:
                ok, detail = False, str(exc)
            outcome.email_sent = ok
            if not ok:
                outcome.error = detail or "email delivery failed"
        else:
            logger.info("reminders.no_email", extra={"record_id": record.id})

        try:
            if self.policy == ReminderMarkPolicy.mark_on_attempt or outcome.email_sent:
                if record.id is None:
                    raise AppointmentError("record has no identifier")
                await self.store.mark_reminder_sent(record.id)
                outcome.marked = True
        except AppointmentError as exc:
            outcome.error = str(exc)

        if outcome.failed:
            logger.error("reminders.record_failed", extra={"record_id": record.id, "error": outcome.error})
        return outcome
