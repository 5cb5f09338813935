from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import async_collect_paginated_api

from core.exceptions import RecordStoreError
from models.appointment import AppointmentRecord, AppointmentStatus
from .base import RecordStore


logger = logging.getLogger(__name__)

# Property names of the Notion appointments database
PROP_NAME = "Name"
PROP_EMAIL = "Email"
PROP_PHONE = "Phone"
PROP_DATE_TIME = "Date/Time"
PROP_STATUS = "Status"
PROP_REMINDER_SENT = "Reminder Sent"

_CLIENT_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


def booked_at_filter(slot: datetime) -> Dict[str, Any]:
    return {
        "and": [
            {"property": PROP_DATE_TIME, "date": {"equals": slot.isoformat()}},
            {"property": PROP_STATUS, "select": {"equals": AppointmentStatus.booked.value}},
        ]
    }


def due_reminders_filter(start: datetime, end: datetime) -> Dict[str, Any]:
    return {
        "and": [
            {"property": PROP_STATUS, "select": {"equals": AppointmentStatus.booked.value}},
            {"property": PROP_REMINDER_SENT, "checkbox": {"equals": False}},
            {"property": PROP_DATE_TIME, "date": {"on_or_after": start.isoformat()}},
            {"property": PROP_DATE_TIME, "date": {"on_or_before": end.isoformat()}},
        ]
    }


def record_to_properties(record: AppointmentRecord, time_zone: Optional[str] = None) -> Dict[str, Any]:
    date_value: Dict[str, Any] = {"start": record.date_time}
    # Notion only accepts time_zone for offset-less starts
    if time_zone and datetime.fromisoformat(record.date_time.replace("Z", "+00:00")).tzinfo is None:
        date_value["time_zone"] = time_zone
    return {
        PROP_NAME: {"title": [{"text": {"content": record.name}}]},
        PROP_EMAIL: {"email": record.email or None},
        PROP_PHONE: {"phone_number": record.phone or None},
        PROP_DATE_TIME: {"date": date_value},
        PROP_STATUS: {"select": {"name": record.status.value}},
        PROP_REMINDER_SENT: {"checkbox": record.reminder_sent},
    }


def page_to_record(page: Dict[str, Any]) -> AppointmentRecord:
    props = page.get("properties") or {}

    title = (props.get(PROP_NAME) or {}).get("title") or []
    name = (title[0].get("plain_text") if title else None) or "Guest"
    email = (props.get(PROP_EMAIL) or {}).get("email") or ""
    phone = (props.get(PROP_PHONE) or {}).get("phone_number") or ""
    date_start = ((props.get(PROP_DATE_TIME) or {}).get("date") or {}).get("start") or ""
    select = (props.get(PROP_STATUS) or {}).get("select") or {}
    reminder_sent = bool((props.get(PROP_REMINDER_SENT) or {}).get("checkbox"))

    try:
        status = AppointmentStatus(select.get("name") or AppointmentStatus.booked.value)
    except ValueError:
        # Unknown select options are treated as inactive
        status = AppointmentStatus.cancelled

    return AppointmentRecord(
        id=page.get("id"),
        name=name,
        email=email,
        phone=phone,
        date_time=date_start,
        status=status,
        reminder_sent=reminder_sent,
    )


class NotionRecordStore(RecordStore):
    def __init__(self, client: AsyncClient, database_id: str, *, time_zone: Optional[str] = None) -> None:
        self.client = client
        self.database_id = database_id
        self.time_zone = time_zone

    async def _query(self, filter_: Dict[str, Any]) -> List[AppointmentRecord]:
        try:
            pages = await async_collect_paginated_api(
                self.client.databases.query, database_id=self.database_id, filter=filter_
            )
        except _CLIENT_ERRORS as exc:
            raise RecordStoreError(str(exc)) from exc
        return [page_to_record(page) for page in pages]

    async def find_booked_at(self, slot: datetime) -> List[AppointmentRecord]:
        return await self._query(booked_at_filter(slot))

    async def find_due_reminders(self, start: datetime, end: datetime) -> List[AppointmentRecord]:
        return await self._query(due_reminders_filter(start, end))

    async def create(self, record: AppointmentRecord) -> AppointmentRecord:
        try:
            page = await self.client.pages.create(
                parent={"database_id": self.database_id},
                properties=record_to_properties(record, self.time_zone),
            )
        except _CLIENT_ERRORS as exc:
            raise RecordStoreError(str(exc)) from exc
        logger.info("notion.page_created", extra={"page_id": page.get("id")})
        return record.model_copy(update={"id": page.get("id")})

    async def mark_reminder_sent(self, record_id: str) -> None:
        try:
            await self.client.pages.update(
                page_id=record_id,
                properties={PROP_REMINDER_SENT: {"checkbox": True}},
            )
        except _CLIENT_ERRORS as exc:
            raise RecordStoreError(str(exc)) from exc
