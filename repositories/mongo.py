from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from core.exceptions import RecordStoreError
from models.appointment import AppointmentRecord, AppointmentStatus, parse_slot
from .base import RecordStore, utcnow


def _as_utc(value: datetime) -> datetime:
    # Stored as naive UTC, the way pymongo hands datetimes back
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def booked_at_query(slot: datetime) -> Dict[str, Any]:
    return {"starts_at": _as_utc(slot), "status": AppointmentStatus.booked.value}


def due_reminders_query(start: datetime, end: datetime) -> Dict[str, Any]:
    return {
        "status": AppointmentStatus.booked.value,
        "reminder_sent": False,
        "starts_at": {"$gte": _as_utc(start), "$lte": _as_utc(end)},
    }


def doc_to_record(doc: Dict[str, Any]) -> AppointmentRecord:
    return AppointmentRecord(
        id=str(doc["_id"]) if doc.get("_id") is not None else None,
        name=doc.get("name") or "Guest",
        email=doc.get("email") or "",
        phone=doc.get("phone") or "",
        date_time=doc.get("date_time") or "",
        status=AppointmentStatus(doc.get("status") or AppointmentStatus.booked.value),
        reminder_sent=bool(doc.get("reminder_sent")),
    )


class MongoRecordStore(RecordStore):
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        *,
        collection: str = "appointments",
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.db = db
        self.collection = collection
        self.tz = tz

    @staticmethod
    def _ensure_object_id(value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        try:
            return ObjectId(str(value))
        except InvalidId as exc:
            raise RecordStoreError(f"Invalid record id: {value!r}") from exc

    async def _find_many(self, query: Dict[str, Any]) -> List[AppointmentRecord]:
        try:
            cursor = self.db[self.collection].find(query)
            return [doc_to_record(doc) async for doc in cursor]
        except PyMongoError as exc:
            raise RecordStoreError(str(exc)) from exc

    async def find_booked_at(self, slot: datetime) -> List[AppointmentRecord]:
        return await self._find_many(booked_at_query(slot))

    async def find_due_reminders(self, start: datetime, end: datetime) -> List[AppointmentRecord]:
        return await self._find_many(due_reminders_query(start, end))

    async def create(self, record: AppointmentRecord) -> AppointmentRecord:
        now = utcnow()
        starts_at = parse_slot(record.date_time, self.tz)
        doc = {
            "name": record.name,
            "email": record.email,
            "phone": record.phone,
            "date_time": record.date_time,
            "starts_at": _as_utc(starts_at),
            "status": record.status.value,
            "reminder_sent": record.reminder_sent,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.db[self.collection].insert_one(doc)
        except PyMongoError as exc:
            raise RecordStoreError(str(exc)) from exc
        return record.model_copy(update={"id": str(result.inserted_id)})

    async def mark_reminder_sent(self, record_id: str) -> None:
        try:
            await self.db[self.collection].update_one(
                {"_id": self._ensure_object_id(record_id)},
                {"$set": {"reminder_sent": True, "updated_at": utcnow()}},
            )
        except PyMongoError as exc:
            raise RecordStoreError(str(exc)) from exc
