from __future__ import annotations

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient
from notion_client import AsyncClient

from core.config import RecordStoreBackend, settings
from core.exceptions import RecordStoreError
from repositories.base import RecordStore
from repositories.mongo import MongoRecordStore
from repositories.notion import NotionRecordStore

# ---------------- Clients (one per process) ----------------

@lru_cache(maxsize=1)
def get_motor_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(settings.mongo_uri, appname="consultation-booking")


@lru_cache(maxsize=1)
def get_notion_client() -> AsyncClient:
    return AsyncClient(auth=settings.notion_token)


# ---------------- Record store ----------------

def get_record_store() -> RecordStore:
    if settings.record_store_backend == RecordStoreBackend.mongo:
        return MongoRecordStore(
            get_motor_client()[settings.database_name],
            collection=settings.appointments_collection,
            tz=settings.tzinfo,
        )
    if not settings.notion_database_id:
        raise RecordStoreError("NOTION_DATABASE_ID is not configured")
    return NotionRecordStore(
        get_notion_client(),
        settings.notion_database_id,
        time_zone=settings.appointment_timezone,
    )


async def close_clients() -> None:
    if get_motor_client.cache_info().currsize:
        get_motor_client().close()
    if get_notion_client.cache_info().currsize:
        await get_notion_client().aclose()
