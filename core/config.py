from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from typing import Literal, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Local .env files are only honoured outside production
if os.getenv("ENVIRONMENT", "development") != "production":
    load_dotenv()


class RecordStoreBackend(str, Enum):
    notion = "notion"
    mongo = "mongo"


class ReminderMarkPolicy(str, Enum):
    # Flag the record once a reminder was attempted, delivered or not
    mark_on_attempt = "mark_on_attempt"
    # Flag the record only after the mail sender confirmed delivery
    mark_on_delivery = "mark_on_delivery"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    environment: Literal["development", "production", "test"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # Record store
    record_store_backend: RecordStoreBackend = Field(
        default=RecordStoreBackend.notion, alias="RECORD_STORE_BACKEND"
    )
    notion_token: Optional[str] = Field(default=None, alias="NOTION_TOKEN")
    notion_database_id: Optional[str] = Field(default=None, alias="NOTION_DATABASE_ID")
    mongo_uri: str = Field(default="mongodb://localhost:27017", alias="MONGO_URI")
    # Accept MONGO_DB_NAME (preferred) or DATABASE_NAME (legacy)
    database_name: str = Field(
        default="consultations",
        validation_alias=AliasChoices("MONGO_DB_NAME", "DATABASE_NAME"),
    )
    appointments_collection: str = Field(
        default="appointments", alias="MONGO_APPOINTMENTS_COLLECTION"
    )

    # Mail sender (Gmail SMTP by default)
    email_user: Optional[str] = Field(default=None, alias="EMAIL_USER")
    email_pass: Optional[str] = Field(default=None, alias="EMAIL_PASS")
    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    operator_email: Optional[str] = Field(default=None, alias="OPERATOR_EMAIL")
    notify_operator: bool = Field(default=True, alias="NOTIFY_OPERATOR")

    # Scheduling
    appointment_timezone: str = Field(default="UTC", alias="APPOINTMENT_TIMEZONE")
    reminder_lead_hours: int = Field(default=24, alias="REMINDER_LEAD_HOURS")
    reminder_window_minutes: int = Field(default=30, alias="REMINDER_WINDOW_MINUTES")
    reminder_mark_policy: ReminderMarkPolicy = Field(
        default=ReminderMarkPolicy.mark_on_attempt, alias="REMINDER_MARK_POLICY"
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.appointment_timezone)

    @property
    def operator_address(self) -> Optional[str]:
        return self.operator_email or self.email_user


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
