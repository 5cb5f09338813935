from __future__ import annotations

# Re-export key service classes for convenient imports
from .communication import EmailService
from .booking import BookingService
from .reminders import ReminderService

__all__ = ["EmailService", "BookingService", "ReminderService"]

