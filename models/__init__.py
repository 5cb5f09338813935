
from .appointment import AppointmentRecord, AppointmentStatus
from .reminder import ReminderOutcome, SweepResult

__all__ = [
    "AppointmentRecord",
    "AppointmentStatus",
    "ReminderOutcome",
    "SweepResult",
]
