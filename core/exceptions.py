from __future__ import annotations

from typing import Any, Dict, Optional, Tuple


class AppointmentError(Exception):
    """Base error converted into a JSON response at the endpoint layer."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(details or self.error)
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.status_code >= 500:
            body["details"] = self.details or self.error
        return body


class MissingFieldsError(AppointmentError):
    status_code = 400
    error = "Missing required fields."

    def __init__(self, missing: list[str]) -> None:
        super().__init__(", ".join(missing))
        self.missing = missing


class InvalidDateTimeError(AppointmentError):
    status_code = 400
    error = "Invalid dateTime format."


class SlotConflictError(AppointmentError):
    status_code = 409
    error = "This slot is already booked!"


class RecordStoreError(AppointmentError):
    pass


class MailDeliveryError(AppointmentError):
    pass


def error_response_parts(exc: Exception) -> Tuple[int, Dict[str, Any]]:
    """Status code and JSON body for any exception reaching an endpoint."""
    if isinstance(exc, AppointmentError):
        return exc.status_code, exc.to_body()
    return 500, {"error": AppointmentError.error, "details": str(exc)}
