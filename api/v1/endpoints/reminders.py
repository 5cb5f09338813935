from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.v1.dependencies import get_reminder_service
from core.exceptions import AppointmentError, error_response_parts
from schemas.public import ErrorResponse, ReminderSweepResponse
from services.reminders import ReminderService


logger = logging.getLogger(__name__)
router = APIRouter(tags=["reminders"])


# GET is accepted too for schedulers that can only issue GETs
@router.api_route(
    "/send-reminders",
    methods=["GET", "POST"],
    response_model=ReminderSweepResponse,
    responses={500: {"model": ErrorResponse}},
)
async def send_reminders(service: ReminderService = Depends(get_reminder_service)):
    try:
        result = await service.run_sweep()
    except AppointmentError as exc:
        logger.exception("reminders.sweep_failed", extra={"error": str(exc)})
        status_code, body = error_response_parts(exc)
        return JSONResponse(status_code=status_code, content=body)
    return ReminderSweepResponse.from_result(result)
