from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.v1.dependencies import get_booking_service
from core.exceptions import AppointmentError, error_response_parts
from schemas.public import BookingRequest, BookingResponse, ErrorResponse
from services.booking import BookingService


logger = logging.getLogger(__name__)
router = APIRouter(tags=["public"])

BOOKED_MESSAGE = "Appointment booked successfully!"


@router.post(
    "/book-appointment",
    response_model=BookingResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def book_appointment(request: Request, service: BookingService = Depends(get_booking_service)):
    # Body is parsed by hand: a missing field is a 400, a malformed body a 500
    try:
        payload = BookingRequest.model_validate(await request.json())
        record = await service.book(payload)
    except (AppointmentError, json.JSONDecodeError, ValidationError) as exc:
        status_code, body = error_response_parts(exc)
        if status_code >= 500:
            logger.exception("booking.failed", extra={"error": str(exc)})
        return JSONResponse(status_code=status_code, content=body)

    logger.info("booking.confirmed", extra={"record_id": record.id})
    return BookingResponse(message=BOOKED_MESSAGE)


@router.api_route(
    "/book-appointment",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def book_appointment_method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})
