from __future__ import annotations

import asyncio
import json
import logging
import sys

from core.exceptions import AppointmentError, error_response_parts
from core.logging_config import configure_logging
from db.database import close_clients, get_record_store
from schemas.public import ReminderSweepResponse
from services.communication import EmailService
from services.reminders import ReminderService


logger = logging.getLogger(__name__)


async def run_once() -> int:
    """Run one reminder sweep and print the same body the HTTP trigger returns."""
    try:
        service = ReminderService(get_record_store(), EmailService())
        result = await service.run_sweep()
    except AppointmentError as exc:
        logger.exception("reminders.sweep_failed", extra={"error": str(exc)})
        _, body = error_response_parts(exc)
        print(json.dumps(body))
        return 1
    finally:
        await close_clients()

    response = ReminderSweepResponse.from_result(result)
    print(response.model_dump_json())
    return 0


def main() -> None:
    configure_logging()
    sys.exit(asyncio.run(run_once()))


if __name__ == "__main__":
    main()
