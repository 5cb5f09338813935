from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from api.v1.router import api_router
from core.config import settings
from core.exceptions import AppointmentError, error_response_parts
from core.logging_config import configure_logging
from db.database import close_clients


PUBLIC_DIR = Path(__file__).resolve().parent / "public"


configure_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Consultation Booking", version="0.1.0")

    origins_env = settings.allowed_origins.strip()
    allow_all_origins = origins_env in {"*", '"*"'}
    if allow_all_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        allowed_origins = [o.strip() for o in origins_env.split(",") if o.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix="/api/v1")

    @app.exception_handler(AppointmentError)
    async def _appointment_error(request: Request, exc: AppointmentError) -> JSONResponse:
        status_code, body = error_response_parts(exc)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request.unhandled_error", extra={"path": request.url.path})
        status_code, body = error_response_parts(exc)
        return JSONResponse(status_code=status_code, content=body)

    @app.on_event("shutdown")
    async def _close_clients():
        await close_clients()

    @app.get("/")
    async def root_health() -> dict[str, str]:
        return {"status": "ok"}

    if PUBLIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")

        @app.get("/form", include_in_schema=False)
        async def booking_form() -> FileResponse:
            return FileResponse(PUBLIC_DIR / "index.html")

    logger.info("Application initialized")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
