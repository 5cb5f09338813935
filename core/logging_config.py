from __future__ import annotations

from logging.config import dictConfig

from core.config import settings


def configure_logging() -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "level": settings.log_level,
                }
            },
            "root": {"handlers": ["console"], "level": settings.log_level},
            "loggers": {
                "services": {"level": settings.log_level, "propagate": True},
                "repositories": {"level": settings.log_level, "propagate": True},
                "cron": {"level": settings.log_level, "propagate": True},
            },
        }
    )
