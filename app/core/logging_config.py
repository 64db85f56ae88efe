from __future__ import annotations

import logging
from logging.config import dictConfig

from app.core.config import Settings


def configure_logging(settings: Settings) -> None:
    handlers: dict[str, dict[str, object]] = {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    }

    if settings.log_json:
        log_format = (
            '{"level":"%(levelname)s","time":"%(asctime)s",'
            '"logger":"%(name)s","message":"%(message)s"}'
        )
    else:
        log_format = "%(levelname)s %(asctime)s %(name)s %(message)s"

    formatters: dict[str, dict[str, object]] = {
        "standard": {"format": log_format},
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "root": {
                "level": settings.log_level,
                "handlers": ["default"],
            },
            # Quiet per-request noise from the HTTP clients.
            "loggers": {
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )

    logging.getLogger("uvicorn.error").setLevel(settings.log_level)
