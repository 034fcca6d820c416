"""Logging setup for the API process.

Routes the root logger to stdout, stderr or a file, driven by the
``CAMPUS_EVENTS_LOG_*`` settings.
"""

from __future__ import annotations

import logging.config
import sys

from campus_events.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    level = settings.log_level.upper()
    destination = settings.log_destination.lower()

    if destination == "file":
        if not settings.log_file:
            raise RuntimeError(
                "CAMPUS_EVENTS_LOG_FILE is required when CAMPUS_EVENTS_LOG_DESTINATION=file"
            )
        handler = {
            "class": "logging.FileHandler",
            "level": level,
            "filename": settings.log_file,
            "formatter": "standard",
        }
    else:
        handler = {
            "class": "logging.StreamHandler",
            "level": level,
            "stream": sys.stdout if destination == "stdout" else sys.stderr,
            "formatter": "standard",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {"default": handler},
            "root": {"handlers": ["default"], "level": level},
        }
    )
