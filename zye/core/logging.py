"""
Application-wide logging initialization

Call `initialize_logging()` once, before the application starts serving.

Logging format:
    2026-01-01 12:00:00,000 INFO zye.services.redirect_service Redirecting abc123
"""

import logging
import logging.config

from zye.core.setting import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def initialize_logging() -> None:
    log_level = settings.LOG_LEVEL.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": LOG_FORMAT,
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "level": log_level,
                "handlers": ["stdout"],
            },
            "loggers": {
                # Outbound metadata fetches log every request at INFO
                "httpx": {"level": "WARNING"},
            },
        }
    )
