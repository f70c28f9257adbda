"""Logging for the schedule service.

Store and API modules log through ``logging.getLogger(__name__)``; this module
only attaches one stdout handler at the configured level. Uvicorn keeps its
own handlers, so its error logger is left to propagate to ours.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Loggers that follow LOG_LEVEL; everything else stays at the root level.
APP_LOGGERS = ("persistence", "endpoints", "app", "body_limit")


def build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": LOG_FORMAT}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["stdout"]},
        "loggers": {name: {"level": level} for name in APP_LOGGERS},
    }


def configure_logging(level: str = "INFO") -> None:
    # Under pytest or a reloader the root logger is already wired up.
    if logging.getLogger().handlers:
        return
    dictConfig(build_config(level))
