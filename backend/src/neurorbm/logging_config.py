# backend/src/neurorbm/logging_config.py
from __future__ import annotations

import logging
import logging.config
import os

from .observability.logging_context import install_logrecord_factory

LOG_LEVEL = os.getenv("NR_LOG_LEVEL", "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,  # no silencia loggers del driver
    "filters": {
        "run_id": {
            "()": "neurorbm.observability.logging_filters.RunIdLogFilter"
        }
    },
    "formatters": {
        "default": {
            # Incluimos run_id en todas las líneas
            "format": "%(asctime)s %(levelname)s [run=%(run_id)s] %(name)s: %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "filters": ["run_id"],
            "formatter": "default",
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    },
    "loggers": {
        # Logger de la librería
        "neurorbm": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False
        }
    }
}


def setup_logging(level: str | None = None) -> None:
    """Aplica LOGGING; ``level`` sobreescribe NR_LOG_LEVEL para el logger neurorbm."""
    config = LOGGING
    if level:
        config = {**LOGGING, "loggers": {"neurorbm": {**LOGGING["loggers"]["neurorbm"], "level": level.upper()}}}
    install_logrecord_factory()
    logging.config.dictConfig(config)
