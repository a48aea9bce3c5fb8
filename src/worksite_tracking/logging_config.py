from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure console logging and, when ``log_file`` is set, a rotating file."""

    level = (level or "INFO").upper()
    handlers = ["console"]

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "worksite_tracking": {
                "level": level,
                "handlers": handlers,
                "propagate": False,
            },
            "mysql.connector": {
                "level": "WARNING",
                "handlers": handlers,
                "propagate": False,
            },
        },
    }

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        logging_config["handlers"]["app_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10,
        }
        handlers.append("app_file")

    logging.config.dictConfig(logging_config)
    logging.getLogger(__name__).info("Logging configured (level=%s, file=%s)", level, log_file or "-")
