"""
Logging setup for the Lead Intent Scoring Engine
"""

import logging
from typing import Optional

from .settings import LOGGING_CONFIG


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure the root logger.

    json: Structured JSON via python-json-logger (for log collectors).
    text: Human-readable format (for local development).

    Args:
        level: Log level name, defaults to LOG_LEVEL
        fmt: "text" or "json", defaults to LOG_FORMAT
    """
    log_level = (level or LOGGING_CONFIG["level"]).upper()
    log_format = (fmt or LOGGING_CONFIG["format"]).lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Remove existing handlers to avoid duplicate output
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if log_format == "json":
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={
                    "asctime": "timestamp",
                    "levelname": "level",
                    "name": "logger",
                },
                static_fields={"app": "lead-intent-scoring"},
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)
