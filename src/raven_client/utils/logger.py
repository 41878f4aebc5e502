"""
Module: logger.py
Description: Structured logging configuration for the Raven client.

Configures structlog for JSON output so delivery diagnostics can be
shipped alongside the host application's own logs.

Key Components:
- JSON output with timestamp and level processors
- Level filtering driven by RAVEN_LOG_LEVEL
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
import os
from datetime import datetime, timezone

import structlog


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog for the client.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


configure_logging(os.getenv("RAVEN_LOG_LEVEL", "INFO"))


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Event accepted", request_id=3, sentry_event_id="fc6d8c0c")
        {"request_id": 3, "sentry_event_id": "fc6d8c0c", "event": "Event accepted", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
