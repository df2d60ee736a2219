"""
Module: logger.py
Description: structlog setup shared by the extractor, sink and runner.

Every log call becomes one JSON object on stdout carrying the message
under "event", the bound key/value pairs, a UTC ISO 8601 "timestamp"
and an upper-case "level". Calls below LOG_LEVEL are filtered out
before any processor runs.

Dependencies: structlog
"""

import logging
import os
import structlog


def _upper_case_level(logger, method_name, event_dict):
    """Store the log method name as an upper-case "level" key."""
    event_dict["level"] = method_name.upper()
    return event_dict


def _processors():
    return [
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _upper_case_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog and the minimum level that is emitted.

    Safe to call again, e.g. from a host runtime that reads its own
    level setting; loggers created afterwards pick up the new filter.

    Raises:
        ValueError: If log_level is not a standard logging level name
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    structlog.configure(
        processors=_processors(),
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


configure_logging(os.environ.get("LOG_LEVEL", "INFO"))


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return the module logger for name (typically __name__).

    Example:
        >>> get_logger(__name__).error("Got status code", sink="http-sink", status_code=500)
        {"sink": "http-sink", "status_code": 500, "event": "Got status code", "timestamp": "...", "level": "ERROR"}
    """
    return structlog.get_logger(name)
