"""
Logging factory with structured logging and sensitive-data masking.
"""

import logging
import os

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import (
    TimeStamper,
    add_log_level,
    CallsiteParameter,
    CallsiteParameterAdder,
    JSONRenderer,
    KeyValueRenderer,
    UnicodeDecoder,
)
from structlog.stdlib import (
    ProcessorFormatter,
    add_logger_name,
    BoundLogger,
)

from .sanitizers import SensitiveDataProcessor


def get_logger(name: str) -> BoundLogger:
    """
    Get a structured logger bound to the rules engine service context.

    Args:
        name: Logger name (e.g., "engine.runtime", "engine.registry")

    Returns:
        Structured logger
    """
    return structlog.get_logger(
        name,
        service="rulesengine",
        version=os.getenv("SERVICE_VERSION", "1.0.0"),
    )


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
    json_logs: bool = True,
    include_caller_info: bool = True,
) -> None:
    """
    Configure structured logging.

    Args:
        environment: Environment name (development, staging, production, test)
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output JSON formatted logs
        include_caller_info: Include file, function, and line number
    """
    processors = [
        merge_contextvars,
        TimeStamper(fmt="ISO", utc=True),
        add_log_level,
        add_logger_name,
        UnicodeDecoder(),
        SensitiveDataProcessor(),
    ]

    if include_caller_info and environment == "development":
        processors.append(
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ],
                additional_ignores=["structlog", "logging"],
            )
        )

    if json_logs:
        renderer = JSONRenderer(sort_keys=True, default=str)
    else:
        renderer = KeyValueRenderer(key_order=["timestamp", "level", "event", "logger"])

    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level_int(log_level)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Records emitted through the standard library get the same pipeline
    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_get_log_level_int(log_level))


def _get_log_level_int(level: str) -> int:
    """Convert string log level to integer."""
    levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return levels.get(level.upper(), logging.INFO)
