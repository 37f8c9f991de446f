"""
Structured logging setup with structlog
"""
import logging
import sys
from typing import Any, List

import structlog
from structlog.types import EventDict, Processor


def add_severity_level(_logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add a severity field understood by Cloud Logging"""
    event_dict["severity"] = "WARNING" if method_name == "warn" else method_name.upper()
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    is_debug: bool = False,
    service_name: str = "ocr-api"
) -> None:
    """
    Configure structured logging

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        is_debug: Debug mode, renders to the console instead of JSON
        service_name: Bound into every event as ``service``
    """
    level = logging.getLevelName(log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    shared: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_severity_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if is_debug:
        renderer: List[Processor] = [structlog.dev.ConsoleRenderer()]
    else:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]

    structlog.configure(
        processors=shared + renderer,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str) -> Any:
    """Get a structlog logger for a module"""
    return structlog.get_logger(name)
