"""
structlog setup for the API process and the seed script.

Every event carries the service name and an upper-case ``severity``. The
tracing middleware binds ``request_id`` through structlog.contextvars, so
engine and storage events emitted while serving a request are correlated
without passing ids around.

Rendering:
- ``log_format=json`` outside dev mode: one JSON object per line
- anything else: coloured console output
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from assetwatch.config import Settings, get_settings

SERVICE_NAME = "assetwatch"

_configured = False


def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def add_severity(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["severity"] = method_name.upper()
    return event_dict


def unwrap_enums(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Log enum fields (statuses, criticalities) by value so JSON stays flat."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.log_format == "json" and not settings.dev_mode:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure stdlib logging and structlog once per process.

    Later calls are no-ops so importing the app from the seed script does not
    reset the pipeline.
    """
    global _configured
    if _configured:
        return

    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_service,
            add_severity,
            unwrap_enums,
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Named structlog logger; routers pass ``__name__``."""
    return structlog.get_logger(name)
