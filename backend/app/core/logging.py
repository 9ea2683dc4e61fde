"""Structured Logging

structlog bridged onto stdlib logging. Pipeline stages log keyword events;
per-request fields (classification id, caller request id) travel in
contextvars and are merged into every event.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any, Optional

import structlog
from structlog.types import Processor

from backend.app.core.config import settings

# SDK and transport loggers that log every HTTP round-trip at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncio")


def _shared_processors(log_format: str) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and route stdlib logging through it

    Args:
        level: overrides ``settings.LOG_LEVEL``
        log_format: "json" or "text", overrides ``settings.LOG_FORMAT``
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_format = log_format or settings.LOG_FORMAT

    shared = _shared_processors(log_format)
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """Add context to all subsequent log messages in this context"""
    structlog.contextvars.bind_contextvars(**kwargs)


def bound_log_context(**kwargs: Any) -> AbstractContextManager:
    """Bind context for a ``with`` block only

    On exit the keys are restored to what the caller had bound before, so a
    stage can tag its own events without touching the caller's request fields.
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


def clear_log_context() -> None:
    """Clear all context variables (request boundary only)"""
    structlog.contextvars.clear_contextvars()
