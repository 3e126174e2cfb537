"""
Structured logging for the match validation services.
Uses structlog; stdlib records are rendered through the same processor chain.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, ContextManager, TextIO

import structlog
from shared.config import Environment, get_settings


def setup_logging(
    service_name: str,
    extra_context: dict[str, Any] | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging for a service.

    Args:
        service_name: The service identifier (validation, batch, ...).
        extra_context: Additional static context fields bound to every log entry.
        stream: Where records go. Defaults to stdout; the CLI passes stderr so
            the summary it prints stays machine-readable.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == Environment.DEV:
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # redis-py logs every reconnect at INFO
    for noisy in ("asyncio", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    bound: dict[str, Any] = {"service": service_name, "instance_id": settings.instance_id}
    if extra_context:
        bound.update(extra_context)
    structlog.contextvars.bind_contextvars(**bound)


def bind_event_context(event_key: str, **extra: Any) -> ContextManager[None]:
    """
    Bind event_key (and any extra fields) to every entry logged inside the block.

    Tasks and worker threads started inside the block inherit the binding,
    so per-match logs from a batch carry the event without passing it around.
    """
    return structlog.contextvars.bound_contextvars(event_key=event_key, **extra)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
