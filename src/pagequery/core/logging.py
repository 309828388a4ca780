"""
Pagequery Logging - Standardized structured logging.

This module provides the structlog configuration used by every pagequery
component, plus a small timing helper for pipeline stages.

Manifesto:
    Each pipeline invocation is a one-shot computation; when a report looks
    wrong, the log is the only record of how many rows each stage kept.

    - **Structures:** JSON output for log aggregation
    - **Correlates:** the query and context page are bound once per run
    - **Flexes:** Console output for development, JSON for production

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="pagequery")
            ↓
        structlog processor chain:
          1. merge_contextvars   (query, context_page from LogContext)
          2. add_log_level
          3. TimeStamper(iso)
          4. service metadata
          5. JSONRenderer  |  ConsoleRenderer (tty)

        logger = get_logger(__name__)        # bound with logger=<name>
        with log_step("pagequery.sort", rows=42):
            ...
        → {"event": "pagequery.sort.end", "rows": 42, "duration_ms": 0.31}

Examples:
    >>> from pagequery.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("debugging", rows=3)

Tags:
    logging, structlog, observability, json-logging, pagequery
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "pagequery"


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    """Write to whatever ``sys.stderr`` is at call time (tests redirect it)."""
    return structlog.PrintLogger(file=sys.stderr)


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    name = event_dict.pop("logger_name", None)
    if name is not None:
        event_dict.setdefault("logger", name)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "pagequery",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
        _add_logger_name,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    if name is None:
        return structlog.get_logger()
    # "logger" is a reserved get_logger keyword; renamed back by _add_logger_name
    return structlog.get_logger(logger_name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(query="ns:wiki", context_page="wiki:start"):
            logger.info("pagequery.lookup")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


@dataclass
class StepTimer:
    """Timing and metrics of one logged step."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> StepTimer:
        """Add a metric to include in the end-of-step log line."""
        self.metrics[key] = value
        return self


@contextmanager
def log_step(event: str, **metrics: Any) -> Iterator[StepTimer]:
    """
    Log ``<event>.end`` with ``duration_ms`` and any metrics added on the timer.

    Usage:
        with log_step("pagequery.filter", rows_in=len(rows)) as step:
            rows = filter_rows(rows, spec)
            step.add_metric("rows_out", len(rows))
    """
    logger = get_logger("pagequery.timing")
    timer = StepTimer(step=event, metrics=dict(metrics))
    try:
        yield timer
    finally:
        timer.ended_at = time.perf_counter()
        logger.debug(f"{event}.end", duration_ms=round(timer.duration_ms, 2), **timer.metrics)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
    "StepTimer",
    "log_step",
]
