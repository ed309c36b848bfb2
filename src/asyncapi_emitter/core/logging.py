"""
Emitter Logging - Structured logging for the emission pipeline.

Manifesto:
    Emission runs inside build tools where output is either a terminal or a
    CI log collector. Events are snake_case names with keyword fields
    (``logger.warning("plugin_missing", protocol="foo")``); every event of
    one pipeline run carries the same ``run_id``.

Architecture:
    ::

        configure_logging(level, json_format, service)
        configure_from_settings(EmitterSettings)
            │
            ▼
        TimeStamper ─► merge_contextvars ─► add_log_level ─► add_logger_name
            ─► service.name ─► JSONRenderer | ConsoleRenderer

        EmissionPipeline.run
            └── async with LogContext(run_id=...)   # bound for every service task

Examples:
    >>> from asyncapi_emitter.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> get_logger(__name__).info("channel_emitted", address="orders/created")

Tags:
    logging, structlog, observability, asyncapi-emitter
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from asyncapi_emitter.core.settings import EmitterSettings


DEFAULT_SERVICE = "asyncapi-emitter"

_service_name = DEFAULT_SERVICE


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _service_name)
    return event_dict


def _processors(add_timestamp: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]
    if add_timestamp:
        chain.insert(0, structlog.processors.TimeStamper(fmt="iso"))
    return chain


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = DEFAULT_SERVICE,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the emitter.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: True for JSON lines, False for console, None to pick JSON
            when stdout is not a terminal
        service: Value of ``service.name`` on every event
        add_timestamp: Prefix events with an ISO timestamp
    """
    global _service_name
    _service_name = service

    if json_format is None:
        json_format = not sys.stdout.isatty()
    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=True)
    )
    numeric_level = getattr(logging, level.upper())

    structlog.configure(
        processors=[*_processors(add_timestamp), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    # Align third-party stdlib loggers with the same threshold.
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: EmitterSettings) -> None:
    """Apply ``log_level`` and ``log_format`` from emitter settings."""
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind keys for the duration of a ``with`` / ``async with`` block.

    Contextvars are copied into tasks created inside the block, so services
    gathered by the pipeline all log the run's ``run_id``.
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *exc: object) -> None:
        unbind_context(*self._context)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc: object) -> None:
        self.__exit__(*exc)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
