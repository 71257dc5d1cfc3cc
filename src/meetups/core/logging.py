"""Structured logging setup for the proxy, the join flow and the CLI.

Events go through the standard library root logger at ``LOG_LEVEL`` and are
rendered as JSON in production, console output elsewhere. Tenant fields set
by ``set_tenant_context()`` are merged into every event from contextvars.
"""

from __future__ import annotations

import logging

import structlog

from src.meetups.config import Environment, Settings, get_settings


def _renderer(environment: Environment) -> structlog.types.Processor:
    if environment == Environment.production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_structlog(settings: Settings | None = None) -> None:
    """Configure structlog from ``settings`` (the cached settings by default)."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(settings.ENVIRONMENT),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
