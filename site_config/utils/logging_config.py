"""Structured logging configuration for graby-site-config.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Applications embedding the loader call
:func:`setup_logging` once at start-up to get:
- JSON output for production (Cloud Logging compatible)
- Human-readable output for local development
- Context binding (request or job identifiers set by the caller) via contextvars
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from site_config import config


def is_cloud_environment() -> bool:
    """Check if running in a cloud environment (GKE, Cloud Run, etc.)."""
    return bool(
        os.getenv("KUBERNETES_SERVICE_HOST")
        or os.getenv("K_SERVICE")  # Cloud Run
        or os.getenv("GAE_ENV")  # App Engine
    )


def setup_logging(
    level: str | None = None,
    force_json: bool | None = None,
    service_name: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to ``LOG_LEVEL`` from the environment.
        force_json: Force JSON output even in non-cloud environments.
            Defaults to ``LOG_FORMAT_JSON`` from the environment.
        service_name: Name of the service for log identification
    """
    level = level or config.LOG_LEVEL
    if force_json is None:
        force_json = config.LOG_FORMAT_JSON

    log_level = getattr(logging, level.upper(), logging.INFO)

    use_json = force_json or is_cloud_environment()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)
        processors.insert(
            0,
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            ),
        )

    if use_json:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    logging.getLogger().setLevel(log_level)
    logging.getLogger("site_config").setLevel(log_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key/value pairs to every log line in the current context.

    ``None`` values are dropped so callers can pass optional fields
    unconditionally.
    """
    context = {key: value for key, value in kwargs.items() if value is not None}
    if context:
        structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear bound context from the current execution context."""
    structlog.contextvars.clear_contextvars()
