"""Structured logging for applications using envbind.

envbind logs through the stdlib ``envbind.*`` loggers and never
configures logging on import. :func:`configure_logging` renders those
records (and any structlog loggers) with structlog, as JSON or console
output.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

import structlog

from .settings import Settings, load_settings
from .version import get_version_info

logger = logging.getLogger("envbind.log")


def _resolve_log_level(level: str | None) -> int:
    candidate = (level or "warning").upper()
    value = logging.getLevelName(candidate)
    return value if isinstance(value, int) else logging.WARNING


def configure_logging(settings: Optional[Settings] = None, *, stream: TextIO | None = None) -> None:
    """Render envbind's log records with structlog.

    Args:
        settings: level and format to use; read from the environment when omitted
        stream: where to write, defaults to stderr
    """
    settings = settings or load_settings()
    min_level = _resolve_log_level(settings.log_level)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
    ]

    # structlog loggers go through stdlib logging, like envbind's own records
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
    )

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(min_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    envbind_logger = logging.getLogger("envbind")
    envbind_logger.setLevel(min_level)
    # Remove existing handlers to avoid duplicates
    for existing in envbind_logger.handlers[:]:
        envbind_logger.removeHandler(existing)
    envbind_logger.addHandler(handler)
    envbind_logger.propagate = False

    versions = " ".join(f"{name}={version}" for name, version in get_version_info().items())
    logger.debug(f"Logging configured: level={settings.log_level} format={settings.log_format} {versions}")


__all__ = ["configure_logging"]
