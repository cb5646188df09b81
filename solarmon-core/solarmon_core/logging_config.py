"""
Logging Setup
=============
Structured logging for services embedding the API client.

Usage:
    from solarmon_core.logging_config import setup_logging

    setup_logging(service_name="solarmon-sync", level="INFO")
"""

import logging
import sys
from typing import Optional

import structlog

from solarmon_core.settings import get_settings


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: bool = True,
) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        service_name: Bound into every log line as ``service``
        level: Logging level; defaults to ``SOLARMON_LOG_LEVEL``
        json_output: JSON lines for production, console renderer otherwise
    """
    if level is None:
        level = get_settings().log_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)

    structlog.get_logger(__name__).info("logging_configured", level=level.upper())
