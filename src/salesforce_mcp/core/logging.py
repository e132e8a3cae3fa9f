"""Structured logging setup.

Uses structlog for structured JSON logging in production and
human-readable console output in development. Everything is written to
stderr: stdout is reserved for the MCP stdio protocol stream.
"""

from __future__ import annotations

import logging
import sys

import structlog

from src.salesforce_mcp.config import Environment, Settings


def configure_structlog(settings: Settings) -> None:
    """Configure stdlib logging and structlog processors based on environment."""
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.LOG_LEVEL.upper(),
        format="%(message)s",
        force=True,
    )

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.ENVIRONMENT == Environment.production:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
