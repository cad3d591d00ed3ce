"""Structured logging setup.

Logs always go to stderr: stdout carries the MCP protocol stream.
"""

import logging
import sys

import structlog

from sysdiag.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog on top of stdlib logging."""
    logging.basicConfig(
        level=getattr(logging, config.level),
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    renderer: structlog.types.Processor
    if config.format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
