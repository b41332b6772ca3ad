"""Structured logging setup for applications embedding FundLedger.

Service modules log through `structlog.get_logger(__name__)`. Nothing is
configured at import time; call `configure_logging()` once at startup.
"""
import logging
import sys

import structlog


def configure_logging(level=logging.INFO, json=False, stream=None):
    """Route structlog events through the standard library at `level`.

    Args:
        level: Minimum level name or number.
        json: Render events as JSON lines instead of key=value text.
        stream: Output stream (default: stderr).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=level,
        force=True,
    )

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)

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
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
