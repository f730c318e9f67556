"""Structured logging setup."""

from __future__ import annotations

import logging
import sys

import structlog


class _StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever sys.stderr is at emit time.

    Test runners swap and close sys.stderr between invocations, so the
    stream captured when logging was configured can be stale.
    """

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr
        super().emit(record)


def setup_logging(log_level: str = "INFO", *, json: bool = False) -> None:
    """Configure structlog on top of the standard library logger.

    Diagnostics go to stderr so that command output on stdout stays parseable.
    """
    logging.basicConfig(
        format="%(message)s",
        handlers=[_StderrHandler()],
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance, typically with ``__name__``."""
    return structlog.get_logger(name)
