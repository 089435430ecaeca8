"""Structured logging configuration for Lightspeed.

The chat REPL owns stdout: answers and rich panels are written
there. Log events go to stderr so they can be redirected or silenced
without touching the conversation, and the level defaults to WARNING so
state-transition events only appear when asked for.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Configure structlog for Lightspeed.

    Logs go to stderr so they never mix with chat output on stdout.
    At DEBUG level every state transition is logged with its context.

    Args:
        level: Standard logging level or its name (e.g. "INFO").
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
