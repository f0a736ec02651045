"""Structlog configuration shared by the engine and the command line."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog


def configure(debug: bool = False, file: IO[str] | None = None) -> None:
    """Send log events to ``file`` (stderr by default).

    Game output owns stdout, so operator logs never go there.  With ``debug``
    the level drops from INFO to DEBUG.
    """

    level = logging.DEBUG if debug else logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=file or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a lazy logger tagged with the calling module.

    The proxy resolves the configuration on every call, so loggers created at
    import time follow a later :func:`configure`.
    """

    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


__all__ = ["configure", "get_logger"]
