"""Centralized logging configuration using loguru.

Every application logger carries a ``name`` extra (see get_logger).
Records intercepted from the standard library (httpx, uvicorn) get their
stdlib logger name instead, so one console format covers both.
"""

from __future__ import annotations

import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)

STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class InterceptHandler(logging.Handler):
    """Route standard library log records to loguru.

    githubkit logs through httpx/httpcore and the HTTP server through
    uvicorn; both use the standard library.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Re-emit a stdlib record through loguru at the caller's frame."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _default_name(record: Record) -> None:
    """Name records that were not logged through get_logger."""
    record["extra"].setdefault("name", record["name"])


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure console (and optionally file) logging.

    Args:
        level: Base log level from config
        verbose: Use DEBUG (wins over quiet)
        quiet: Use WARNING
        log_file: Optional path for file logging with rotation
        rotation: When to rotate log file (e.g., "10 MB", "1 day")
        retention: How long to keep rotated logs
        serialize: Write JSON lines to the file

    Returns:
        Configured logger instance
    """
    effective_level: LogLevel = "DEBUG" if verbose else "WARNING" if quiet else level

    logger.remove()
    logger.configure(patcher=_default_name)

    logger.add(
        sys.stderr,
        level=effective_level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _intercept_stdlib_logging(effective_level)
    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    """Send stdlib logging to loguru; httpx stays quiet below DEBUG."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    httpx_level = logging.DEBUG if level in ("TRACE", "DEBUG") else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)
    logging.getLogger("httpcore").setLevel(httpx_level)

    for name in STDLIB_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False


def get_logger(name: str) -> Logger:
    """Get a logger with the given name bound as context.

    Usage:
        from github_pr_count.logging import get_logger
        logger = get_logger(__name__)
    """
    return logger.bind(name=name)


def bind_repo(owner: str, repo: str, name: str = "count") -> Logger:
    """Logger carrying ``repo="owner/name"`` for one count."""
    return logger.bind(name=name, repo=f"{owner}/{repo}")


def reset_logging() -> None:
    """Remove all sinks (primarily for testing)."""
    logger.remove()
