"""
Logging utilities for fbc-filter.

This module centralizes logger configuration, formatting, and retrieval
for the fbcfilter package. Library code only ever calls :func:`get_logger`;
the CLI calls :func:`setup_logging` once per invocation.

Filter warnings (bundles retained outside a range, missing packages, ...)
are not log records. They flow through a plain ``Callable[[str], None]``
sink; :func:`logger_warn_sink` adapts a logger into such a sink for
library users who have no console of their own.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Callable, Optional

from fbcfilter.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "fbcfilter"

_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter with optional ANSI color support."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and self._should_use_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Records are shared between handlers; restore the level name after use.
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.WARNING,
    verbose: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure logging for fbc-filter.

    Safe to call multiple times; the previous handler is replaced.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Use the timestamped format. Defaults to ``True`` when
            ``level`` is ``DEBUG`` or lower.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    if verbose is None:
        verbose = level <= logging.DEBUG

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)

        fmt = LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT
        formatter = ColoredFormatter(
            fmt,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the fbcfilter namespace.

    Args:
        name: Logger name, relative (``"core.renderer"``) or absolute
            (``"fbcfilter.core.renderer"``).

    Returns:
        A logger instance under the ``fbcfilter`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    # Library-safe when logging is not configured
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def logger_warn_sink(logger: Optional[logging.Logger] = None) -> Callable[[str], None]:
    """Return a warning sink that logs each message at WARNING level.

    Args:
        logger: Target logger; defaults to ``fbcfilter.filter``.
    """
    target = logger or get_logger("filter")

    def _warn(message: str) -> None:
        target.warning("%s", message)

    return _warn


def disable_logging() -> None:
    """Disable all fbcfilter logging output."""
    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
