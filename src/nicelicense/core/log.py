# log.py
# SPDX-License-Identifier: MIT
"""Package-wide logging helpers.

A NullHandler is installed on the ``nicelicense`` logger so library callers
see nothing until they opt in via :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "DEFAULT_FORMAT",
    "get_logger",
    "configure_logging",
    "temp_level",
]

PACKAGE_LOGGER_NAME = "nicelicense"
DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the nicelicense namespace."""
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: int | str = logging.WARNING,
    stream=None,
    fmt: str | None = None,
    propagate: bool | None = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Args:
        level (int | str): Logging level or level name.
        stream (IO[str] | None): Target stream; defaults to sys.stderr.
        fmt (str | None): Log format string; defaults to ``DEFAULT_FORMAT``.
        propagate (bool | None): Whether records bubble up to the root
            logger. None keeps propagation on so pytest's caplog still works.
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name)
    logger.setLevel(_coerce_level(level))
    logger.propagate = True if propagate is None else bool(propagate)

    stream = stream if stream is not None else sys.stderr
    formatter = logging.Formatter(fmt=fmt or DEFAULT_FORMAT)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            # A stale handler may still hold a stream pytest has closed.
            if getattr(handler.stream, "closed", False) or handler.stream is not stream:
                handler.stream = stream
            handler.setFormatter(formatter)
            return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


@contextmanager
def temp_level(level: int | str, name: str | None = None):
    """Temporarily change a logger's level inside a ``with`` block."""
    logger = get_logger(name)
    old = logger.level
    logger.setLevel(_coerce_level(level))
    try:
        yield logger
    finally:
        logger.setLevel(old)
