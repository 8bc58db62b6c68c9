"""Logging utilities for simplesolvers.

Solvers report soft failures (iteration limits, NaN recovery) through
module loggers obtained here instead of printing. All loggers live below
the ``simplesolvers`` namespace, write to their own stream handler and do
not propagate to the root logger.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

PACKAGE = "simplesolvers"

_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_level = logging.WARNING
_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _attach_handler(logger: logging.Logger, stream: IO, level: int, formatter: logging.Formatter) -> None:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
            Names outside the package namespace are prefixed with
            ``"simplesolvers."``. If None, returns the package logger.

    Returns:
        Cached logger instance with a single stderr handler.

    Example:
        >>> from simplesolvers.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting Newton iteration")
    """
    if name is None:
        name = PACKAGE
    if name != PACKAGE and not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"

    logger = _loggers.get(name)
    if logger is not None:
        return logger

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_level)
        _attach_handler(logger, sys.stderr, _level, logging.Formatter(_DEFAULT_FORMAT))
        logger.propagate = False
    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every simplesolvers logger and handler.

    Args:
        level: Logging level (``logging.DEBUG``, ...) or its name
            (``"DEBUG"``, ``"INFO"``, ...). Loggers created later start at
            this level too.
    """
    global _level
    _level = _resolve_level(level)
    for logger in _loggers.values():
        logger.setLevel(_level)
        for handler in logger.handlers:
            handler.setLevel(_level)


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO] = None,
) -> None:
    """Replace the handlers of every simplesolvers logger created so far.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses the default
            ``"[LEVEL] name: message"`` layout.
        stream: Output stream (default: ``sys.stderr``).

    Example:
        >>> import logging
        >>> from simplesolvers.logging import configure_logging
        >>> configure_logging(level=logging.INFO)
    """
    global _level
    _level = _resolve_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)
    for logger in _loggers.values():
        logger.setLevel(_level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        _attach_handler(logger, stream if stream is not None else sys.stderr, _level, formatter)


__all__ = ["configure_logging", "get_logger", "set_log_level"]
