"""Centralized logging helpers for sfoedit.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the command line entry point.
"""

from __future__ import annotations

import functools
import json
import logging
import os
import sys
import time
from typing import Optional

from .config import LOG_FORMAT_ENV

_STD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_HANDLER_NAME = "sfoedit_console"


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _resolve_mode(env: Optional[str]) -> str:
    chosen = env or os.getenv(LOG_FORMAT_ENV, "auto")
    if isinstance(chosen, str):
        chosen = chosen.lower()
    if chosen in ("json", "human"):
        return chosen
    # auto: prefer human when interactive
    try:
        return "human" if sys.stderr.isatty() else "json"
    except (AttributeError, ValueError):
        return "json"


def get_logger(name: str = "sfoedit", level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` with exactly one console handler attached.

    The handler is found by name, so repeated calls never stack handlers;
    an existing one is re-pointed at the current stderr.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "name", None) == _HANDLER_NAME),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler.name = _HANDLER_NAME
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    else:
        handler.setStream(sys.stderr)

    return logger


def configure_logging(env: Optional[str] = None, level: int = logging.WARNING) -> logging.Logger:
    """Configure the ``sfoedit`` package logger.

    env: 'auto' | 'json' | 'human'. When None the ``SFOEDIT_LOG_FORMAT``
    environment variable is consulted, falling back to 'auto', which picks
    human-readable output when stderr is a TTY and JSON otherwise.

    Returns the package logger.
    """
    mode = _resolve_mode(env)
    logger = get_logger("sfoedit", level)
    handler = next(h for h in logger.handlers if getattr(h, "name", None) == _HANDLER_NAME)

    if mode == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_STD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    return logger


def log_call(level: int = logging.DEBUG):
    """Decorator that logs function entry, duration and exit.

    Usage:
        @log_call()
        def foo(...):
            ...
    """

    def _decorator(func):
        @functools.wraps(func)
        def _wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__)
            start = time.time()
            logger.debug("Entering %s", func.__qualname__)
            try:
                result = func(*args, **kwargs)
            except Exception:
                duration = (time.time() - start) * 1000.0
                logger.debug(
                    "Exception in %s after %.2fms",
                    func.__qualname__,
                    duration,
                    exc_info=True,
                )
                raise
            duration = (time.time() - start) * 1000.0
            logger.log(
                level,
                "Exited %s; duration_ms=%.2f",
                func.__qualname__,
                duration,
            )
            return result

        return _wrapper

    return _decorator
