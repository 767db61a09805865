"""Logging for the ``statement_analysis`` package.

Everything logs below the package root logger ``"statement_analysis"``:

- ``get_logger("extract")`` and ``get_logger("statement_analysis.extract")``
  return the same logger. Until an entry point configures logging, the root
  carries only a ``NullHandler``, so importing the library stays silent.
- ``configure_logging(...)`` installs the one stream handler. Entry points may
  call it repeatedly (the CLI callback runs once per command); later calls only
  change the level.

The level comes from the explicit argument, else ``STATEMENT_ANALYSIS_LOG_LEVEL``,
else ``INFO``. Extraction reports dropped blocks at DEBUG, so
``STATEMENT_ANALYSIS_LOG_LEVEL=DEBUG`` is the switch for debugging a statement
that yields fewer transactions than expected.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_analysis"
LEVEL_ENV_VAR = "STATEMENT_ANALYSIS_LOG_LEVEL"

_HANDLER_NAME = "statement_analysis.stream"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def resolve_level(level: int | str | None = None) -> int:
    """Map ``level`` (number, numeric string or level name) to a logging level.

    ``None`` and unrecognised names defer to ``STATEMENT_ANALYSIS_LOG_LEVEL`` and
    then to ``logging.INFO``.
    """

    if isinstance(level, int):
        return level
    if level is not None:
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        known = logging.getLevelNamesMapping()
        if name in known:
            return known[name]
    env_val = os.getenv(LEVEL_ENV_VAR, "").strip().upper()
    if env_val.isdigit():
        return int(env_val)
    return logging.getLevelNamesMapping().get(env_val, logging.INFO)


def _stream_handler(logger: logging.Logger) -> logging.Handler | None:
    for h in logger.handlers:
        if h.get_name() == _HANDLER_NAME:
            return h
    return None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> logging.Logger:
    """Install the package stream handler, or re-level it if already present.

    Returns the package root logger. ``fmt`` and ``stream`` only apply to the
    first call.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = resolve_level(level)

    handler = _stream_handler(logger)
    if handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        handler = logging.StreamHandler(stream)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(handler)
        # The package handler is the only output; the root logger stays untouched.
        logger.propagate = False

    handler.setLevel(resolved)
    logger.setLevel(resolved)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the package logger for ``name`` (bare module names are prefixed)."""

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV_VAR", "PACKAGE_LOGGER", "configure_logging", "get_logger", "resolve_level"]
