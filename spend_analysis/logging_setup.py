"""Logging for the ``spend_analysis`` package.

Library modules log through ``get_logger("spend_analysis.<module>")`` and
never attach handlers; until :func:`configure_logging` runs, the package
logger only carries a ``NullHandler``.

The CLI owns output. Its root options choose

- the level: ``--log-level NAME``, else ``-v`` (DEBUG), else the
  ``SPEND_ANALYSIS_LOG_LEVEL`` environment variable, else INFO;
- the line format: ``text`` for people or ``json`` (one object per line) for
  log collectors, selected with ``--log-format``.

Calling :func:`configure_logging` again replaces the handler it installed
earlier, so a second invocation in the same process does not duplicate lines.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import StrEnum
from typing import IO

PKG_LOGGER_NAME = "spend_analysis"
LEVEL_ENV_VAR = "SPEND_ANALYSIS_LOG_LEVEL"

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
# Marks the handler installed here so reconfiguration can find and replace it.
_HANDLER_ATTR = "_spend_analysis_handler"


class LogFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


class JsonLineFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _level_from_name(name: str) -> int | None:
    name = name.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelNamesMapping().get(name)
    return value if isinstance(value, int) else None


def resolve_level(level: int | str | None = None, *, verbose: int = 0) -> int:
    """Pick the effective level from CLI input and the environment.

    An explicit ``level`` that is not a known level name raises
    ``ValueError``; an unknown name in the environment variable is ignored.
    """

    if isinstance(level, int):
        return level
    if level:
        resolved = _level_from_name(level)
        if resolved is None:
            raise ValueError(f"unknown log level: {level!r}")
        return resolved
    if verbose > 0:
        return logging.DEBUG
    env_val = os.getenv(LEVEL_ENV_VAR)
    if env_val:
        from_env = _level_from_name(env_val)
        if from_env is not None:
            return from_env
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    verbose: int = 0,
    log_format: LogFormat | str = LogFormat.TEXT,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach one stream handler to the package logger and return it.

    ``stream`` defaults to the ``sys.stderr`` of the moment of the call, so
    command output on stdout stays machine-readable.
    """

    resolved = resolve_level(level, verbose=verbose)
    fmt = LogFormat(log_format)

    logger = logging.getLogger(PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or getattr(h, _HANDLER_ATTR, False):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        JsonLineFormatter() if fmt is LogFormat.JSON else logging.Formatter(_TEXT_FORMAT)
    )
    setattr(handler, _HANDLER_ATTR, True)

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "LEVEL_ENV_VAR",
    "LogFormat",
    "JsonLineFormatter",
    "configure_logging",
    "get_logger",
    "resolve_level",
]
