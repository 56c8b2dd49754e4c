"""One-line JSON logging for scheduled runs.

A run emits a handful of records (lock, fetch, staged, notify, commit),
each carrying its structured fields in ``extra={"extra_fields": {...}}``::

    {"ts": "2026-10-19T06:00:01.532+00:00", "level": "INFO",
     "logger": "sheetdelta.commit", "message": "Run committed",
     "op": "commit", "snapshots_written": 3}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

ROOT_LOGGER = "sheetdelta"


class StructuredFormatter(logging.Formatter):
    """``ts``, ``level``, ``logger`` and ``message``, then the extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **(getattr(record, "extra_fields", None) or {}),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(entry, default=str)


_handlers: dict[str, logging.Handler] = {}


def _as_level(level: int | str) -> int:
    return logging.getLevelName(level.upper()) if isinstance(level, str) else level


def get_logger(
    name: str = ROOT_LOGGER,
    *,
    level: int | str = logging.DEBUG,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return *name* with a JSON handler on *stream* (stderr by default).

    Only the first call for a name installs the handler and sets *level*;
    later calls return the logger unchanged.
    """
    logger = logging.getLogger(name)
    if name in _handlers:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.setLevel(_as_level(level))
    logger.propagate = False
    _handlers[name] = handler
    return logger


def set_level(level: int | str) -> None:
    """Apply ``--log-level`` to every logger created by :func:`get_logger`."""
    for name in _handlers:
        logging.getLogger(name).setLevel(_as_level(level))
