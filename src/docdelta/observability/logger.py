"""Structured JSON logger for docdelta.

Each log record is a single-line JSON object, so the host service's log
pipeline can ingest the engine's recoverable conditions (clamped positions,
widened ranges, vanished edit targets) as structured events.

Typical structured output::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "docdelta.patch", "component": "patch",
     "message": "Step position clamped",
     "op": "apply_step", "from": 48, "to": 52, "doc_size": 40}

Usage::

    from docdelta.observability import get_logger

    log = get_logger("docdelta.patch")
    log.warning("Step position clamped", extra={"extra_fields": {"from": 48}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from docdelta.errors import DocDeltaError

_ROOT = "docdelta"


def _component(logger_name: str) -> str:
    """``docdelta.patch`` -> ``patch``; other names are kept whole."""
    prefix = _ROOT + "."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return logger_name


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys:

    * ``ts`` -- ISO-8601 UTC timestamp
    * ``level`` -- Python log level name
    * ``logger`` -- Logger name
    * ``component`` -- Engine component (``diff``, ``patch``, ...)
    * ``message`` -- Formatted log message

    Structured fields passed via ``extra={"extra_fields": {...}}`` are merged
    into the top-level object.  An attached exception is rendered under
    ``exception``; a :class:`~docdelta.errors.DocDeltaError` also adds its
    ``error_code`` and ``error_context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": _component(record.name),
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            log_entry["exception"] = self.formatException(record.exc_info)
            if isinstance(error, DocDeltaError):
                log_entry["error_code"] = str(getattr(error.code, "value", error.code))
                log_entry["error_context"] = error.context

        return json.dumps(log_entry, default=str)


# Loggers that already carry a structured handler.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = _ROOT,
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Engine components use ``"docdelta.diff"``,
        ``"docdelta.patch"``, ``"docdelta.decorations"``,
        ``"docdelta.converter"`` and ``"docdelta.engine"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive string.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A non-propagating logger with one :class:`StructuredFormatter`
        handler; repeated calls return it unchanged.
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    logger.setLevel(
        logging.getLevelName(level.upper()) if isinstance(level, str) else level
    )
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    _configured_loggers.add(name)
    return logger
