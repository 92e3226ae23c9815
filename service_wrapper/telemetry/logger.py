"""
Structured Logger
=================

Structured logging for the admission queue and the operation handler, with
automatic ``request_id`` injection.

Design:
  - JSON-structured output for machine parsing
  - Human-readable fallback for development
  - ``request_id`` taken from a context variable set around each client call
  - Event-name-plus-fields call style: ``log.info("queue_entry_fired", request_id=...)``
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import IO, Any

# ── Context Variables ──────────────────────────────────────────────

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

def set_request_context(*, request_id: str | None = None) -> None:
    """Set the request id injected into subsequent log records."""
    _request_id.set(request_id)

def get_request_id() -> str | None:
    return _request_id.get()

@contextmanager
def request_context(request_id: str | None) -> Iterator[None]:
    """Bind ``request_id`` for the duration of the block."""
    token = _request_id.set(request_id)
    try:
        yield
    finally:
        _request_id.reset(token)

# ── Structured Formatter ──────────────────────────────────────────

_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "relativeCreated",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "pathname", "filename", "module", "levelno", "levelname",
    "thread", "threadName", "process", "processName", "msecs",
    "taskName", "message",
})

_JSON_SAFE = (str, int, float, bool, type(None))

class StructuredFormatter(logging.Formatter):
    """JSON-structured log formatter with request id injection."""

    def __init__(self, *, json_output: bool = True, include_traceback: bool = True):
        super().__init__()
        self._json = json_output
        self._include_tb = include_traceback

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }

        request_id = _request_id.get(None)
        if request_id is not None:
            entry["request_id"] = request_id

        extras: dict[str, Any] = {}
        for key, val in record.__dict__.items():
            if key.startswith("_") or key in _RECORD_ATTRS:
                continue
            extras[key] = val if isinstance(val, _JSON_SAFE) else str(val)
        if extras:
            entry["data"] = extras

        if record.exc_info and self._include_tb:
            entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info)
                if record.exc_info[2]
                else None,
            }

        if self._json:
            return json.dumps(entry, default=str, ensure_ascii=False)

        # Human-readable fallback
        fields = " ".join(f"{k}={v}" for k, v in extras.items())
        line = (
            f"{entry['timestamp']} | {entry['level']:8s} | "
            f"{entry.get('request_id', '-')} | {entry['logger']}:{entry['line']} | "
            f"{entry['message']}"
        )
        return f"{line} {fields}" if fields else line

# ── Structured Logger ─────────────────────────────────────────────

class StructuredLogger:
    """
    Wrapper around a stdlib logger taking an event name plus keyword fields.

    Usage:
        log = StructuredLogger("service_wrapper.runtime.queue")
        log.info("queue_entry_fired", request_id="1__a3f9c2", status="pending")
    """

    __slots__ = ("_logger", "_name")

    def __init__(self, name: str):
        self._name = name
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._name

    def log(self, level: int, event: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, event, extra=kwargs, stacklevel=2)

    def _log(self, level: int, event: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, event, extra=kwargs, stacklevel=3)

    def debug(self, event: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._log(logging.INFO, event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, event, **kwargs)

    def error(self, event: str, exc: BaseException | None = None, **kwargs: Any) -> None:
        if exc:
            self._logger.error(event, extra=kwargs, exc_info=exc, stacklevel=2)
        else:
            self._log(logging.ERROR, event, **kwargs)

# ── Setup ──────────────────────────────────────────────────────────

def setup_logging(
    *,
    level: str = "INFO",
    json_output: bool | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """
    Attach a structured handler to the ``service_wrapper`` logger.

    Args:
        level: Level for the package logger
        json_output: Force JSON output. Auto-detects if None (JSON unless
            ``ENVIRONMENT`` is ``development``)
        stream: Output stream, stdout by default

    Returns:
        The installed handler. Calling again replaces it.
    """
    if json_output is None:
        json_output = os.getenv("ENVIRONMENT", "development") != "development"

    package_logger = logging.getLogger("service_wrapper")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        if isinstance(handler.formatter, StructuredFormatter):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter(json_output=json_output))
    package_logger.addHandler(handler)
    return handler

def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
