"""Process-wide registry of log destinations.

A destination is any object that wants to receive every log record emitted while
it is registered (a run's report is the canonical example). Registration attaches
a :class:`ReportLogHandler` to the root logger; unregistration detaches it again.

Lifecycle:

* :func:`add_destination` registers a sink and returns its handler. Registering the
  same sink twice is an error.
* :func:`remove_destination` detaches the sink. Removing an unknown sink is an error.
* :func:`log_destination` pairs both calls in a context manager so the sink is
  removed on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator


@runtime_checkable
class LogSink(Protocol):
    """Anything that can absorb log records."""

    def handle_log(self, record: logging.LogRecord) -> None: ...


class ReportLogHandler(logging.Handler):
    """Logging handler forwarding records to a single sink."""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink.handle_log(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)


@dataclass(slots=True)
class _DestinationState:
    handlers: dict[int, ReportLogHandler] = field(default_factory=dict)
    logger_name: str | None = None

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(self.logger_name)


_STATE = _DestinationState()


def add_destination(sink: LogSink, *, level: int = logging.NOTSET) -> ReportLogHandler:
    """Register ``sink`` so that it receives every subsequent log record."""

    key = id(sink)
    if key in _STATE.handlers:
        raise ValueError(f"Log destination already registered: {sink!r}")
    handler = ReportLogHandler(sink, level)
    _STATE.handlers[key] = handler
    _STATE.logger.addHandler(handler)
    return handler


def remove_destination(sink: LogSink) -> None:
    """Unregister ``sink``; it stops receiving records immediately."""

    handler = _STATE.handlers.pop(id(sink), None)
    if handler is None:
        raise ValueError(f"Log destination not registered: {sink!r}")
    _STATE.logger.removeHandler(handler)
    handler.close()


def destinations() -> list[LogSink]:
    """Return the sinks currently registered, in registration order."""

    return [handler.sink for handler in _STATE.handlers.values()]


def is_destination(sink: LogSink) -> bool:
    return id(sink) in _STATE.handlers


@contextmanager
def log_destination(sink: LogSink, *, level: int = logging.NOTSET) -> Iterator[LogSink]:
    """Register ``sink`` for the duration of the block."""

    add_destination(sink, level=level)
    try:
        yield sink
    finally:
        remove_destination(sink)


def reset() -> None:
    """Drop every registered destination (primarily for tests)."""

    for handler in list(_STATE.handlers.values()):
        _STATE.logger.removeHandler(handler)
        handler.close()
    _STATE.handlers.clear()
