from __future__ import annotations

from .log_destinations import (
    ReportLogHandler,
    add_destination,
    destinations,
    log_destination,
    remove_destination,
)
from .logging import NOTICE, benchmark, configure_logging, notice, thinmark

__all__ = [
    "NOTICE",
    "ReportLogHandler",
    "add_destination",
    "benchmark",
    "configure_logging",
    "destinations",
    "log_destination",
    "notice",
    "remove_destination",
    "thinmark",
]
