"""Transaction reports: the record of one run's logs, resource outcomes and metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final, Literal

from configurer import __version__
from configurer.common.logging import NOTICE

from .catalog import parse_ref

EventStatus = Literal["success", "failure", "noop", "audit"]
ReportStatus = Literal["failed", "changed", "unchanged"]

EXIT_STATUSES: Final[dict[str, int]] = {"unchanged": 0, "changed": 2, "failed": 4}

RESOURCE_STATES: Final[tuple[str, ...]] = (
    "skipped",
    "failed",
    "changed",
    "out_of_sync",
    "scheduled",
)

_LEVEL_NAMES: Final[dict[int, str]] = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    NOTICE: "notice",
    logging.WARNING: "warning",
    logging.ERROR: "err",
    logging.CRITICAL: "crit",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def labelize(name: str) -> str:
    return name.capitalize().replace("_", " ")


@dataclass(slots=True, frozen=True)
class LogEntry:
    level: str
    message: str
    source: str
    time: datetime

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> LogEntry:
        level = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        return cls(
            level=level,
            message=record.getMessage(),
            source=record.name,
            time=datetime.fromtimestamp(record.created, UTC),
        )


@dataclass(slots=True)
class Event:
    status: EventStatus
    message: str = ""
    property: str | None = None
    previous_value: Any = None
    desired_value: Any = None


@dataclass(slots=True)
class ResourceStatus:
    """Outcome of evaluating a single resource."""

    resource: str
    evaluation_time: float = 0.0
    changed: bool = False
    out_of_sync: bool = False
    failed: bool = False
    skipped: bool = False
    scheduled: bool = False
    events: list[Event] = field(default_factory=list)

    @property
    def resource_type(self) -> str:
        return parse_ref(self.resource)[0]

    @property
    def change_count(self) -> int:
        return sum(1 for event in self.events if event.status == "success")

    def add_event(self, event: Event) -> None:
        self.events.append(event)
        if event.status == "failure":
            self.failed = True
        elif event.status == "success":
            self.changed = True
            self.out_of_sync = True
        elif event.status == "noop":
            self.out_of_sync = True


class Report:
    """Accumulates everything that happens during one run.

    While registered as a log destination the report receives every log record
    through :meth:`handle_log`. :meth:`finalize_report` seals the metrics; the
    report is not meant to be reused across runs.
    """

    def __init__(
        self,
        kind: str = "apply",
        *,
        host: str | None = None,
        environment: str | None = None,
        configuration_version: str | None = None,
        time: datetime | None = None,
    ) -> None:
        self.kind = kind
        self.host = host
        self.environment = environment
        self.configuration_version = configuration_version
        self.time = time or _utcnow()
        self.logs: list[LogEntry] = []
        self.resource_statuses: dict[str, ResourceStatus] = {}
        self.metrics: dict[str, dict[str, Any]] = {}
        self.status: ReportStatus | None = None
        self.transaction: object | None = None
        self.transaction_uuid: str | None = None
        self.finalized = False
        self._external_times: dict[str, float] = {}

    def __repr__(self) -> str:
        return f"Report(kind={self.kind!r}, host={self.host!r}, status={self.status!r})"

    @property
    def exit_status(self) -> int:
        """Detailed exit code: 0 unchanged, 2 changed, 4 failed, 1 when no catalog was applied."""

        if self.status is None or (self.transaction is None and self.transaction_uuid is None):
            return 1
        return EXIT_STATUSES[self.status]

    def handle_log(self, record: logging.LogRecord) -> None:
        self.add_log(LogEntry.from_record(record))

    def add_log(self, entry: LogEntry) -> None:
        self.logs.append(entry)

    def add_resource_status(self, status: ResourceStatus) -> None:
        self.resource_statuses[status.resource] = status

    def add_times(self, name: str, value: float) -> None:
        self._external_times[name] = value

    def finalize_report(self, transaction: object | None = None) -> None:
        """Compute metrics and status, and cross-reference ``transaction``.

        The transaction is an opaque handle; its ``uuid`` is recorded when it has one.
        """

        if transaction is not None:
            self.transaction = transaction
            self.transaction_uuid = getattr(transaction, "uuid", None)

        resources = self._resource_metrics()
        changes = sum(status.change_count for status in self.resource_statuses.values())
        self.metrics = {
            "resources": resources,
            "time": self._time_metrics(),
            "changes": {"total": changes},
            "events": self._event_metrics(),
        }
        if resources.get("failed", 0) > 0:
            self.status = "failed"
        elif changes > 0:
            self.status = "changed"
        else:
            self.status = "unchanged"
        self.finalized = True

    def raw_summary(self) -> dict[str, dict[str, Any]]:
        """Return a compact, serialisable snapshot of the run."""

        summary: dict[str, dict[str, Any]] = {
            "version": {"config": self.configuration_version, "agent": __version__},
        }
        for name, values in self.metrics.items():
            section = dict(values)
            if name != "time":
                section.setdefault("total", 0)
            summary[name] = section
        summary.setdefault("time", {})["last_run"] = int(_utcnow().timestamp())
        return summary

    def summary(self) -> str:
        """Return a human-readable rendering of :meth:`raw_summary`."""

        lines: list[str] = []
        raw = self.raw_summary()
        for key in sorted(raw):
            lines.append(f"{labelize(key)}:")
            section = raw[key]
            labels = sorted(section, key=lambda label: (label == "total", labelize(label)))
            for label in labels:
                value = section[label]
                if value is None or value == 0:
                    continue
                rendered = f"{value:0.2f}" if isinstance(value, float) else str(value)
                lines.append(f"   {labelize(label) + ':':>15} {rendered}")
        return "\n".join(lines) + "\n"

    def _resource_metrics(self) -> dict[str, int]:
        metrics = {state: 0 for state in RESOURCE_STATES}
        metrics["total"] = len(self.resource_statuses)
        for status in self.resource_statuses.values():
            for state in RESOURCE_STATES:
                if getattr(status, state):
                    metrics[state] += 1
        return metrics

    def _event_metrics(self) -> dict[str, int]:
        metrics: dict[str, int] = {"total": 0}
        for status in self.resource_statuses.values():
            metrics["total"] += len(status.events)
            for event in status.events:
                metrics[event.status] = metrics.get(event.status, 0) + 1
        return metrics

    def _time_metrics(self) -> dict[str, float]:
        metrics: dict[str, float] = {}
        for status in self.resource_statuses.values():
            key = status.resource_type.lower()
            metrics[key] = metrics.get(key, 0.0) + status.evaluation_time
        for name, value in self._external_times.items():
            metrics[name.lower()] = value
        metrics["total"] = sum(metrics.values())
        return metrics
