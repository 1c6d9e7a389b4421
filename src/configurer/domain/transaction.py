"""Applying an executable catalog."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import uuid4

from .catalog import CatalogError, ExecutableCatalog, Resource
from .report import Event, Report, ResourceStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

ResourceHandler = Callable[[Resource, bool], list[Event]]
"""Reconciles one resource; receives the noop flag and returns the events it produced."""


@dataclass(slots=True)
class Transaction:
    """Handle for one application of a catalog."""

    catalog: ExecutableCatalog
    report: Report
    noop: bool = False
    uuid: str = field(default_factory=lambda: str(uuid4()))
    blocked: set[str] = field(default_factory=set)

    @property
    def any_failed(self) -> bool:
        return any(status.failed for status in self.report.resource_statuses.values())


@runtime_checkable
class TransactionApplier(Protocol):
    """Port for the resource-graph execution engine; ``apply`` returns an opaque transaction handle."""

    def apply(self, catalog: ExecutableCatalog, *, report: Report, **options: Any) -> object: ...


class CatalogApplier:
    """Evaluate resources in dependency order through per-type handlers.

    Resources whose type has no registered handler are skipped with a warning.
    Dependents of a failed resource are skipped as well.
    """

    def __init__(self, handlers: Mapping[str, ResourceHandler] | None = None) -> None:
        self.handlers: dict[str, ResourceHandler] = {
            name.lower(): handler for name, handler in (handlers or {}).items()
        }

    def register(self, resource_type: str, handler: ResourceHandler) -> None:
        self.handlers[resource_type.lower()] = handler

    def apply(self, catalog: ExecutableCatalog, *, report: Report, **options: Any) -> Transaction:
        if not catalog.finalized:
            raise CatalogError(f"Catalog {catalog.name} must be finalized before application")

        transaction = Transaction(catalog=catalog, report=report, noop=bool(options.get("noop")))
        for resource in catalog.ordered_resources():
            report.add_resource_status(self._evaluate(transaction, resource))

        if catalog.retrieval_duration is not None:
            report.add_times("config_retrieval", catalog.retrieval_duration)
        return transaction

    def _evaluate(self, transaction: Transaction, resource: Resource) -> ResourceStatus:
        status = ResourceStatus(resource=resource.ref)
        failed = sorted(transaction.catalog.prerequisites(resource.ref) & transaction.blocked)
        if failed:
            log.warning("%s: Skipping because of failed dependencies: %s", resource.ref, ", ".join(failed))
            status.skipped = True
            transaction.blocked.add(resource.ref)
            return status

        handler = self.handlers.get(resource.type.lower())
        if handler is None:
            log.warning("%s: No handler for resource type %s; skipping", resource.ref, resource.type)
            status.skipped = True
            return status

        started = time.monotonic()
        try:
            events = handler(resource, transaction.noop)
        except Exception as exc:
            log.exception("%s: Could not evaluate", resource.ref)
            status.add_event(Event(status="failure", message=str(exc)))
            events = []
        for event in events:
            status.add_event(event)
            if event.message:
                log.log(
                    logging.ERROR if event.status == "failure" else logging.INFO,
                    "%s: %s",
                    resource.ref,
                    event.message,
                )
        status.evaluation_time = time.monotonic() - started
        if status.failed:
            transaction.blocked.add(resource.ref)
        return status
