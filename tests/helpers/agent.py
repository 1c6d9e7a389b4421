"""Reusable fakes for agent run tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from configurer.agent import Configurer
from configurer.common.execution import ExecutionFailure
from configurer.domain.catalog import Edge, RawCatalog, Resource
from configurer.domain.facts import Facts
from configurer.domain.report import Event
from configurer.domain.transaction import Transaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from configurer.config import AgentSettings
    from configurer.domain.catalog import ExecutableCatalog
    from configurer.domain.report import Report

type LookupResult = RawCatalog | Exception | None


def make_raw_catalog(name: str = "node.example.com", *, version: str = "1700000000") -> RawCatalog:
    """Create a small catalog with one dependency edge."""

    return RawCatalog(
        name=name,
        version=version,
        environment="production",
        classes=("settings", "ntp"),
        resources=[
            Resource(type="package", title="ntp", parameters={"ensure": "installed"}),
            Resource(
                type="service",
                title="ntpd",
                parameters={"ensure": "running", "require": "Package[ntp]"},
            ),
            Resource(type="file", title="/etc/ntp.conf", parameters={"content": "server pool"}),
        ],
        edges=[Edge(source="File[/etc/ntp.conf]", target="Service[ntpd]")],
    )


@dataclass
class FakeCatalogLocator:
    """Stands in for the catalog indirection; each lookup mode has a canned answer."""

    cache: LookupResult = None
    remote: LookupResult = None
    requires_facts: bool = True
    calls: list[dict[str, Any]] = field(default_factory=list)

    def find(self, key: str, **options: Any) -> RawCatalog | None:
        self.calls.append({"key": key, **options})
        if options.get("ignore_terminus"):
            result = self.cache
        elif options.get("ignore_cache"):
            result = self.remote
        else:
            raise AssertionError(f"unexpected lookup mode: {options}")
        if isinstance(result, Exception):
            raise result
        return result

    def save(self, resource: RawCatalog, *, key: str | None = None) -> None:
        raise AssertionError("catalogs are never saved by the agent")

    def modes(self) -> list[str]:
        return ["cache" if call.get("ignore_terminus") else "remote" for call in self.calls]


@dataclass
class FakeReportLocator:
    saved: list[Report] = field(default_factory=list)
    error: Exception | None = None
    requires_facts: bool = False

    def find(self, key: str, **options: Any) -> Report | None:
        return None

    def save(self, resource: Report, *, key: str | None = None) -> None:
        if self.error is not None:
            raise self.error
        self.saved.append(resource)


@dataclass
class FakeApplier:
    """Records every application and returns a fresh transaction."""

    error: Exception | None = None
    on_apply: Callable[[ExecutableCatalog, Report], None] | None = None
    calls: list[tuple[ExecutableCatalog, Report, dict[str, Any]]] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    handle: object | None = None

    def apply(self, catalog: ExecutableCatalog, *, report: Report, **options: Any) -> object:
        self.calls.append((catalog, report, options))
        if self.on_apply is not None:
            self.on_apply(catalog, report)
        if self.error is not None:
            raise self.error
        if self.handle is not None:
            return self.handle
        transaction = Transaction(catalog=catalog, report=report)
        self.transactions.append(transaction)
        return transaction


@dataclass
class FakeFactCollector:
    values: dict[str, Any] = field(default_factory=lambda: {"kernel": "Linux", "osfamily": "Debian"})
    error: Exception | None = None
    collected: list[str] = field(default_factory=list)

    def collect(self, name: str) -> Facts:
        self.collected.append(name)
        if self.error is not None:
            raise self.error
        return Facts(name=name, values=dict(self.values))


@dataclass
class RecordingExecutor:
    """Executor that records commands and fails those listed in ``failing``."""

    failing: Sequence[str] = ()
    commands: list[list[str]] = field(default_factory=list)

    def __call__(self, command: Sequence[str]) -> str:
        self.commands.append(list(command))
        if command and command[0] in self.failing:
            raise ExecutionFailure(f"Execution of '{' '.join(command)}' returned 1: ", returncode=1)
        return ""


@dataclass
class FakePluginSynchronizer:
    downloads: list[str] = field(default_factory=list)

    def download_plugins(self) -> None:
        self.downloads.append("plugins")

    def download_fact_plugins(self) -> None:
        self.downloads.append("fact_plugins")


def success_event(message: str = "created") -> list[Event]:
    return [Event(status="success", message=message, property="ensure")]


def make_configurer(
    settings: AgentSettings,
    *,
    catalog_locator: FakeCatalogLocator | None = None,
    report_locator: FakeReportLocator | None = None,
    applier: FakeApplier | None = None,
    fact_collector: FakeFactCollector | None = None,
    executor: RecordingExecutor | None = None,
) -> Configurer:
    return Configurer(
        settings,
        catalog_locator=catalog_locator or FakeCatalogLocator(remote=make_raw_catalog()),  # type: ignore[arg-type]
        report_locator=report_locator or FakeReportLocator(),  # type: ignore[arg-type]
        applier=applier or FakeApplier(),
        fact_collector=fact_collector or FakeFactCollector(),
        executor=executor or RecordingExecutor(),
    )
