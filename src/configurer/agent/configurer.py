"""The run orchestrator: one catalog run per call, under the node's run lock."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from configurer.common.execution import execute
from configurer.common.log_destinations import log_destination
from configurer.common.logging import NOTICE, benchmark, notice
from configurer.common.state import StateStore
from configurer.domain.report import Report

from .facts import FactHandler
from .hooks import CommandHookError, Executor, run_hook
from .locker import Locker
from .plugins import PluginHandler
from .reporting import ReportManager
from .retrieval import CatalogRetriever

if TYPE_CHECKING:
    from configurer.config.settings import AgentSettings
    from configurer.domain.catalog import ExecutableCatalog, RawCatalog
    from configurer.domain.indirection import Indirection
    from configurer.domain.ports.facts import FactCollector
    from configurer.domain.ports.plugins import PluginSynchronizer
    from configurer.domain.transaction import TransactionApplier

log = logging.getLogger(__name__)


class Configurer:
    """Retrieve, apply and report this node's catalog.

    ``run`` is the only entry point callers need; the remaining public methods are
    the individual stages, exposed so that they can be driven or replaced
    separately.
    """

    def __init__(
        self,
        settings: AgentSettings,
        *,
        catalog_locator: Indirection[RawCatalog],
        report_locator: Indirection[Report],
        applier: TransactionApplier,
        fact_collector: FactCollector,
        plugin_synchronizer: PluginSynchronizer | None = None,
        executor: Executor = execute,
    ) -> None:
        self.settings = settings
        self.applier = applier
        self.executor = executor
        self.facts = FactHandler(
            fact_collector,
            certname=settings.certname,
            facts_format="yaml" if settings.facts_format == "yaml" else "b64_zlib_yaml",
        )
        self.plugins = PluginHandler(
            plugin_synchronizer,
            pluginsync=settings.pluginsync,
            factsync=settings.factsync,
        )
        self.retriever = CatalogRetriever(
            catalog_locator,
            self.facts,
            certname=settings.certname,
            classfile=settings.classfile,
            use_cached_catalog=settings.use_cached_catalog,
            usecacheonfailure=settings.usecacheonfailure,
        )
        self.reporter = ReportManager(
            report_locator,
            lastrunfile=settings.lastrunfile,
            summarize=settings.summarize,
            report=settings.report,
        )
        self.locker = Locker(settings.lockfile, settings.disabled_lockfile)
        self.state = StateStore(settings.statefile)

    @property
    def catalog_locator(self) -> Indirection[RawCatalog]:
        return self.retriever.locator

    def run(
        self,
        *,
        report: Report | None = None,
        catalog: ExecutableCatalog | None = None,
        **options: Any,
    ) -> Report | None:
        """Run once and return the report, or ``None`` when the run was skipped.

        A run is skipped when the agent is disabled or another run holds the lock.
        Exceptions escaping the run (a failing hook command, for instance) are
        re-raised only after the report has been sent.
        """

        if self.locker.disabled:
            notice(
                log,
                "Skipping run of configurer; administratively disabled (Reason: '%s')",
                self.locker.disabled_message,
            )
            return None

        with self.locker.lock() as acquired:
            if not acquired:
                notice(log, "Run of configurer already in progress; skipping")
                return None
            return self._run(report or self.new_report(), catalog, options)

    def new_report(self) -> Report:
        return Report("apply", host=self.settings.certname, environment=self.settings.environment)

    def prepare(self) -> None:
        self.plugins.download_fact_plugins()
        self.plugins.download_plugins()
        if self.catalog_locator.requires_facts:
            self.facts.find_facts()
        self.dostorage()
        self.execute_prerun_command()

    def retrieve_catalog(self) -> ExecutableCatalog | None:
        return self.retriever.retrieve()

    def apply_catalog(self, catalog: ExecutableCatalog, report: Report, options: dict[str, Any]) -> object:
        report.configuration_version = catalog.version
        if catalog.environment:
            report.environment = catalog.environment
        with benchmark(log, NOTICE, "Finished catalog run"):
            transaction = self.applier.apply(catalog, report=report, **options)
        self.record_run(catalog, transaction)
        return transaction

    def send_report(self, report: Report, transaction: object | None = None) -> None:
        self.reporter.send_report(report, transaction)

    def save_last_run_summary(self, report: Report) -> None:
        self.reporter.save_last_run_summary(report)

    def execute_prerun_command(self) -> None:
        run_hook("prerun_command", self.settings.prerun_command, executor=self.executor)

    def execute_postrun_command(self) -> None:
        run_hook("postrun_command", self.settings.postrun_command, executor=self.executor)

    def dostorage(self) -> None:
        """Load run metadata left by earlier runs."""

        self.settings.statedir.mkdir(parents=True, exist_ok=True)
        self.state.load()

    def record_run(self, catalog: ExecutableCatalog, transaction: object) -> None:
        section = self.state.cache("configuration")
        section["last_run"] = int(datetime.now(UTC).timestamp())
        section["catalog_version"] = catalog.version
        section["transaction_uuid"] = getattr(transaction, "uuid", None)
        try:
            self.state.store()
        except OSError as exc:
            log.error("Could not store state file %s: %s", self.state.path, exc)  # noqa: TRY400

    def _run(
        self,
        report: Report,
        catalog: ExecutableCatalog | None,
        options: dict[str, Any],
    ) -> Report:
        transaction: object | None = None
        postrun_started = False
        with log_destination(report):
            try:
                self.prepare()
                if catalog is None:
                    catalog = self.retrieve_catalog()
                if catalog is None:
                    log.error("Could not retrieve catalog; skipping run")
                else:
                    transaction = self.apply_catalog(catalog, report, options)
                postrun_started = True
                self.execute_postrun_command()
            except Exception:
                if not postrun_started:
                    self._execute_postrun_after_failure()
                raise
            finally:
                self.send_report(report, transaction)
        return report

    def _execute_postrun_after_failure(self) -> None:
        try:
            self.execute_postrun_command()
        except CommandHookError as exc:
            log.error("%s", exc)  # noqa: TRY400
