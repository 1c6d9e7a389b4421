"""Application wiring: build the configured termini and run the agent once."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from configurer.adapters.facter import LocalFactCollector
from configurer.adapters.rest import rest_catalog_terminus, rest_report_terminus
from configurer.adapters.sqlalchemy import catalog_store, is_started, report_store, startup
from configurer.agent import Configurer
from configurer.config import get_agent_settings
from configurer.domain.indirection import Indirection
from configurer.domain.transaction import CatalogApplier

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from configurer.config import AgentSettings
    from configurer.domain.catalog import RawCatalog
    from configurer.domain.ports.facts import FactCollector
    from configurer.domain.ports.locating import Terminus
    from configurer.domain.ports.plugins import PluginSynchronizer
    from configurer.domain.report import Report
    from configurer.domain.transaction import TransactionApplier

log = getLogger(__name__)


def _report_key(report: Report) -> str:
    if not report.host:
        raise ValueError("Report has no host to file it under")
    return report.host


def build_catalog_locator(settings: AgentSettings, engine: Engine | None = None) -> Indirection[RawCatalog]:
    """Return the catalog indirection: the configured terminus with a local cache."""

    store = catalog_store(engine)
    if settings.catalog_terminus == "cache":
        return Indirection("catalog", store)
    terminus: Terminus[RawCatalog] = rest_catalog_terminus(settings.rest_config(), settings.environment)
    return Indirection("catalog", terminus, cache=store)


def build_report_locator(settings: AgentSettings, engine: Engine | None = None) -> Indirection[Report]:
    terminus: Terminus[Report]
    if settings.report_terminus == "store":
        terminus = report_store(engine)
    else:
        terminus = rest_report_terminus(settings.rest_config(), settings.environment)
    return Indirection("report", terminus, key_of=_report_key)


def build_configurer(
    settings: AgentSettings | None = None,
    *,
    applier: TransactionApplier | None = None,
    fact_collector: FactCollector | None = None,
    plugin_synchronizer: PluginSynchronizer | None = None,
    engine: Engine | None = None,
) -> Configurer:
    """Assemble a :class:`Configurer` from settings and the default adapters."""

    effective_settings = settings or get_agent_settings()
    if engine is None and not is_started():
        effective_settings.vardir.mkdir(parents=True, exist_ok=True)
        startup(database_uri=effective_settings.cache_database_uri())

    return Configurer(
        effective_settings,
        catalog_locator=build_catalog_locator(effective_settings, engine),
        report_locator=build_report_locator(effective_settings, engine),
        applier=applier or CatalogApplier(),
        fact_collector=fact_collector or LocalFactCollector(),
        plugin_synchronizer=plugin_synchronizer,
    )


def run_agent_once(
    settings: AgentSettings | None = None,
    *,
    applier: TransactionApplier | None = None,
) -> Report | None:
    """Run the agent a single time with the configured adapters."""

    configurer = build_configurer(settings, applier=applier)
    log.info(
        "Starting run for %s: environment=%s, catalog_terminus=%s, use_cached_catalog=%s",
        configurer.settings.certname,
        configurer.settings.environment,
        configurer.settings.catalog_terminus,
        configurer.settings.use_cached_catalog,
    )
    report = configurer.run()
    if report is not None:
        log.info(f"Finished run for {report.host}: status={report.status}")
    return report
