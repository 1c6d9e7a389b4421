"""Local document store terminus backed by SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from configurer.adapters.schema import dump_catalog, dump_report, load_catalog, load_report
from configurer.domain.catalog import RawCatalog
from configurer.domain.report import Report

from .engine import configured_engine
from .mappings import stored_document_table

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from configurer.domain.ports.locating import FindOptions, Terminus

log = logging.getLogger(__name__)


class SqlAlchemyTerminus[T]:
    """Stores one kind of document per indirection name, keyed by node.

    Serves both as the local cache in front of a remote terminus and as a
    standalone store. Lookups never need facts.
    """

    requires_facts = False

    def __init__(
        self,
        indirection: str,
        *,
        dump: Callable[[T], dict[str, Any]],
        load: Callable[[object], T],
        engine: Engine | None = None,
    ) -> None:
        self.indirection = indirection
        self.name = f"store:{indirection}"
        self._dump = dump
        self._load = load
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or configured_engine()

    def find(self, key: str, options: FindOptions) -> T | None:
        _ = options
        table = stored_document_table
        stmt = select(table.c.payload).where(
            table.c.indirection == self.indirection,
            table.c.key == key,
        )
        with self.engine.connect() as connection:
            payload = connection.execute(stmt).scalar_one_or_none()
        if payload is None:
            log.debug("No stored %s for %s", self.indirection, key)
            return None
        return self._load(payload)

    def save(self, key: str, resource: T) -> None:
        table = stored_document_table
        payload = self._dump(resource)
        with self.engine.begin() as connection:
            connection.execute(
                delete(table).where(table.c.indirection == self.indirection, table.c.key == key)
            )
            connection.execute(
                insert(table).values(
                    indirection=self.indirection,
                    key=key,
                    payload=payload,
                    stored_at=datetime.now(UTC),
                )
            )
        log.debug("Stored %s for %s", self.indirection, key)


def catalog_store(engine: Engine | None = None) -> SqlAlchemyTerminus[RawCatalog]:
    return SqlAlchemyTerminus("catalog", dump=dump_catalog, load=load_catalog, engine=engine)


def report_store(engine: Engine | None = None) -> SqlAlchemyTerminus[Report]:
    return SqlAlchemyTerminus("report", dump=dump_report, load=load_report, engine=engine)


if TYPE_CHECKING:
    _terminus_check: Terminus[RawCatalog] = catalog_store()
