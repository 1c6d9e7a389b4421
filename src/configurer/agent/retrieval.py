"""Catalog retrieval with cache fallback, and conversion to an executable graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Unpack

from configurer.common.logging import notice, thinmark

if TYPE_CHECKING:
    import os
    from collections.abc import Callable

    from configurer.domain.catalog import ExecutableCatalog, RawCatalog
    from configurer.domain.indirection import Indirection
    from configurer.domain.ports.locating import FindOptions

    from .facts import FactHandler

log = logging.getLogger(__name__)


def convert_catalog(
    raw: RawCatalog,
    retrieval_duration: float,
    *,
    classfile: str | os.PathLike[str],
) -> ExecutableCatalog:
    """Turn ``raw`` into a finalized executable catalog and record its classes."""

    catalog = raw.to_executable()
    catalog.retrieval_duration = retrieval_duration
    catalog.finalize()
    catalog.write_class_file(classfile)
    return catalog


class CatalogRetriever:
    """Obtain this node's catalog from the terminus, the cache, or both.

    The default path asks the terminus directly and falls back to the cache when
    that fails and ``usecacheonfailure`` is set. With ``use_cached_catalog`` the
    cache is asked first and the terminus only when the cache is empty. Every
    lookup and the conversion are guarded: failures are logged and end up as
    ``None``.
    """

    def __init__(
        self,
        locator: Indirection[RawCatalog],
        facts: FactHandler,
        *,
        certname: str,
        classfile: str | os.PathLike[str],
        use_cached_catalog: bool = False,
        usecacheonfailure: bool = True,
        converter: Callable[[RawCatalog, float], ExecutableCatalog] | None = None,
    ) -> None:
        self.locator = locator
        self.facts = facts
        self.certname = certname
        self.classfile = classfile
        self.use_cached_catalog = use_cached_catalog
        self.usecacheonfailure = usecacheonfailure
        self.converter = converter or self._convert

    def retrieve(self) -> ExecutableCatalog | None:
        fact_options: FindOptions = {}
        if self.locator.requires_facts:
            facts = self.facts.facts_for_uploading()
            fact_options = {"facts": facts["facts"], "facts_format": facts["facts_format"]}

        if self.use_cached_catalog:
            raw, duration = self.retrieve_from_cache(fact_options)
            if raw is None:
                raw, duration = self.retrieve_new(fact_options)
        else:
            raw, duration = self.retrieve_new(fact_options)
            if raw is None:
                if not self.usecacheonfailure:
                    log.warning("Not using cache on failed catalog")
                    return None
                raw, duration = self.retrieve_from_cache(fact_options)

        if raw is None:
            return None

        try:
            return self.converter(raw, duration)
        except Exception as exc:  # noqa: BLE001
            log.error("Could not convert catalog for %s: %s", self.certname, exc)  # noqa: TRY400
            return None

    def retrieve_from_cache(self, fact_options: FindOptions) -> tuple[RawCatalog | None, float]:
        raw, duration = self._find("cache", ignore_terminus=True, **fact_options)
        if raw is not None:
            notice(log, "Using cached catalog")
        return raw, duration

    def retrieve_new(self, fact_options: FindOptions) -> tuple[RawCatalog | None, float]:
        return self._find("remote server", ignore_cache=True, **fact_options)

    def _find(self, source: str, **options: Unpack[FindOptions]) -> tuple[RawCatalog | None, float]:
        raw: RawCatalog | None = None
        with thinmark() as elapsed:
            try:
                raw = self.locator.find(self.certname, **options)
            except Exception as exc:  # noqa: BLE001
                log.error("Could not retrieve catalog from %s: %s", source, exc)  # noqa: TRY400
        return raw, elapsed[0]

    def _convert(self, raw: RawCatalog, retrieval_duration: float) -> ExecutableCatalog:
        return convert_catalog(raw, retrieval_duration, classfile=self.classfile)
