"""Gathering the node's facts for catalog requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from configurer.domain.facts import Facts, FactsFormat
    from configurer.domain.ports.facts import FactCollector

log = logging.getLogger(__name__)


class FactError(RuntimeError):
    """Raised when local facts cannot be collected."""


class FactHandler:
    """Collects facts once per run and encodes them for uploading."""

    def __init__(self, collector: FactCollector, *, certname: str, facts_format: FactsFormat) -> None:
        self.collector = collector
        self.certname = certname
        self.facts_format: FactsFormat = facts_format
        self._facts: Facts | None = None

    def find_facts(self) -> Facts:
        """Collect fresh facts for this node, replacing any gathered earlier."""

        try:
            facts = self.collector.collect(self.certname)
        except Exception as exc:
            raise FactError(f"Could not retrieve local facts: {exc}") from exc
        log.debug("Collected %d facts for %s", len(facts.values), self.certname)
        self._facts = facts
        return facts

    def facts_for_uploading(self) -> dict[str, str]:
        facts = self._facts or self.find_facts()
        return facts.for_uploading(self.facts_format)
