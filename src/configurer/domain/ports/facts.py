"""Ports for collecting node facts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from configurer.domain.facts import Facts


@runtime_checkable
class FactCollector(Protocol):
    """Produces the current facts for a node."""

    def collect(self, name: str) -> Facts: ...
