"""Domain port definitions for adapters."""

from __future__ import annotations

from .facts import FactCollector
from .locating import FindOptions, Terminus
from .plugins import PluginSynchronizer

__all__ = [
    "FactCollector",
    "FindOptions",
    "PluginSynchronizer",
    "Terminus",
]
