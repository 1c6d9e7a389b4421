"""The agent run: retrieval, application and reporting of the node's catalog."""

from __future__ import annotations

from .configurer import Configurer
from .facts import FactError, FactHandler
from .hooks import CommandHookError, run_hook
from .locker import Locker
from .plugins import PluginHandler
from .reporting import ReportManager
from .retrieval import CatalogRetriever, convert_catalog

__all__ = [
    "CatalogRetriever",
    "CommandHookError",
    "Configurer",
    "FactError",
    "FactHandler",
    "Locker",
    "PluginHandler",
    "ReportManager",
    "convert_catalog",
    "run_hook",
]
