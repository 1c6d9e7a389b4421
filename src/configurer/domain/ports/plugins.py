"""Ports for synchronising supporting code before a run."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PluginSynchronizer(Protocol):
    """Fetches and installs plugins and fact plugins from the server."""

    def download_plugins(self) -> None: ...

    def download_fact_plugins(self) -> None: ...
