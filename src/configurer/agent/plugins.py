"""Plugin and fact plugin synchronisation before a run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from configurer.domain.ports.plugins import PluginSynchronizer

log = logging.getLogger(__name__)


class PluginHandler:
    def __init__(
        self,
        synchronizer: PluginSynchronizer | None,
        *,
        pluginsync: bool,
        factsync: bool,
    ) -> None:
        self.synchronizer = synchronizer
        self.pluginsync = pluginsync
        self.factsync = factsync

    def download_plugins(self) -> None:
        if not self.pluginsync:
            return
        if self.synchronizer is None:
            log.warning("pluginsync is enabled but no plugin source is configured")
            return
        log.info("Retrieving plugins")
        self.synchronizer.download_plugins()

    def download_fact_plugins(self) -> None:
        if not self.factsync:
            return
        if self.synchronizer is None:
            log.warning("factsync is enabled but no plugin source is configured")
            return
        log.info("Retrieving fact plugins")
        self.synchronizer.download_fact_plugins()
