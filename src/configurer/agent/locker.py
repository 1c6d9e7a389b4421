"""Run exclusivity and administrative disabling of the agent."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from configurer.common.pidlock import Pidlock

if TYPE_CHECKING:
    import os
    from collections.abc import Iterator

log = logging.getLogger(__name__)

DEFAULT_DISABLED_MESSAGE = "reason not specified"


class Locker:
    """Guards runs with a node-level lock and tracks whether runs are disabled."""

    def __init__(
        self,
        lockfile: str | os.PathLike[str],
        disabled_lockfile: str | os.PathLike[str],
    ) -> None:
        self.run_lock = Pidlock(lockfile)
        self.disabled_lockfile = Path(disabled_lockfile)

    @contextmanager
    def lock(self) -> Iterator[bool]:
        """Try once to take the run lock; yield whether it was acquired."""

        acquired = self.run_lock.lock()
        try:
            yield acquired
        finally:
            if acquired:
                self.run_lock.unlock()

    @property
    def running(self) -> bool:
        return self.run_lock.locked()

    @property
    def disabled(self) -> bool:
        return self.disabled_lockfile.exists()

    @property
    def disabled_message(self) -> str | None:
        if not self.disabled:
            return None
        try:
            document = json.loads(self.disabled_lockfile.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return DEFAULT_DISABLED_MESSAGE
        if isinstance(document, dict):
            return str(document.get("disabled_message") or DEFAULT_DISABLED_MESSAGE)
        return DEFAULT_DISABLED_MESSAGE

    def disable(self, message: str | None = None) -> None:
        reason = message or DEFAULT_DISABLED_MESSAGE
        self.disabled_lockfile.parent.mkdir(parents=True, exist_ok=True)
        self.disabled_lockfile.write_text(
            json.dumps({"disabled_message": reason}), encoding="utf-8"
        )
        log.info("Disabled agent runs: %s", reason)

    def enable(self) -> None:
        if not self.disabled:
            log.debug("Agent runs are already enabled")
            return
        self.disabled_lockfile.unlink(missing_ok=True)
        log.info("Enabled agent runs")
