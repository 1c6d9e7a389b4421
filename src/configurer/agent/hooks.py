"""Pre-run and post-run command hooks."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable, Sequence

from configurer.common.execution import ExecutionFailure, execute

log = logging.getLogger(__name__)

Executor = Callable[[Sequence[str]], object]


class CommandHookError(RuntimeError):
    """Raised when a configured hook command fails."""

    def __init__(self, message: str, *, setting: str, command: str) -> None:
        super().__init__(message)
        self.setting = setting
        self.command = command


def run_hook(setting: str, command: str, *, executor: Executor = execute) -> None:
    """Run the hook ``command`` configured under ``setting``; empty commands do nothing."""

    if not command.strip():
        return

    log.debug("Running %s: %s", setting, command)
    try:
        executor(shlex.split(command))
    except (ExecutionFailure, ValueError) as exc:
        raise CommandHookError(
            f"Could not run command from {setting}: {exc}",
            setting=setting,
            command=command,
        ) from exc
