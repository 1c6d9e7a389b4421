"""Running external commands."""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = logging.getLogger(__name__)


class ExecutionFailure(RuntimeError):
    """Raised when an external command cannot be started or exits non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


def execute(
    command: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Run ``command`` and return its combined stdout/stderr output."""

    if not command:
        raise ExecutionFailure("No command given")

    log.debug("Executing '%s'", " ".join(command))
    try:
        completed = subprocess.run(  # noqa: S603
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=dict(env) if env is not None else None,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise ExecutionFailure(f"Execution of '{' '.join(command)}' failed: {exc}") from exc

    if completed.returncode != 0:
        raise ExecutionFailure(
            f"Execution of '{' '.join(command)}' returned {completed.returncode}: "
            f"{completed.stdout.strip()}",
            returncode=completed.returncode,
            output=completed.stdout,
        )
    return completed.stdout
