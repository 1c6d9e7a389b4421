"""Shared logging helpers for the agent."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator

NOTICE: Final[int] = 25
logging.addLevelName(NOTICE, "NOTICE")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def notice(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log ``msg`` at the agent's NOTICE severity."""

    logger.log(NOTICE, msg, *args)


@contextmanager
def thinmark() -> Iterator[list[float]]:
    """Measure the wall time of the managed block.

    The yielded list receives the elapsed seconds once the block exits, even when
    it raises.
    """

    elapsed: list[float] = []
    started = time.monotonic()
    try:
        yield elapsed
    finally:
        elapsed.append(time.monotonic() - started)


@contextmanager
def benchmark(logger: logging.Logger, level: int, message: str) -> Iterator[None]:
    """Log ``message`` with the elapsed time once the block completes successfully."""

    with thinmark() as elapsed:
        yield
    logger.log(level, "%s in %.2f seconds", message, elapsed[0])
