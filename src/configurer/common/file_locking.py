"""Advisory file locking around reads and writes."""

from __future__ import annotations

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


@contextmanager
def readlock(path: str | os.PathLike[str]) -> Iterator[IO[str]]:
    """Open ``path`` for reading under a shared lock."""

    with Path(path).open(encoding="utf-8") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
        try:
            yield handle
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


@contextmanager
def writelock(path: str | os.PathLike[str], mode: int | None = None) -> Iterator[IO[str]]:
    """Open ``path`` for writing under an exclusive lock.

    The file is created with ``mode`` when missing and truncated only once the lock
    is held, so concurrent readers never observe a half-cleared file.
    """

    target = Path(path)
    if not target.parent.is_dir():
        raise FileNotFoundError(f"Cannot lock {target}: directory does not exist")

    flags = os.O_CREAT | os.O_WRONLY
    fd = os.open(target, flags, 0o666 if mode is None else mode)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        try:
            handle.seek(0)
            handle.truncate(0)
            yield handle
            handle.flush()
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    if mode is not None:
        target.chmod(mode)
