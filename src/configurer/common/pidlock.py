"""Single-attempt, node-local mutual exclusion keyed by a lock file."""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)


class LockError(RuntimeError):
    """Raised when a lock file cannot be created or inspected."""


class Pidlock:
    """Exclusive advisory lock recording the holder's pid.

    ``lock()`` never waits: it returns ``False`` straight away when another
    process holds the lock. The kernel drops the ``flock`` when the holding
    process exits, so a lock file left behind by a crashed run does not block
    the next one. The lock file itself is never removed; releasing the lock
    empties it.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._fd: int | None = None

    @property
    def mine(self) -> bool:
        return self._fd is not None

    def lock(self) -> bool:
        """Try once to take the lock; return whether this process now holds it."""

        if self._fd is not None:
            return True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o644)
        except OSError as exc:
            raise LockError(f"Could not open lock file {self.path}: {exc}") from exc

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            return False

        # The path may have been replaced between open() and flock().
        if not self._is_current(fd):
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
            log.debug("Lock file %s was replaced while locking", self.path)
            return False

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        os.fsync(fd)
        self._fd = fd
        log.debug("Acquired lock %s", self.path)
        return True

    def unlock(self) -> bool:
        """Release the lock if this process holds it."""

        if self._fd is None:
            return False
        fd, self._fd = self._fd, None
        try:
            os.ftruncate(fd, 0)
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
        log.debug("Released lock %s", self.path)
        return True

    def locked(self) -> bool:
        """Return whether any process currently holds the lock."""

        if self._fd is not None:
            return True
        try:
            fd = os.open(self.path, os.O_RDONLY)
        except FileNotFoundError:
            return False
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            return True
        else:
            fcntl.flock(fd, fcntl.LOCK_UN)
            return False
        finally:
            os.close(fd)

    def lock_pid(self) -> int | None:
        try:
            content = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return int(content) if content.isdigit() else None

    def _is_current(self, fd: int) -> bool:
        try:
            on_disk = os.stat(self.path)
        except FileNotFoundError:
            return False
        held = os.fstat(fd)
        return (held.st_dev, held.st_ino) == (on_disk.st_dev, on_disk.st_ino)
