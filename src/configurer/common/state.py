"""YAML-backed state file shared between runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .file_locking import readlock, writelock

log = logging.getLogger(__name__)


class StateError(RuntimeError):
    """Raised when the state file is unusable and cannot be replaced."""


@dataclass(slots=True)
class StateStore:
    """Named sections of run metadata persisted in a single YAML document."""

    path: Path
    _sections: dict[str, dict[str, Any]] = field(default_factory=dict)

    def cache(self, name: str) -> dict[str, Any]:
        """Return the mutable section ``name``, creating it when absent."""

        return self._sections.setdefault(name, {})

    def clear(self) -> None:
        self._sections.clear()

    def load(self) -> None:
        """Load the state file, replacing a corrupt one with an empty state."""

        self.clear()
        if not self.path.exists():
            return
        try:
            self._sections = self._read()
        except (OSError, yaml.YAMLError, TypeError, ValueError) as exc:
            log.error("Corrupt state file %s: %s", self.path, exc)  # noqa: TRY400
            try:
                self.path.unlink()
            except OSError as unlink_exc:
                raise StateError(f"Cannot remove {self.path}: {unlink_exc}") from unlink_exc
            self.clear()

    def store(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with writelock(self.path, 0o660) as handle:
            yaml.safe_dump(self._sections, handle, default_flow_style=False)

    def _read(self) -> dict[str, dict[str, Any]]:
        with readlock(self.path) as handle:
            document = yaml.safe_load(handle)
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise TypeError(f"expected a mapping, got {type(document).__name__}")
        return {str(key): dict(value or {}) for key, value in document.items()}
