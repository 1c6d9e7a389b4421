"""Data storage helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "configurer"
DEFAULT_CACHE_DB_FILENAME: Final[str] = "cache.db"


def get_vardir() -> Path:
    """Return the directory where the agent keeps its runtime state."""

    env_dir = os.getenv("CONFIGURER_VARDIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    elif os.geteuid() == 0:
        base_path = Path("/var/lib")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")

    return (base_path / APP_DIR_NAME).expanduser().resolve()


def ensure_vardir(path: Path | None = None) -> Path:
    """Ensure the state directory exists and return it."""

    vardir = path or get_vardir()
    vardir.mkdir(parents=True, exist_ok=True)
    return vardir


def get_cache_database_uri(vardir: Path | None = None) -> str:
    """Compute the cache database URI, respecting overrides."""

    env_uri = os.getenv("CONFIGURER_CACHE_DATABASE_URI")
    if env_uri:
        return env_uri
    db_path = ensure_vardir(vardir) / DEFAULT_CACHE_DB_FILENAME
    return f"sqlite+pysqlite:///{db_path}"
