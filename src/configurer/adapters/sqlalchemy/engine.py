"""Engine lifecycle for the local document store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from configurer.common.storage import get_cache_database_uri

from .mappings import create_all_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the document store is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the SQLAlchemy engine and create the document table."""

    if _STATE.engine is not None and not force:
        raise StartupError("Document store already initialised. Pass force=True to reconfigure.")
    if _STATE.engine is not None:
        _STATE.engine.dispose()

    resolved_engine = engine or create_engine(database_uri or get_cache_database_uri(), future=True)
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine
    return resolved_engine


def configured_engine() -> Engine:
    """Return the engine currently managed by the adapter."""

    if _STATE.engine is None:
        raise StartupError(
            "Document store not initialised. Call configurer.adapters.sqlalchemy."
            "engine.startup() before requesting a terminus."
        )
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
