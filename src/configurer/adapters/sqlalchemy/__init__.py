"""SQLAlchemy adapter package: the local document store."""

from __future__ import annotations

from .engine import StartupError, configured_engine, is_started, shutdown, startup
from .mappings import create_all_tables, metadata, stored_document_table
from .terminus import SqlAlchemyTerminus, catalog_store, report_store

__all__ = [
    "SqlAlchemyTerminus",
    "StartupError",
    "catalog_store",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "report_store",
    "shutdown",
    "startup",
    "stored_document_table",
]
