"""SQLAlchemy adapter package for Stockroom."""

from __future__ import annotations

from .mappings import UTCDateTime, create_all_tables, document_table, metadata
from .store import (
    SqlAlchemyEntityStore,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyEntityStore",
    "StartupError",
    "UTCDateTime",
    "configured_engine",
    "create_all_tables",
    "document_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
