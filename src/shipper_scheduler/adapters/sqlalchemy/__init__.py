"""SQLAlchemy adapter package for the scheduler."""

from __future__ import annotations

from .engine import StartupError, configured_engine, is_started, shutdown, startup
from .mappings import metadata, object_table
from .migrations import upgrade_head
from .store import SqlAlchemyObjectStore

__all__ = [
    "SqlAlchemyObjectStore",
    "StartupError",
    "configured_engine",
    "is_started",
    "metadata",
    "object_table",
    "shutdown",
    "startup",
    "upgrade_head",
]
