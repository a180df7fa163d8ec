"""Domain port definitions for adapters."""

from __future__ import annotations

from .events import EventRecorder
from .store import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ObjectStore,
    StoreError,
    matches_selector,
)

__all__ = [
    "AlreadyExistsError",
    "ConflictError",
    "EventRecorder",
    "NotFoundError",
    "ObjectStore",
    "StoreError",
    "matches_selector",
]
