"""Port for recording events about stored objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import EventType, ShipperObject


@runtime_checkable
class EventRecorder(Protocol):
    """Record a human-readable event associated with ``obj``."""

    def event(
        self,
        obj: ShipperObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None: ...
