"""Event recorders that publish to the logging system."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shipper_scheduler.domain.model import EventType

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import ShipperObject
    from shipper_scheduler.domain.ports import EventRecorder

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LoggingEventRecorder:
    """Writes each event as a log line attributed to ``component``."""

    component: str
    logger: logging.Logger = field(default=log)

    def event(
        self,
        obj: ShipperObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        level = logging.WARNING if event_type == EventType.WARNING else logging.INFO
        self.logger.log(
            level,
            "Event(%s %s) %s: %s [%s] %s",
            obj.kind,
            obj.metadata.key,
            event_type,
            reason,
            self.component,
            message,
        )


@dataclass(slots=True)
class BroadcastEventRecorder:
    """Fans every event out to several recorders."""

    recorders: tuple[EventRecorder, ...]

    def event(
        self,
        obj: ShipperObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        for recorder in self.recorders:
            recorder.event(obj, event_type, reason, message)
