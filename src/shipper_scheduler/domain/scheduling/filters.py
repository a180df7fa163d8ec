"""Admission predicate applied to store notifications before they are queued."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shipper_scheduler.domain.model import Release, ReleasePhase

if TYPE_CHECKING:
    from collections.abc import Callable

    from .informer import ResourceEventHandler


def awaiting_scheduling(obj: object) -> bool:
    """Admit only releases whose phase label says they wait for scheduling."""

    if not isinstance(obj, Release):
        return False
    return obj.phase == ReleasePhase.WAITING_FOR_SCHEDULING


@dataclass(slots=True)
class FilteringResourceEventHandler:
    """Forward notifications to ``handler`` only when ``filter_func`` admits the object.

    Updates are checked against the new object only, so an update is new work
    whenever the post-update object still matches.
    """

    filter_func: Callable[[object], bool]
    handler: ResourceEventHandler

    def on_add(self, obj: object) -> None:
        if self.filter_func(obj):
            self.handler.on_add(obj)

    def on_update(self, old: object, new: object) -> None:
        if self.filter_func(new):
            self.handler.on_update(old, new)

    def on_delete(self, obj: object) -> None:
        if self.filter_func(obj):
            self.handler.on_delete(obj)
