"""In-process object store and event sink."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from shipper_scheduler.domain.ports import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    matches_selector,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from shipper_scheduler.domain.model import EventType, ObjectKind, ShipperObject


class InMemoryObjectStore:
    """Thread-safe store keeping private copies of every object.

    Objects are copied on the way in and on the way out, so callers never share
    state with the store or with each other.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[ObjectKind, str, str], ShipperObject] = {}
        self._lock = threading.Lock()
        self._version = 0

    def get[T: ShipperObject](self, kind: type[T], namespace: str, name: str) -> T:
        with self._lock:
            stored = self._objects.get((kind.KIND, namespace, name))
            if stored is None:
                raise NotFoundError(kind.KIND, _key(namespace, name))
            return cast("T", stored.deep_copy())

    def list[T: ShipperObject](
        self,
        kind: type[T],
        *,
        namespace: str | None = None,
        selector: Mapping[str, str] | None = None,
    ) -> list[T]:
        with self._lock:
            matches = [
                obj.deep_copy()
                for (obj_kind, obj_namespace, _), obj in self._objects.items()
                if obj_kind == kind.KIND
                and (namespace is None or obj_namespace == namespace)
                and matches_selector(obj.labels, selector)
            ]
        return cast("list[T]", sorted(matches, key=lambda obj: (obj.namespace, obj.name)))

    def create[T: ShipperObject](self, obj: T) -> T:
        identity = (obj.kind, obj.namespace, obj.name)
        with self._lock:
            if identity in self._objects:
                raise AlreadyExistsError(obj.kind, obj.metadata.key)
            stored = obj.deep_copy()
            stored.metadata.uid = str(uuid.uuid4())
            stored.metadata.resource_version = self._next_version()
            stored.metadata.creation_timestamp = datetime.now(UTC)
            self._objects[identity] = stored
            return stored.deep_copy()

    def update[T: ShipperObject](self, obj: T) -> T:
        identity = (obj.kind, obj.namespace, obj.name)
        with self._lock:
            current = self._objects.get(identity)
            if current is None:
                raise NotFoundError(obj.kind, obj.metadata.key)
            if current.metadata.resource_version != obj.metadata.resource_version:
                raise ConflictError(
                    obj.kind,
                    obj.metadata.key,
                    expected=obj.metadata.resource_version,
                    actual=current.metadata.resource_version,
                )
            stored = obj.deep_copy()
            stored.metadata.uid = current.metadata.uid
            stored.metadata.creation_timestamp = current.metadata.creation_timestamp
            stored.metadata.resource_version = self._next_version()
            self._objects[identity] = stored
            return stored.deep_copy()

    def delete(self, kind: type[ShipperObject], namespace: str, name: str) -> None:
        with self._lock:
            if self._objects.pop((kind.KIND, namespace, name), None) is None:
                raise NotFoundError(kind.KIND, _key(namespace, name))

    def _next_version(self) -> int:
        self._version += 1
        return self._version


def _key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}" if namespace else name


@dataclass(slots=True, frozen=True)
class EventRecord:
    kind: str
    key: str
    event_type: EventType
    reason: str
    message: str
    recorded_at: datetime


@dataclass(slots=True)
class InMemoryEventRecorder:
    """Keeps every recorded event in memory, in order."""

    events: list[EventRecord] = field(default_factory=list["EventRecord"])
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def event(
        self,
        obj: ShipperObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        record = EventRecord(
            kind=obj.kind,
            key=obj.metadata.key,
            event_type=event_type,
            reason=reason,
            message=message,
            recorded_at=datetime.now(UTC),
        )
        with self._lock:
            self.events.append(record)

    def for_key(self, key: str) -> list[EventRecord]:
        with self._lock:
            return [record for record in self.events if record.key == key]


if TYPE_CHECKING:
    from shipper_scheduler.domain.ports import EventRecorder, ObjectStore

    _store_check: ObjectStore = InMemoryObjectStore()
    _recorder_check: EventRecorder = InMemoryEventRecorder()
