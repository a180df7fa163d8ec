"""Watch/notify and a local cached view over an :class:`ObjectStore`.

A :class:`SharedInformer` lists one kind from the store on a single dispatch
thread, diffs the result against its cache by resource version and delivers
add/update/delete notifications to its handlers synchronously, in the order it
discovers them. Once per resync period every cached object is redelivered as an
update, so handlers see at-least-once delivery even when nothing changed.

The cache is shared by every reader. Objects handed out by the :class:`Lister`
must be treated as read-only; callers that need to mutate take a deep copy.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from shipper_scheduler.domain.model import ShipperObject
from shipper_scheduler.domain.ports import NotFoundError, matches_selector

if TYPE_CHECKING:
    from collections.abc import Mapping

    from shipper_scheduler.domain.ports import ObjectStore

    from .rate_limit import Clock

log = logging.getLogger(__name__)


@runtime_checkable
class ResourceEventHandler(Protocol):
    def on_add(self, obj: object) -> None: ...

    def on_update(self, old: object, new: object) -> None: ...

    def on_delete(self, obj: object) -> None: ...


class Lister[T: ShipperObject]:
    """Read-only access to an informer's cache."""

    def __init__(self, kind: type[T], cache: dict[str, T], lock: threading.Lock) -> None:
        self._kind = kind
        self._cache = cache
        self._lock = lock

    def get(self, namespace: str, name: str) -> T:
        key = f"{namespace}/{name}" if namespace else name
        with self._lock:
            obj = self._cache.get(key)
        if obj is None:
            raise NotFoundError(self._kind.KIND, key)
        return obj

    def list(
        self,
        *,
        namespace: str | None = None,
        selector: Mapping[str, str] | None = None,
    ) -> list[T]:
        with self._lock:
            objects = list(self._cache.values())
        return sorted(
            (
                obj
                for obj in objects
                if (namespace is None or obj.namespace == namespace)
                and matches_selector(obj.labels, selector)
            ),
            key=lambda obj: (obj.namespace, obj.name),
        )


class SharedInformer[T: ShipperObject]:
    def __init__(
        self,
        store: ObjectStore,
        kind: type[T],
        *,
        resync_period: float = 30.0,
        poll_interval: float = 1.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self.store = store
        self.kind = kind
        self.resync_period = resync_period
        self.poll_interval = poll_interval
        self._clock = clock
        self._cache: dict[str, T] = {}
        self._lock = threading.Lock()
        self._handlers: list[ResourceEventHandler] = []
        self._synced = threading.Event()
        self._last_resync = clock()
        self.lister: Lister[T] = Lister(kind, self._cache, self._lock)

    def add_event_handler(self, handler: ResourceEventHandler) -> None:
        """Register ``handler``; it receives adds for everything already cached."""

        self._handlers.append(handler)
        with self._lock:
            existing = list(self._cache.values())
        for obj in existing:
            self._dispatch("on_add", handler, obj)

    def has_synced(self) -> bool:
        return self._synced.is_set()

    def run(self, stop: threading.Event) -> None:
        """Poll the store until ``stop`` is set. Store failures are logged and retried."""

        log.info("Starting %s informer", self.kind.KIND)
        while not stop.is_set():
            try:
                self.poll()
            except Exception:
                log.exception("Failed to list %s; retrying", self.kind.KIND)
            stop.wait(self.poll_interval)
        log.info("Stopped %s informer", self.kind.KIND)

    def poll(self) -> None:
        """List the store once, update the cache and notify handlers of changes."""

        listed = {obj.metadata.key: obj for obj in self.store.list(self.kind)}
        with self._lock:
            previous = dict(self._cache)
            self._cache.clear()
            self._cache.update(listed)

        for key, obj in listed.items():
            old = previous.get(key)
            if old is None:
                self._notify_add(obj)
            elif old.metadata.resource_version != obj.metadata.resource_version:
                self._notify_update(old, obj)
        for key, old in previous.items():
            if key not in listed:
                self._notify_delete(old)

        if not self._synced.is_set():
            log.info("%s informer synced %d objects", self.kind.KIND, len(listed))
            self._synced.set()

        now = self._clock()
        if self.resync_period > 0 and now - self._last_resync >= self.resync_period:
            self._last_resync = now
            self.resync()

    def resync(self) -> None:
        """Redeliver every cached object as an unchanged update."""

        with self._lock:
            cached = list(self._cache.values())
        for obj in cached:
            self._notify_update(obj, obj)

    def _notify_add(self, obj: T) -> None:
        for handler in self._handlers:
            self._dispatch("on_add", handler, obj)

    def _notify_update(self, old: T, new: T) -> None:
        for handler in self._handlers:
            self._dispatch("on_update", handler, old, new)

    def _notify_delete(self, obj: T) -> None:
        for handler in self._handlers:
            self._dispatch("on_delete", handler, obj)

    def _dispatch(self, method: str, handler: ResourceEventHandler, *objects: T) -> None:
        try:
            getattr(handler, method)(*objects)
        except Exception:
            log.exception("%s handler for %s raised", method, self.kind.KIND)


def wait_for_cache_sync(
    stop: threading.Event,
    *informers: SharedInformer[Any],
    interval: float = 0.1,
) -> bool:
    """Block until every informer has synced. Returns False if ``stop`` fires first."""

    while not all(informer.has_synced() for informer in informers):
        if stop.wait(interval):
            return False
    return True
