"""Event-driven controller that schedules releases waiting for placement.

Notifications from the release informer pass the phase filter and land in the
work queue as ``namespace/name`` keys. A fixed pool of worker threads drains the
queue; each key is reconciled by :class:`ReleaseReconciler` and either forgotten
(success) or requeued with exponential backoff (failure).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from shipper_scheduler.domain.model import ShipperObject

from .filters import FilteringResourceEventHandler, awaiting_scheduling
from .informer import wait_for_cache_sync
from .keys import InvalidKeyError, object_key
from .reconciler import ReleaseReconciler
from .release_ids import uid_release_id
from .scheduler import ClusterScheduler, all_clusters
from .workqueue import WorkQueue

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import Cluster, Release
    from shipper_scheduler.domain.ports import EventRecorder, ObjectStore

    from .informer import SharedInformer
    from .release_ids import ReleaseIdGenerator
    from .scheduler import ClusterPredicate

log = logging.getLogger(__name__)

CONTROLLER_AGENT_NAME: Final[str] = "schedule-controller"
QUEUE_NAME: Final[str] = "Releases"


class CacheSyncError(RuntimeError):
    """Raised when the controller is stopped before its caches finished syncing."""


@dataclass(slots=True)
class _EnqueueHandler:
    controller: ScheduleController

    def on_add(self, obj: object) -> None:
        self.controller.enqueue(obj)

    def on_update(self, old: object, new: object) -> None:  # noqa: ARG002
        self.controller.enqueue(new)

    def on_delete(self, obj: object) -> None:
        pass


class ScheduleController:
    def __init__(
        self,
        *,
        releases: SharedInformer[Release],
        clusters: SharedInformer[Cluster],
        store: ObjectStore,
        recorder: EventRecorder,
        queue: WorkQueue | None = None,
        release_id: ReleaseIdGenerator = uid_release_id,
        predicate: ClusterPredicate = all_clusters,
        worker_restart_delay: float = 1.0,
    ) -> None:
        self.releases = releases
        self.clusters = clusters
        self.queue = queue if queue is not None else WorkQueue(QUEUE_NAME)
        self.worker_restart_delay = worker_restart_delay
        self.reconciler = ReleaseReconciler(
            releases=releases.lister,
            scheduler=ClusterScheduler(clusters=clusters.lister, predicate=predicate),
            store=store,
            recorder=recorder,
            release_id=release_id,
        )

        log.info("Setting up event handlers")
        releases.add_event_handler(
            FilteringResourceEventHandler(
                filter_func=awaiting_scheduling,
                handler=_EnqueueHandler(self),
            )
        )

    def enqueue(self, obj: object) -> None:
        if not isinstance(obj, ShipperObject):
            log.error("Expected a stored object in notification but got %r", obj)
            return
        try:
            key = object_key(obj)
        except InvalidKeyError:
            log.exception("Cannot compute a queue key for %r", obj)
            return
        self.queue.add(key)

    def run(self, workers: int, stop: threading.Event) -> None:
        """Run ``workers`` threads until ``stop`` is set, then drain and return.

        Blocks until both informers have synced before starting any worker.
        """

        log.info("Starting %s", CONTROLLER_AGENT_NAME)
        threads: list[threading.Thread] = []
        try:
            log.info("Waiting for informer caches to sync")
            if not wait_for_cache_sync(stop, self.releases, self.clusters):
                raise CacheSyncError("failed to wait for caches to sync")

            log.info("Starting %d workers", workers)
            for index in range(workers):
                thread = threading.Thread(
                    target=self._run_worker_until,
                    args=(stop,),
                    name=f"{CONTROLLER_AGENT_NAME}-worker-{index}",
                    daemon=True,
                )
                thread.start()
                threads.append(thread)
            log.info("Started workers")

            stop.wait()
            log.info("Shutting down workers")
        finally:
            self.queue.shut_down()
            for thread in threads:
                thread.join()

    def run_worker(self) -> None:
        while self.process_next_work_item():
            pass

    def process_next_work_item(self) -> bool:
        """Reconcile one key. Returns False once the queue has shut down."""

        key, shutdown = self.queue.get()
        if shutdown or key is None:
            return False

        try:
            self.reconciler.sync(key)
        except Exception as exc:
            log.error("Error syncing '%s': %s", key, exc)  # noqa: TRY400
            log.debug("Sync failure details for '%s'", key, exc_info=True)
            self.queue.add_rate_limited(key)
            self.reconciler.record_failure(key, exc)
        else:
            self.queue.forget(key)
            log.info("Successfully synced '%s'", key)
        finally:
            self.queue.done(key)
        return True

    def _run_worker_until(self, stop: threading.Event) -> None:
        # a crashed worker loop is restarted after a pause
        while not stop.is_set() and not self.queue.shutting_down:
            try:
                self.run_worker()
            except Exception:
                log.exception("Worker crashed; restarting in %.1fs", self.worker_restart_delay)
            stop.wait(self.worker_restart_delay)
