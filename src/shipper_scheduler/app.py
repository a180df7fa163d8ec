"""Application orchestration entry points."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from shipper_scheduler.adapters.events import LoggingEventRecorder
from shipper_scheduler.adapters.sqlalchemy import SqlAlchemyObjectStore, is_started, startup
from shipper_scheduler.config import ControllerConfig, get_controller_config
from shipper_scheduler.domain.model import (
    PHASE_LABEL,
    Cluster,
    ClusterSelector,
    ObjectMeta,
    Release,
    ReleaseEnvironment,
    ReleasePhase,
    ShipmentOrder,
)
from shipper_scheduler.domain.scheduling import (
    CONTROLLER_AGENT_NAME,
    QUEUE_NAME,
    ScheduleController,
    SharedInformer,
    WorkQueue,
    all_clusters,
    default_controller_rate_limiter,
    release_id_generator_for,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shipper_scheduler.domain.ports import EventRecorder, ObjectStore
    from shipper_scheduler.domain.scheduling import ClusterPredicate

log = getLogger(__name__)


@dataclass(slots=True)
class SchedulerRuntime:
    """Informers and controller wired to one object store."""

    store: ObjectStore
    releases: SharedInformer[Release]
    clusters: SharedInformer[Cluster]
    controller: ScheduleController
    workers: int

    def run(self, stop: threading.Event) -> None:
        """Run informers and workers until ``stop`` is set."""

        informer_threads = [
            threading.Thread(
                target=informer.run,
                args=(stop,),
                name=f"{informer.kind.KIND.lower()}-informer",
                daemon=True,
            )
            for informer in (self.releases, self.clusters)
        ]
        for thread in informer_threads:
            thread.start()
        try:
            self.controller.run(self.workers, stop)
        finally:
            stop.set()
            for thread in informer_threads:
                thread.join()


def build_runtime(
    store: ObjectStore,
    *,
    config: ControllerConfig | None = None,
    recorder: EventRecorder | None = None,
    predicate: ClusterPredicate = all_clusters,
) -> SchedulerRuntime:
    """Assemble informers, queue and controller from ``config``."""

    effective_config = config or get_controller_config()
    releases = SharedInformer(
        store,
        Release,
        resync_period=effective_config.resync_seconds,
        poll_interval=effective_config.poll_seconds,
    )
    clusters = SharedInformer(
        store,
        Cluster,
        resync_period=effective_config.resync_seconds,
        poll_interval=effective_config.poll_seconds,
    )
    queue = WorkQueue(
        QUEUE_NAME,
        rate_limiter=default_controller_rate_limiter(
            base_delay=effective_config.backoff_base_seconds,
            max_delay=effective_config.backoff_max_seconds,
            qps=effective_config.qps,
            burst=effective_config.burst,
        ),
    )
    controller = ScheduleController(
        releases=releases,
        clusters=clusters,
        store=store,
        recorder=recorder or LoggingEventRecorder(component=CONTROLLER_AGENT_NAME),
        queue=queue,
        release_id=release_id_generator_for(effective_config.release_id_scheme),
        predicate=predicate,
    )
    return SchedulerRuntime(
        store=store,
        releases=releases,
        clusters=clusters,
        controller=controller,
        workers=effective_config.workers,
    )


def open_sqlalchemy_store(database_uri: str | None = None) -> SqlAlchemyObjectStore:
    """Initialise the SQL adapter once and return a store bound to it."""

    if not is_started():
        startup(database_uri=database_uri)
    return SqlAlchemyObjectStore()


def run_scheduler(
    stop: threading.Event,
    *,
    store: ObjectStore | None = None,
    config: ControllerConfig | None = None,
    database_uri: str | None = None,
) -> None:
    """Run the schedule controller until ``stop`` is set."""

    effective_store = store or open_sqlalchemy_store(database_uri)
    runtime = build_runtime(effective_store, config=config)
    log.info("Running schedule controller with %d workers", runtime.workers)
    runtime.run(stop)
    log.info("Schedule controller stopped")


def seed_cluster(store: ObjectStore, name: str) -> Cluster:
    """Register a cluster in the store."""

    cluster = store.create(Cluster(metadata=ObjectMeta(name=name)))
    log.info("Created cluster %s", cluster.name)
    return cluster


def seed_release(
    store: ObjectStore,
    namespace: str,
    name: str,
    *,
    selectors: Sequence[ClusterSelector] = (),
) -> Release:
    """Create a release waiting for scheduling."""

    release = Release(
        metadata=ObjectMeta(
            name=name,
            namespace=namespace,
            labels={PHASE_LABEL: ReleasePhase.WAITING_FOR_SCHEDULING.value},
        ),
        environment=ReleaseEnvironment(
            shipment_order=ShipmentOrder(cluster_selectors=list(selectors)),
        ),
    )
    created = store.create(release)
    log.info("Created release %s", created.metadata.key)
    return created
