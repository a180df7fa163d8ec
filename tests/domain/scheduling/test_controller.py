from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest

from shipper_scheduler.domain.model import Cluster, EventType, ObjectKind, Release
from shipper_scheduler.domain.scheduling import (
    QUEUE_NAME,
    CacheSyncError,
    ScheduleController,
    SharedInformer,
    WorkQueue,
    all_clusters,
)
from tests.helpers.clock import FakeClock
from tests.helpers.objects import make_cluster, make_release

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shipper_scheduler.adapters.memory import InMemoryEventRecorder, InMemoryObjectStore
    from shipper_scheduler.domain.model import ClusterSelector, ShipperObject
    from shipper_scheduler.domain.scheduling import ClusterPredicate
    from tests.helpers.stores import FlakyObjectStore


def _controller(
    store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
    *,
    clock: FakeClock | None = None,
    predicate: ClusterPredicate | None = None,
) -> ScheduleController:
    releases = SharedInformer(store, Release, poll_interval=0.01)
    clusters = SharedInformer(store, Cluster, poll_interval=0.01)
    return ScheduleController(
        releases=releases,
        clusters=clusters,
        store=store,
        recorder=recorder,
        queue=WorkQueue(QUEUE_NAME, clock=clock or FakeClock()),
        predicate=predicate or all_clusters,
    )


def _poll(controller: ScheduleController) -> None:
    controller.clusters.poll()
    controller.releases.poll()


def test_waiting_releases_are_enqueued_by_key(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    memory_store.create(make_release("app-1"))
    memory_store.create(make_release("app-2", phase="WaitingForStrategy"))
    controller = _controller(memory_store, recorder)

    _poll(controller)

    assert len(controller.queue) == 1
    assert controller.queue.get(timeout=0) == ("ns/app-1", False)


def test_enqueue_ignores_foreign_objects(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
    caplog: pytest.LogCaptureFixture,
) -> None:
    controller = _controller(memory_store, recorder)

    controller.enqueue("ns/app-1")

    assert len(controller.queue) == 0
    assert "Expected a stored object" in caplog.text


def test_process_next_work_item_schedules_and_forgets(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    memory_store.create(make_cluster("cluster-a"))
    memory_store.create(make_release("app-1"))
    controller = _controller(memory_store, recorder)
    _poll(controller)

    assert controller.process_next_work_item()

    release = memory_store.get(Release, "ns", "app-1")
    assert release.phase == "WaitingForStrategy"
    assert release.environment.clusters == ["cluster-a"]
    assert controller.queue.num_requeues("ns/app-1") == 0
    assert len(controller.queue) == 0


def test_scheduled_release_is_not_enqueued_again(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    memory_store.create(make_release("app-1"))
    controller = _controller(memory_store, recorder)
    _poll(controller)
    controller.process_next_work_item()

    controller.releases.poll()
    controller.releases.resync()

    assert len(controller.queue) == 0


def test_failed_sync_is_requeued_with_backoff(
    flaky_store: FlakyObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    flaky_store.create(make_cluster("cluster-a"))
    flaky_store.create(make_release("app-1"))
    flaky_store.fail_next_create(ObjectKind.TRAFFIC_TARGET)
    clock = FakeClock()
    controller = _controller(flaky_store, recorder, clock=clock)
    _poll(controller)

    assert controller.process_next_work_item()

    assert controller.queue.num_requeues("ns/app-1") == 1
    assert len(controller.queue) == 0
    assert [(event.event_type, event.reason) for event in recorder.events] == [
        (EventType.WARNING, "SyncFailed")
    ]

    clock.advance(1.0)
    assert controller.process_next_work_item()

    assert flaky_store.get(Release, "ns", "app-1").phase == "WaitingForStrategy"
    assert controller.queue.num_requeues("ns/app-1") == 0
    assert recorder.events[-1].reason == "Synced"


def test_unexpected_errors_are_requeued(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    def broken_placement(cluster: Cluster, selectors: Sequence[ClusterSelector]) -> bool:
        raise RuntimeError(f"cannot place onto {cluster.name} with {len(selectors)} selectors")

    memory_store.create(make_cluster("cluster-a"))
    memory_store.create(make_release("app-1"))
    controller = _controller(memory_store, recorder, predicate=broken_placement)
    _poll(controller)

    assert controller.process_next_work_item()

    assert controller.queue.num_requeues("ns/app-1") == 1
    assert memory_store.get(Release, "ns", "app-1").phase == "WaitingForScheduling"
    assert recorder.events[-1].event_type == EventType.WARNING


def test_process_next_work_item_stops_after_shutdown(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    memory_store.create(make_release("app-1"))
    controller = _controller(memory_store, recorder)
    _poll(controller)

    controller.queue.shut_down()

    assert not controller.process_next_work_item()
    assert memory_store.get(Release, "ns", "app-1").phase == "WaitingForScheduling"


def test_run_fails_when_stopped_before_caches_sync(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    controller = _controller(memory_store, recorder)
    stop = threading.Event()
    stop.set()

    with pytest.raises(CacheSyncError):
        controller.run(2, stop)

    assert controller.queue.shutting_down


def test_run_processes_releases_until_stopped(
    memory_store: InMemoryObjectStore,
    recorder: InMemoryEventRecorder,
) -> None:
    memory_store.create(make_cluster("cluster-a"))
    for index in range(5):
        memory_store.create(make_release(f"app-{index}"))
    controller = ScheduleController(
        releases=SharedInformer(memory_store, Release, poll_interval=0.01),
        clusters=SharedInformer(memory_store, Cluster, poll_interval=0.01),
        store=memory_store,
        recorder=recorder,
    )
    _poll(controller)
    stop = threading.Event()
    runner = threading.Thread(target=controller.run, args=(3, stop))
    runner.start()

    try:
        for _ in range(500):
            if len(recorder.events) >= 5:
                break
            stop.wait(0.01)
    finally:
        stop.set()
        runner.join(timeout=5)

    assert not runner.is_alive()
    releases = memory_store.list(Release)
    assert all(release.phase == "WaitingForStrategy" for release in releases)
    assert {event.key for event in recorder.events} == {f"ns/app-{index}" for index in range(5)}


class _RecordingQueue(WorkQueue):
    def __init__(self) -> None:
        super().__init__(QUEUE_NAME)
        self.done_keys: list[str] = []

    def done(self, key: str) -> None:
        self.done_keys.append(key)
        super().done(key)


@dataclass(slots=True)
class _BrokenWarningRecorder:
    """Raises on the first Warning event, then records like the wrapped recorder."""

    inner: InMemoryEventRecorder
    failures: int = 1

    def event(
        self,
        obj: ShipperObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        if event_type is EventType.WARNING and self.failures:
            self.failures -= 1
            raise RuntimeError("event sink unavailable")
        self.inner.event(obj, event_type, reason, message)


def test_crashed_worker_restarts_and_keeps_draining(
    flaky_store: FlakyObjectStore,
    recorder: InMemoryEventRecorder,
    caplog: pytest.LogCaptureFixture,
) -> None:
    flaky_store.create(make_cluster("cluster-a"))
    flaky_store.create(make_release("app-1"))
    flaky_store.create(make_release("app-2"))
    flaky_store.fail_next_create(ObjectKind.TRAFFIC_TARGET)
    queue = _RecordingQueue()
    controller = ScheduleController(
        releases=SharedInformer(flaky_store, Release, poll_interval=0.01),
        clusters=SharedInformer(flaky_store, Cluster, poll_interval=0.01),
        store=flaky_store,
        recorder=_BrokenWarningRecorder(recorder),
        queue=queue,
        worker_restart_delay=0.01,
    )
    _poll(controller)
    stop = threading.Event()
    runner = threading.Thread(target=controller.run, args=(1, stop))
    runner.start()

    try:
        for _ in range(500):
            if len(recorder.events) >= 2:
                break
            stop.wait(0.01)
    finally:
        stop.set()
        runner.join(timeout=5)

    assert not runner.is_alive()
    assert "Worker crashed" in caplog.text
    assert queue.done_keys[0] == "ns/app-1"
    assert {event.key for event in recorder.events} == {"ns/app-1", "ns/app-2"}
    assert all(release.phase == "WaitingForStrategy" for release in flaky_store.list(Release))
