"""Schedule one release: pick clusters, declare its targets, hand it to the strategy stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Protocol

from shipper_scheduler.domain.model import EventType, InstallationTarget, Release
from shipper_scheduler.domain.ports import AlreadyExistsError, NotFoundError

from .keys import InvalidKeyError, split_key
from .release_ids import uid_release_id
from .targets import build_companion_targets

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import Target
    from shipper_scheduler.domain.ports import EventRecorder, ObjectStore

    from .release_ids import ReleaseIdGenerator
    from .scheduler import ClusterScheduler

log = logging.getLogger(__name__)

SUCCESS_SYNCED: Final[str] = "Synced"
MESSAGE_RESOURCE_SYNCED: Final[str] = "Release synced successfully"
SYNC_FAILED: Final[str] = "SyncFailed"


class TargetOwnershipError(RuntimeError):
    """Raised when a target named after the release belongs to a different release id."""


class ReleaseSource(Protocol):
    """Cached, read-only view of releases."""

    def get(self, namespace: str, name: str) -> Release: ...


@dataclass(slots=True)
class ReleaseReconciler:
    """Synchronous unit of work for one release key.

    ``sync`` returns normally when the key is done (scheduled, or dropped as
    non-retryable) and raises when the key should be retried. It is safe to run
    again after a partial failure: targets that already exist are kept, and their
    cluster list pins the schedule so every attempt converges on the same state.
    """

    releases: ReleaseSource
    scheduler: ClusterScheduler
    store: ObjectStore
    recorder: EventRecorder
    release_id: ReleaseIdGenerator = field(default=uid_release_id)

    def sync(self, key: str) -> None:
        try:
            namespace, name = split_key(key)
        except InvalidKeyError:
            log.warning("Dropping invalid resource key: %r", key)
            return

        try:
            cached = self.releases.get(namespace, name)
        except NotFoundError:
            log.warning("Release '%s' in work queue no longer exists", key)
            return

        if not cached.is_waiting_for_scheduling():
            log.info("Release '%s' is in phase %r; nothing to schedule", key, cached.phase)
            return

        # the cached object is shared with other readers
        release = cached.deep_copy()
        self.schedule(release)
        self.store.update(release)

        self.recorder.event(release, EventType.NORMAL, SUCCESS_SYNCED, MESSAGE_RESOURCE_SYNCED)

    def schedule(self, release: Release) -> list[str]:
        """Create the companion targets and mark ``release`` as scheduled in place."""

        release_id = self.release_id(release)
        cluster_names = self._pinned_clusters(release, release_id)
        if cluster_names is None:
            cluster_names = self.scheduler.select(
                release.environment.shipment_order.cluster_selectors
            )
        log.debug("Scheduling release '%s' onto %s", release.metadata.key, cluster_names)

        for target in build_companion_targets(cluster_names, release, release_id):
            self._create_target(target)

        release.mark_scheduled(cluster_names)
        return cluster_names

    def record_failure(self, key: str, error: BaseException) -> None:
        """Attach a warning event to the release behind ``key``, if it still exists."""

        try:
            namespace, name = split_key(key)
            release = self.releases.get(namespace, name)
        except (InvalidKeyError, NotFoundError):
            return
        self.recorder.event(
            release,
            EventType.WARNING,
            SYNC_FAILED,
            f"Failed to schedule release: {error}",
        )

    def _pinned_clusters(self, release: Release, release_id: str) -> list[str] | None:
        # the installation target is created first, so its presence means an
        # earlier attempt already settled on a cluster list
        try:
            existing = self.store.get(InstallationTarget, release.namespace, release.name)
        except NotFoundError:
            return None
        if existing.release_id != release_id:
            raise TargetOwnershipError(
                f"InstallationTarget '{existing.metadata.key}' belongs to release "
                f"{existing.release_id!r}, not {release_id!r}"
            )
        log.info(
            "Reusing clusters %s from existing InstallationTarget '%s'",
            existing.spec.clusters,
            existing.metadata.key,
        )
        return existing.cluster_names()

    def _create_target(self, target: Target) -> None:
        try:
            self.store.create(target)
        except AlreadyExistsError:
            log.info("%s '%s' already exists; keeping it", target.kind, target.metadata.key)
