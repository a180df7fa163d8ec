"""Reconciliation core that schedules releases onto clusters.

Flow per notification:
1) the informer delivers a release add/update
2) the phase filter admits releases waiting for scheduling
3) the work queue coalesces keys and hands them to one worker at a time
4) the reconciler selects clusters, creates the companion targets, and
   commits the release through an optimistic-concurrency update
"""

from __future__ import annotations

from .controller import CONTROLLER_AGENT_NAME, QUEUE_NAME, CacheSyncError, ScheduleController
from .filters import FilteringResourceEventHandler, awaiting_scheduling
from .informer import Lister, ResourceEventHandler, SharedInformer, wait_for_cache_sync
from .keys import InvalidKeyError, object_key, split_key
from .rate_limit import (
    BucketRateLimiter,
    ItemExponentialFailureRateLimiter,
    MaxOfRateLimiter,
    RateLimiter,
    default_controller_rate_limiter,
)
from .reconciler import (
    MESSAGE_RESOURCE_SYNCED,
    SUCCESS_SYNCED,
    SYNC_FAILED,
    ReleaseReconciler,
    TargetOwnershipError,
)
from .release_ids import (
    ReleaseIdGenerator,
    namespace_release_id,
    release_id_generator_for,
    uid_release_id,
)
from .scheduler import ClusterPredicate, ClusterScheduler, all_clusters
from .targets import (
    CompanionTargets,
    build_capacity_target,
    build_companion_targets,
    build_installation_target,
    build_target,
    build_traffic_target,
)
from .workqueue import WorkQueue

__all__ = [
    "CONTROLLER_AGENT_NAME",
    "MESSAGE_RESOURCE_SYNCED",
    "QUEUE_NAME",
    "SUCCESS_SYNCED",
    "SYNC_FAILED",
    "BucketRateLimiter",
    "CacheSyncError",
    "ClusterPredicate",
    "ClusterScheduler",
    "CompanionTargets",
    "FilteringResourceEventHandler",
    "InvalidKeyError",
    "ItemExponentialFailureRateLimiter",
    "Lister",
    "MaxOfRateLimiter",
    "RateLimiter",
    "ReleaseIdGenerator",
    "ReleaseReconciler",
    "ResourceEventHandler",
    "ScheduleController",
    "SharedInformer",
    "TargetOwnershipError",
    "WorkQueue",
    "all_clusters",
    "awaiting_scheduling",
    "build_capacity_target",
    "build_companion_targets",
    "build_installation_target",
    "build_target",
    "build_traffic_target",
    "default_controller_rate_limiter",
    "namespace_release_id",
    "object_key",
    "release_id_generator_for",
    "split_key",
    "uid_release_id",
    "wait_for_cache_sync",
]
