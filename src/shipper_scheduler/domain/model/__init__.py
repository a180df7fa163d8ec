"""Public domain model surface."""

from __future__ import annotations

from .enums import EventType, ObjectKind, ReleasePhase, TargetStatus
from .meta import API_VERSION, PHASE_LABEL, RELEASE_LABEL, ObjectMeta, ShipperObject
from .release import (
    Cluster,
    ClusterSelector,
    Release,
    ReleaseEnvironment,
    ShipmentOrder,
)
from .targets import (
    CapacityTarget,
    CapacityTargetSpec,
    CapacityTargetStatus,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterInstallationStatus,
    ClusterTrafficStatus,
    ClusterTrafficTarget,
    InstallationTarget,
    InstallationTargetSpec,
    InstallationTargetStatus,
    Target,
    TrafficTarget,
    TrafficTargetSpec,
    TrafficTargetStatus,
)

KIND_CLASSES: dict[ObjectKind, type[ShipperObject]] = {
    ObjectKind.RELEASE: Release,
    ObjectKind.CLUSTER: Cluster,
    ObjectKind.INSTALLATION_TARGET: InstallationTarget,
    ObjectKind.TRAFFIC_TARGET: TrafficTarget,
    ObjectKind.CAPACITY_TARGET: CapacityTarget,
}

__all__ = [  # noqa: RUF022
    # base
    "API_VERSION",
    "PHASE_LABEL",
    "RELEASE_LABEL",
    "KIND_CLASSES",
    "ObjectMeta",
    "ShipperObject",
    # enums
    "EventType",
    "ObjectKind",
    "ReleasePhase",
    "TargetStatus",
    # releases
    "Cluster",
    "ClusterSelector",
    "Release",
    "ReleaseEnvironment",
    "ShipmentOrder",
    # targets
    "Target",
    "InstallationTarget",
    "InstallationTargetSpec",
    "InstallationTargetStatus",
    "ClusterInstallationStatus",
    "TrafficTarget",
    "TrafficTargetSpec",
    "TrafficTargetStatus",
    "ClusterTrafficTarget",
    "ClusterTrafficStatus",
    "CapacityTarget",
    "CapacityTargetSpec",
    "CapacityTargetStatus",
    "ClusterCapacityTarget",
    "ClusterCapacityStatus",
]
