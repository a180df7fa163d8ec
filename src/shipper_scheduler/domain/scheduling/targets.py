"""Builders for the companion targets created when a release is scheduled.

All builders take the same ordered ``cluster_names`` so the per-cluster entries
of the three targets line up positionally for downstream diffing. Every entry
starts in the ``unknown`` state with zero traffic and zero replicas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shipper_scheduler.domain.model import (
    RELEASE_LABEL,
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
    ObjectKind,
    ObjectMeta,
    TargetStatus,
    TrafficTarget,
    TrafficTargetSpec,
    TrafficTargetStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from shipper_scheduler.domain.model import Release, Target


def _target_meta(release: Release, release_id: str) -> ObjectMeta:
    return ObjectMeta(
        name=release.name,
        namespace=release.namespace,
        labels={RELEASE_LABEL: release_id},
    )


def build_installation_target(
    cluster_names: Sequence[str],
    release: Release,
    release_id: str,
) -> InstallationTarget:
    return InstallationTarget(
        metadata=_target_meta(release, release_id),
        spec=InstallationTargetSpec(clusters=list(cluster_names)),
        status=InstallationTargetStatus(
            clusters=[
                ClusterInstallationStatus(name=name, status=TargetStatus.UNKNOWN.value)
                for name in cluster_names
            ]
        ),
    )


def build_traffic_target(
    cluster_names: Sequence[str],
    release: Release,
    release_id: str,
) -> TrafficTarget:
    return TrafficTarget(
        metadata=_target_meta(release, release_id),
        spec=TrafficTargetSpec(
            clusters=[ClusterTrafficTarget(name=name, target_traffic=0) for name in cluster_names]
        ),
        status=TrafficTargetStatus(
            clusters=[
                ClusterTrafficStatus(
                    name=name, status=TargetStatus.UNKNOWN.value, achieved_traffic=0
                )
                for name in cluster_names
            ]
        ),
    )


def build_capacity_target(
    cluster_names: Sequence[str],
    release: Release,
    release_id: str,
) -> CapacityTarget:
    return CapacityTarget(
        metadata=_target_meta(release, release_id),
        spec=CapacityTargetSpec(
            clusters=[ClusterCapacityTarget(name=name, replicas=0) for name in cluster_names]
        ),
        status=CapacityTargetStatus(
            clusters=[
                ClusterCapacityStatus(
                    name=name, status=TargetStatus.UNKNOWN.value, achieved_replicas=0
                )
                for name in cluster_names
            ]
        ),
    )


_BUILDERS = {
    ObjectKind.INSTALLATION_TARGET: build_installation_target,
    ObjectKind.TRAFFIC_TARGET: build_traffic_target,
    ObjectKind.CAPACITY_TARGET: build_capacity_target,
}


def build_target(
    kind: ObjectKind,
    cluster_names: Sequence[str],
    release: Release,
    release_id: str,
) -> Target:
    try:
        builder = _BUILDERS[kind]
    except KeyError:
        raise ValueError(f"{kind} is not a target kind") from None
    return builder(cluster_names, release, release_id)


@dataclass(slots=True, frozen=True)
class CompanionTargets:
    installation: InstallationTarget
    traffic: TrafficTarget
    capacity: CapacityTarget

    def __iter__(self) -> Iterator[Target]:
        # creation order: the installation target is always written first
        yield self.installation
        yield self.traffic
        yield self.capacity


def build_companion_targets(
    cluster_names: Sequence[str],
    release: Release,
    release_id: str,
) -> CompanionTargets:
    names = list(cluster_names)
    return CompanionTargets(
        installation=build_installation_target(names, release, release_id),
        traffic=build_traffic_target(names, release, release_id),
        capacity=build_capacity_target(names, release, release_id),
    )
