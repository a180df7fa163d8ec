"""Companion targets declaring per-cluster intent for a scheduled release."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .enums import ObjectKind, TargetStatus
from .meta import RELEASE_LABEL, ShipperObject


@dataclass(slots=True, kw_only=True)
class ClusterInstallationStatus:
    name: str
    status: str = TargetStatus.UNKNOWN.value


@dataclass(slots=True, kw_only=True)
class InstallationTargetSpec:
    clusters: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class InstallationTargetStatus:
    clusters: list[ClusterInstallationStatus] = field(
        default_factory=list["ClusterInstallationStatus"]
    )


@dataclass(slots=True, kw_only=True)
class ClusterTrafficTarget:
    name: str
    target_traffic: int = 0


@dataclass(slots=True, kw_only=True)
class ClusterTrafficStatus:
    name: str
    status: str = TargetStatus.UNKNOWN.value
    achieved_traffic: int = 0


@dataclass(slots=True, kw_only=True)
class TrafficTargetSpec:
    clusters: list[ClusterTrafficTarget] = field(default_factory=list["ClusterTrafficTarget"])


@dataclass(slots=True, kw_only=True)
class TrafficTargetStatus:
    clusters: list[ClusterTrafficStatus] = field(default_factory=list["ClusterTrafficStatus"])


@dataclass(slots=True, kw_only=True)
class ClusterCapacityTarget:
    name: str
    replicas: int = 0


@dataclass(slots=True, kw_only=True)
class ClusterCapacityStatus:
    name: str
    status: str = TargetStatus.UNKNOWN.value
    achieved_replicas: int = 0


@dataclass(slots=True, kw_only=True)
class CapacityTargetSpec:
    clusters: list[ClusterCapacityTarget] = field(default_factory=list["ClusterCapacityTarget"])


@dataclass(slots=True, kw_only=True)
class CapacityTargetStatus:
    clusters: list[ClusterCapacityStatus] = field(default_factory=list["ClusterCapacityStatus"])


@dataclass(slots=True, kw_only=True)
class Target(ShipperObject):
    """Common surface of the three companion target kinds."""

    @property
    def release_id(self) -> str | None:
        return self.metadata.labels.get(RELEASE_LABEL)

    def cluster_names(self) -> list[str]:
        raise NotImplementedError


@dataclass(slots=True, kw_only=True)
class InstallationTarget(Target):
    spec: InstallationTargetSpec = field(default_factory=InstallationTargetSpec)
    status: InstallationTargetStatus = field(default_factory=InstallationTargetStatus)

    KIND: ClassVar[ObjectKind] = ObjectKind.INSTALLATION_TARGET

    def cluster_names(self) -> list[str]:
        return list(self.spec.clusters)


@dataclass(slots=True, kw_only=True)
class TrafficTarget(Target):
    spec: TrafficTargetSpec = field(default_factory=TrafficTargetSpec)
    status: TrafficTargetStatus = field(default_factory=TrafficTargetStatus)

    KIND: ClassVar[ObjectKind] = ObjectKind.TRAFFIC_TARGET

    def cluster_names(self) -> list[str]:
        return [cluster.name for cluster in self.spec.clusters]


@dataclass(slots=True, kw_only=True)
class CapacityTarget(Target):
    spec: CapacityTargetSpec = field(default_factory=CapacityTargetSpec)
    status: CapacityTargetStatus = field(default_factory=CapacityTargetStatus)

    KIND: ClassVar[ObjectKind] = ObjectKind.CAPACITY_TARGET

    def cluster_names(self) -> list[str]:
        return [cluster.name for cluster in self.spec.clusters]
