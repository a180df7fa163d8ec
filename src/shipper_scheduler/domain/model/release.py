"""Releases and the clusters they can be scheduled onto."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .enums import ObjectKind, ReleasePhase
from .meta import PHASE_LABEL, ShipperObject


@dataclass(slots=True, kw_only=True)
class ClusterSelector:
    """Placement criteria declared by a shipment order."""

    regions: list[str] = field(default_factory=list[str])
    capabilities: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class ShipmentOrder:
    cluster_selectors: list[ClusterSelector] = field(default_factory=list["ClusterSelector"])


@dataclass(slots=True, kw_only=True)
class ReleaseEnvironment:
    shipment_order: ShipmentOrder = field(default_factory=ShipmentOrder)
    # resolved target cluster names; empty until the release has been scheduled
    clusters: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class Release(ShipperObject):
    """One deployment intent moving through the release pipeline."""

    environment: ReleaseEnvironment = field(default_factory=ReleaseEnvironment)

    KIND: ClassVar[ObjectKind] = ObjectKind.RELEASE

    @property
    def phase(self) -> str | None:
        return self.metadata.labels.get(PHASE_LABEL)

    def is_waiting_for_scheduling(self) -> bool:
        return self.phase == ReleasePhase.WAITING_FOR_SCHEDULING

    def mark_scheduled(self, cluster_names: list[str]) -> None:
        """Record the resolved clusters and hand the release to the strategy stage."""
        self.environment.clusters = list(cluster_names)
        self.metadata.labels[PHASE_LABEL] = ReleasePhase.WAITING_FOR_STRATEGY.value


@dataclass(slots=True, kw_only=True)
class Cluster(ShipperObject):
    """A schedulable deployment target. Cluster-scoped (no namespace)."""

    KIND: ClassVar[ObjectKind] = ObjectKind.CLUSTER
