"""Cluster selection for releases awaiting scheduling."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import Cluster, ClusterSelector

ClusterPredicate = Callable[["Cluster", "Sequence[ClusterSelector]"], bool]


class ClusterSource(Protocol):
    """Anything that can list the known clusters (an informer lister or a store view)."""

    def list(self) -> Sequence[Cluster]: ...


def all_clusters(cluster: Cluster, selectors: Sequence[ClusterSelector]) -> bool:  # noqa: ARG001
    """Placement policy admitting every known cluster regardless of selectors."""
    return True


@dataclass(slots=True)
class ClusterScheduler:
    """Choose target clusters for a release.

    ``predicate`` is the placement extension point; the default ignores the
    release's selectors and keeps every cluster. Errors from ``clusters.list``
    propagate unchanged so the caller can retry.
    """

    clusters: ClusterSource
    predicate: ClusterPredicate = field(default=all_clusters)

    def select(self, selectors: Sequence[ClusterSelector]) -> list[str]:
        inventory = sorted(self.clusters.list(), key=lambda cluster: cluster.name)
        return [cluster.name for cluster in inventory if self.predicate(cluster, selectors)]
