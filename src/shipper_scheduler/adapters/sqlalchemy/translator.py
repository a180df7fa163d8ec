"""Translate between domain objects and persisted rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError

from shipper_scheduler.domain.model import (
    CapacityTarget,
    CapacityTargetSpec,
    CapacityTargetStatus,
    Cluster,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterInstallationStatus,
    ClusterSelector,
    ClusterTrafficStatus,
    ClusterTrafficTarget,
    InstallationTarget,
    InstallationTargetSpec,
    InstallationTargetStatus,
    ObjectMeta,
    Release,
    ReleaseEnvironment,
    ShipmentOrder,
    TrafficTarget,
    TrafficTargetSpec,
    TrafficTargetStatus,
)
from shipper_scheduler.domain.ports import StoreError

from .schema import (
    CapacityTargetDocument,
    ClusterCapacityStatusDocument,
    ClusterCapacityTargetDocument,
    ClusterDocument,
    ClusterInstallationStatusDocument,
    ClusterSelectorDocument,
    ClusterTrafficStatusDocument,
    ClusterTrafficTargetDocument,
    InstallationTargetDocument,
    ReleaseDocument,
    ShipmentOrderDocument,
    TrafficTargetDocument,
)

if TYPE_CHECKING:
    from sqlalchemy import Row

    from shipper_scheduler.domain.model import ShipperObject

    from .schema import DocumentModel


def to_document(obj: ShipperObject) -> DocumentModel:  # noqa: PLR0911
    match obj:
        case Release():
            order = obj.environment.shipment_order
            return ReleaseDocument(
                shipment_order=ShipmentOrderDocument(
                    cluster_selectors=[
                        ClusterSelectorDocument(
                            regions=list(selector.regions),
                            capabilities=list(selector.capabilities),
                        )
                        for selector in order.cluster_selectors
                    ]
                ),
                clusters=list(obj.environment.clusters),
            )
        case Cluster():
            return ClusterDocument()
        case InstallationTarget():
            return InstallationTargetDocument(
                spec_clusters=list(obj.spec.clusters),
                status_clusters=[
                    ClusterInstallationStatusDocument(name=entry.name, status=entry.status)
                    for entry in obj.status.clusters
                ],
            )
        case TrafficTarget():
            return TrafficTargetDocument(
                spec_clusters=[
                    ClusterTrafficTargetDocument(
                        name=entry.name, target_traffic=entry.target_traffic
                    )
                    for entry in obj.spec.clusters
                ],
                status_clusters=[
                    ClusterTrafficStatusDocument(
                        name=entry.name,
                        status=entry.status,
                        achieved_traffic=entry.achieved_traffic,
                    )
                    for entry in obj.status.clusters
                ],
            )
        case CapacityTarget():
            return CapacityTargetDocument(
                spec_clusters=[
                    ClusterCapacityTargetDocument(name=entry.name, replicas=entry.replicas)
                    for entry in obj.spec.clusters
                ],
                status_clusters=[
                    ClusterCapacityStatusDocument(
                        name=entry.name,
                        status=entry.status,
                        achieved_replicas=entry.achieved_replicas,
                    )
                    for entry in obj.status.clusters
                ],
            )
        case _:
            raise TypeError(f"Unsupported object type: {type(obj).__name__}")


def to_body(obj: ShipperObject) -> dict[str, Any]:
    return to_document(obj).model_dump(mode="json")


def from_row[T: ShipperObject](kind: type[T], row: Row[Any]) -> T:
    """Rebuild a domain object of ``kind`` from a ``shipper_object`` row."""

    metadata = ObjectMeta(
        name=row.name,
        namespace=row.namespace,
        labels=dict(cast(dict[str, str], row.labels or {})),
        uid=row.uid,
        resource_version=row.resource_version,
        creation_timestamp=row.created_at,
    )
    try:
        obj = _from_body(kind, metadata, row.body or {})
    except ValidationError as exc:
        raise StoreError(f"Corrupt {kind.KIND} '{metadata.key}': {exc}") from exc
    return cast(T, obj)


def _from_body(  # noqa: PLR0911
    kind: type[ShipperObject],
    metadata: ObjectMeta,
    body: dict[str, Any],
) -> ShipperObject:
    if kind is Release:
        release_doc = ReleaseDocument.model_validate(body)
        return Release(
            metadata=metadata,
            environment=ReleaseEnvironment(
                shipment_order=ShipmentOrder(
                    cluster_selectors=[
                        ClusterSelector(
                            regions=list(selector.regions),
                            capabilities=list(selector.capabilities),
                        )
                        for selector in release_doc.shipment_order.cluster_selectors
                    ]
                ),
                clusters=list(release_doc.clusters),
            ),
        )
    if kind is Cluster:
        ClusterDocument.model_validate(body)
        return Cluster(metadata=metadata)
    if kind is InstallationTarget:
        installation_doc = InstallationTargetDocument.model_validate(body)
        return InstallationTarget(
            metadata=metadata,
            spec=InstallationTargetSpec(clusters=list(installation_doc.spec_clusters)),
            status=InstallationTargetStatus(
                clusters=[
                    ClusterInstallationStatus(name=entry.name, status=entry.status)
                    for entry in installation_doc.status_clusters
                ]
            ),
        )
    if kind is TrafficTarget:
        traffic_doc = TrafficTargetDocument.model_validate(body)
        return TrafficTarget(
            metadata=metadata,
            spec=TrafficTargetSpec(
                clusters=[
                    ClusterTrafficTarget(name=entry.name, target_traffic=entry.target_traffic)
                    for entry in traffic_doc.spec_clusters
                ]
            ),
            status=TrafficTargetStatus(
                clusters=[
                    ClusterTrafficStatus(
                        name=entry.name,
                        status=entry.status,
                        achieved_traffic=entry.achieved_traffic,
                    )
                    for entry in traffic_doc.status_clusters
                ]
            ),
        )
    if kind is CapacityTarget:
        capacity_doc = CapacityTargetDocument.model_validate(body)
        return CapacityTarget(
            metadata=metadata,
            spec=CapacityTargetSpec(
                clusters=[
                    ClusterCapacityTarget(name=entry.name, replicas=entry.replicas)
                    for entry in capacity_doc.spec_clusters
                ]
            ),
            status=CapacityTargetStatus(
                clusters=[
                    ClusterCapacityStatus(
                        name=entry.name,
                        status=entry.status,
                        achieved_replicas=entry.achieved_replicas,
                    )
                    for entry in capacity_doc.status_clusters
                ]
            ),
        )
    raise TypeError(f"Unsupported object kind: {kind.__name__}")
