"""Pydantic documents describing the persisted body of each object kind."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ClusterSelectorDocument(DocumentModel):
    regions: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)


class ShipmentOrderDocument(DocumentModel):
    cluster_selectors: list[ClusterSelectorDocument] = Field(
        default_factory=list["ClusterSelectorDocument"]
    )


class ReleaseDocument(DocumentModel):
    shipment_order: ShipmentOrderDocument = Field(default_factory=ShipmentOrderDocument)
    clusters: list[str] = Field(default_factory=list)


class ClusterDocument(DocumentModel):
    pass


class ClusterInstallationStatusDocument(DocumentModel):
    name: str
    status: str


class InstallationTargetDocument(DocumentModel):
    spec_clusters: list[str] = Field(default_factory=list)
    status_clusters: list[ClusterInstallationStatusDocument] = Field(
        default_factory=list["ClusterInstallationStatusDocument"]
    )


class ClusterTrafficTargetDocument(DocumentModel):
    name: str
    target_traffic: int = 0


class ClusterTrafficStatusDocument(DocumentModel):
    name: str
    status: str
    achieved_traffic: int = 0


class TrafficTargetDocument(DocumentModel):
    spec_clusters: list[ClusterTrafficTargetDocument] = Field(
        default_factory=list["ClusterTrafficTargetDocument"]
    )
    status_clusters: list[ClusterTrafficStatusDocument] = Field(
        default_factory=list["ClusterTrafficStatusDocument"]
    )


class ClusterCapacityTargetDocument(DocumentModel):
    name: str
    replicas: int = 0


class ClusterCapacityStatusDocument(DocumentModel):
    name: str
    status: str
    achieved_replicas: int = 0


class CapacityTargetDocument(DocumentModel):
    spec_clusters: list[ClusterCapacityTargetDocument] = Field(
        default_factory=list["ClusterCapacityTargetDocument"]
    )
    status_clusters: list[ClusterCapacityStatusDocument] = Field(
        default_factory=list["ClusterCapacityStatusDocument"]
    )
