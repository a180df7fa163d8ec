"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ObjectKind(StrEnum):
    RELEASE = "Release"
    CLUSTER = "Cluster"
    INSTALLATION_TARGET = "InstallationTarget"
    TRAFFIC_TARGET = "TrafficTarget"
    CAPACITY_TARGET = "CapacityTarget"


class ReleasePhase(StrEnum):
    """Values carried by the ``phase`` label of a release."""

    WAITING_FOR_SCHEDULING = "WaitingForScheduling"
    WAITING_FOR_STRATEGY = "WaitingForStrategy"


class TargetStatus(StrEnum):
    UNKNOWN = "unknown"


class EventType(StrEnum):
    NORMAL = "Normal"
    WARNING = "Warning"
