"""
Base building blocks:
object metadata, kind discriminator, copy semantics.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final, Self

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import ObjectKind

API_VERSION: Final[str] = "stable.shipper/v1"
PHASE_LABEL: Final[str] = "phase"
RELEASE_LABEL: Final[str] = "release"


@dataclass(slots=True, kw_only=True)
class ObjectMeta:
    """Identity and store bookkeeping shared by every stored object."""

    name: str
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict[str, str])
    uid: str | None = None
    # assigned by the store; ``None`` until the object has been persisted
    resource_version: int | None = None
    creation_timestamp: datetime | None = None

    @property
    def key(self) -> str:
        """Return the ``namespace/name`` key (just ``name`` for cluster-scoped objects)."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass(slots=True, kw_only=True)
class ShipperObject:
    """An object kept in the shared object store."""

    metadata: ObjectMeta

    # class-level discriminator; subclasses must override
    KIND: ClassVar[ObjectKind]

    @property
    def kind(self) -> ObjectKind:
        return self.KIND

    @property
    def api_version(self) -> str:
        return API_VERSION

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.labels

    def deep_copy(self) -> Self:
        """Return an independent copy that may be mutated freely."""
        return copy.deepcopy(self)
