"""Port for the shared, versioned object store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shipper_scheduler.domain.model import ShipperObject

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class StoreError(RuntimeError):
    """Raised when the object store cannot serve a request. Retryable."""


class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} '{key}' not found")
        self.kind = kind
        self.key = key


class AlreadyExistsError(StoreError):
    """Raised when creating an object whose identity is already taken."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} '{key}' already exists")
        self.kind = kind
        self.key = key


class ConflictError(StoreError):
    """Raised when an update carries a stale resource version."""

    def __init__(self, kind: str, key: str, *, expected: int | None, actual: int | None) -> None:
        super().__init__(
            f"{kind} '{key}' was modified concurrently "
            f"(submitted version {expected}, stored version {actual})"
        )
        self.kind = kind
        self.key = key
        self.expected = expected
        self.actual = actual


def matches_selector(labels: Mapping[str, str], selector: Mapping[str, str] | None) -> bool:
    """Return True if ``labels`` carry every key/value pair of an equality selector."""

    if not selector:
        return True
    return all(labels.get(key) == value for key, value in selector.items())


@runtime_checkable
class ObjectStore(Protocol):
    """Persistence contract for typed objects with optimistic concurrency.

    ``create`` and ``update`` return the stored object with store-assigned metadata
    (``uid``, ``resource_version``, ``creation_timestamp``). Returned objects are
    owned by the caller.
    """

    def get[T: ShipperObject](self, kind: type[T], namespace: str, name: str) -> T: ...

    def list[T: ShipperObject](
        self,
        kind: type[T],
        *,
        namespace: str | None = None,
        selector: Mapping[str, str] | None = None,
    ) -> Sequence[T]: ...

    def create[T: ShipperObject](self, obj: T) -> T: ...

    def update[T: ShipperObject](self, obj: T) -> T: ...
