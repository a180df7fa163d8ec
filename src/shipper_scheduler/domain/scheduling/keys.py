"""Work-queue keys of the form ``namespace/name``."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import ShipperObject


class InvalidKeyError(ValueError):
    """Raised when a key cannot be split into namespace and name."""


def object_key(obj: ShipperObject) -> str:
    """Return the queue key for ``obj``; cluster-scoped objects key by name alone."""

    if not obj.metadata.name:
        raise InvalidKeyError(f"{obj.kind} has no name")
    return obj.metadata.key


def split_key(key: str) -> tuple[str, str]:
    """Split ``key`` into ``(namespace, name)``.

    >>> split_key("ns/app-1")
    ('ns', 'app-1')
    >>> split_key("cluster-a")
    ('', 'cluster-a')
    """

    parts = key.split("/")
    if len(parts) == 1 and parts[0]:
        return "", parts[0]
    if len(parts) == 2 and parts[1]:  # noqa: PLR2004
        return parts[0], parts[1]
    raise InvalidKeyError(f"unexpected key format: {key!r}")
