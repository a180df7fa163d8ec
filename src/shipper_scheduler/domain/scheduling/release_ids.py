"""Identity tokens correlating a release with its companion targets."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shipper_scheduler.domain.model import Release

ReleaseIdGenerator = Callable[["Release"], str]


def uid_release_id(release: Release) -> str:
    """Use the store-assigned uid, which is stable across retries of the same release."""

    if release.metadata.uid:
        return release.metadata.uid
    return f"{release.namespace}-{release.name}"


def namespace_release_id(release: Release) -> str:
    """Legacy scheme: ``<namespace>-0``. Not unique across releases of a namespace."""

    return f"{release.namespace}-0"


RELEASE_ID_GENERATORS: dict[str, ReleaseIdGenerator] = {
    "uid": uid_release_id,
    "namespace": namespace_release_id,
}


def release_id_generator_for(scheme: str) -> ReleaseIdGenerator:
    try:
        return RELEASE_ID_GENERATORS[scheme]
    except KeyError:
        raise ValueError(f"Unknown release id scheme: {scheme!r}") from None
