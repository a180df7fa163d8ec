from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import update

from shipper_scheduler.adapters.sqlalchemy import SqlAlchemyObjectStore, object_table
from shipper_scheduler.domain.model import (
    Cluster,
    ClusterSelector,
    InstallationTarget,
    Release,
    TrafficTarget,
)
from shipper_scheduler.domain.ports import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    StoreError,
)
from shipper_scheduler.domain.scheduling import build_companion_targets
from tests.helpers.objects import make_cluster, make_release

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_create_and_get_release(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    release = make_release()
    release.environment.shipment_order.cluster_selectors = [
        ClusterSelector(regions=["eu-west"], capabilities=["gpu"])
    ]

    created = sqlalchemy_store.create(release)
    loaded = sqlalchemy_store.get(Release, "ns", "app-1")

    assert created.metadata.resource_version == 1
    assert created.metadata.uid
    assert loaded.metadata.uid == created.metadata.uid
    assert loaded.phase == "WaitingForScheduling"
    assert loaded.environment.shipment_order.cluster_selectors == [
        ClusterSelector(regions=["eu-west"], capabilities=["gpu"])
    ]


def test_create_duplicate_raises(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    sqlalchemy_store.create(make_release())

    with pytest.raises(AlreadyExistsError):
        sqlalchemy_store.create(make_release())

    assert len(sqlalchemy_store.list(Release)) == 1


def test_targets_persist_their_cluster_entries(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    release = sqlalchemy_store.create(make_release())
    for target in build_companion_targets(["cluster-a", "cluster-b"], release, "rel-1"):
        sqlalchemy_store.create(target)

    traffic = sqlalchemy_store.get(TrafficTarget, "ns", "app-1")
    installation = sqlalchemy_store.get(InstallationTarget, "ns", "app-1")

    assert traffic.release_id == "rel-1"
    assert traffic.cluster_names() == ["cluster-a", "cluster-b"]
    assert [entry.status for entry in traffic.status.clusters] == ["unknown", "unknown"]
    assert installation.spec.clusters == ["cluster-a", "cluster-b"]


def test_update_is_conditional_on_resource_version(
    sqlalchemy_store: SqlAlchemyObjectStore,
) -> None:
    created = sqlalchemy_store.create(make_release())
    created.mark_scheduled(["cluster-a"])

    updated = sqlalchemy_store.update(created)

    assert updated.metadata.resource_version == 2
    assert updated.phase == "WaitingForStrategy"
    assert updated.environment.clusters == ["cluster-a"]

    with pytest.raises(ConflictError) as exc:
        sqlalchemy_store.update(created)

    assert exc.value.expected == 1
    assert exc.value.actual == 2
    assert sqlalchemy_store.get(Release, "ns", "app-1").metadata.resource_version == 2


def test_update_missing_raises(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    release = make_release()
    release.metadata.resource_version = 1

    with pytest.raises(NotFoundError):
        sqlalchemy_store.update(release)


def test_get_missing_raises(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    with pytest.raises(NotFoundError):
        sqlalchemy_store.get(Cluster, "", "cluster-a")


def test_list_filters_and_orders(sqlalchemy_store: SqlAlchemyObjectStore) -> None:
    sqlalchemy_store.create(make_release("b"))
    sqlalchemy_store.create(make_release("a", phase="WaitingForStrategy"))
    sqlalchemy_store.create(make_release("c", namespace="other"))
    sqlalchemy_store.create(make_cluster("cluster-a"))

    assert [r.metadata.key for r in sqlalchemy_store.list(Release)] == ["ns/a", "ns/b", "other/c"]
    assert [r.name for r in sqlalchemy_store.list(Release, namespace="other")] == ["c"]
    assert [
        r.name for r in sqlalchemy_store.list(Release, selector={"phase": "WaitingForStrategy"})
    ] == ["a"]
    assert [c.name for c in sqlalchemy_store.list(Cluster)] == ["cluster-a"]


def test_corrupt_documents_raise_store_errors(
    sqlite_engine: Engine,
    sqlalchemy_store: SqlAlchemyObjectStore,
) -> None:
    sqlalchemy_store.create(make_release())
    with sqlite_engine.begin() as connection:
        connection.execute(
            update(object_table).values(body={"clusters": "not-a-list"})
        )

    with pytest.raises(StoreError):
        sqlalchemy_store.get(Release, "ns", "app-1")


def test_two_stores_share_one_database(sqlite_engine: Engine) -> None:
    writer = SqlAlchemyObjectStore(sqlite_engine)
    reader = SqlAlchemyObjectStore(sqlite_engine)

    writer.create(make_cluster("cluster-a"))

    assert [cluster.name for cluster in reader.list(Cluster)] == ["cluster-a"]
