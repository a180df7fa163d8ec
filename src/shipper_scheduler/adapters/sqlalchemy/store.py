"""Object store backed by a relational database."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shipper_scheduler.domain.ports import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    StoreError,
    matches_selector,
)

from .engine import session_factory
from .mappings import object_table
from .translator import from_row, to_body

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from sqlalchemy.engine import Engine

    from shipper_scheduler.domain.model import ShipperObject

log = logging.getLogger(__name__)


class SqlAlchemyObjectStore:
    """Store objects as JSON documents in one table.

    Updates are conditional on the submitted ``resource_version``: the row is
    only written if nobody changed it since the caller read it, otherwise
    :class:`ConflictError` is raised and nothing is written.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._session_factory: sessionmaker[Session] = (
            sessionmaker(bind=engine, expire_on_commit=False)
            if engine is not None
            else session_factory()
        )

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(f"Object store request failed: {exc}") from exc
        finally:
            session.close()

    def get[T: ShipperObject](self, kind: type[T], namespace: str, name: str) -> T:
        with self._session() as session:
            row = session.execute(
                select(object_table)
                .where(object_table.c.kind == kind.KIND.value)
                .where(object_table.c.namespace == namespace)
                .where(object_table.c.name == name)
            ).one_or_none()
        if row is None:
            raise NotFoundError(kind.KIND, f"{namespace}/{name}" if namespace else name)
        return from_row(kind, row)

    def list[T: ShipperObject](
        self,
        kind: type[T],
        *,
        namespace: str | None = None,
        selector: Mapping[str, str] | None = None,
    ) -> list[T]:
        stmt = select(object_table).where(object_table.c.kind == kind.KIND.value)
        if namespace is not None:
            stmt = stmt.where(object_table.c.namespace == namespace)
        stmt = stmt.order_by(object_table.c.namespace, object_table.c.name)
        with self._session() as session:
            rows = session.execute(stmt).all()
        return [
            from_row(kind, row) for row in rows if matches_selector(row.labels or {}, selector)
        ]

    def create[T: ShipperObject](self, obj: T) -> T:
        uid = str(uuid.uuid4())
        created_at = datetime.now(UTC)
        with self._session() as session:
            try:
                session.execute(
                    insert(object_table).values(
                        kind=obj.kind.value,
                        namespace=obj.namespace,
                        name=obj.name,
                        uid=uid,
                        resource_version=1,
                        labels=dict(obj.labels),
                        body=to_body(obj),
                        created_at=created_at,
                    )
                )
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise AlreadyExistsError(obj.kind, obj.metadata.key) from exc

        stored = obj.deep_copy()
        stored.metadata.uid = uid
        stored.metadata.resource_version = 1
        stored.metadata.creation_timestamp = created_at
        log.debug("Created %s '%s'", obj.kind, obj.metadata.key)
        return stored

    def update[T: ShipperObject](self, obj: T) -> T:
        expected = obj.metadata.resource_version
        identity = (
            (object_table.c.kind == obj.kind.value)
            & (object_table.c.namespace == obj.namespace)
            & (object_table.c.name == obj.name)
        )
        with self._session() as session:
            result = session.execute(
                update(object_table)
                .where(identity)
                .where(object_table.c.resource_version == expected)
                .values(
                    resource_version=object_table.c.resource_version + 1,
                    labels=dict(obj.labels),
                    body=to_body(obj),
                )
            )
            if result.rowcount == 0:
                session.rollback()
                actual = session.execute(
                    select(object_table.c.resource_version).where(identity)
                ).scalar_one_or_none()
                if actual is None:
                    raise NotFoundError(obj.kind, obj.metadata.key)
                raise ConflictError(obj.kind, obj.metadata.key, expected=expected, actual=actual)
            session.commit()
            row = session.execute(select(object_table).where(identity)).one()
        log.debug("Updated %s '%s' to version %s", obj.kind, obj.metadata.key, row.resource_version)
        return from_row(type(obj), row)


if TYPE_CHECKING:
    from shipper_scheduler.domain.ports import ObjectStore

    _store_check: ObjectStore = SqlAlchemyObjectStore()
