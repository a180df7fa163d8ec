from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from shipper_scheduler.adapters.memory import InMemoryEventRecorder, InMemoryObjectStore
from shipper_scheduler.adapters.sqlalchemy import SqlAlchemyObjectStore, upgrade_head
from tests.helpers.stores import FlakyObjectStore

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture
def memory_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def flaky_store() -> FlakyObjectStore:
    return FlakyObjectStore()


@pytest.fixture
def recorder() -> InMemoryEventRecorder:
    return InMemoryEventRecorder()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so worker threads see the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlalchemy_store(sqlite_engine: Engine) -> SqlAlchemyObjectStore:
    return SqlAlchemyObjectStore(sqlite_engine)
