from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from stockroom.adapters.memory import InMemoryEntityStore
from stockroom.adapters.sqlalchemy import (
    SqlAlchemyEntityStore,
    create_all_tables,
    shutdown,
    startup,
)
from stockroom.domain.catalog import CatalogService
from tests.helpers.records import SteppingClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def memory_store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def catalog(memory_store: InMemoryEntityStore, clock: SteppingClock) -> CatalogService:
    return CatalogService(memory_store, clock=clock)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlalchemy_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyEntityStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyEntityStore()
    finally:
        shutdown()
