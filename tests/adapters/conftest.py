from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from stockroom.adapters.firestore import FirestoreEntityStore
from stockroom.config import FirestoreConfig, ResilienceConfig, RetryPolicy
from tests.helpers.firestore import PROJECT_ID, FakeFirestore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stockroom.domain.ports import EntityStore


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def firestore_config() -> FirestoreConfig:
    return FirestoreConfig(
        project_id=PROJECT_ID,
        access_token="test-token",
        resilience=ResilienceConfig(name="firestore-test", retry=RetryPolicy(total=0)),
    )


@pytest.fixture
def firestore_store(
    fake_firestore: FakeFirestore, firestore_config: FirestoreConfig
) -> Iterator[FirestoreEntityStore]:
    store = FirestoreEntityStore(firestore_config, transport=httpx.MockTransport(fake_firestore))
    try:
        yield store
    finally:
        store.close()


@pytest.fixture(params=["memory_store", "sqlalchemy_store", "firestore_store"])
def entity_store(request: pytest.FixtureRequest) -> EntityStore:
    return request.getfixturevalue(request.param)
