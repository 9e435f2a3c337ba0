from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stockroom.adapters.memory import InMemoryEntityStore
from stockroom.adapters.sqlalchemy import SqlAlchemyEntityStore, is_started, shutdown
from stockroom.app import build_catalog, build_store, load_records, seed_if_empty, startup_sweep
from stockroom.config import StoreBackend, StoreConfig
from stockroom.domain.model import ENTITY_KINDS, MACHINES, PRODUCTS, UNIFIED_INVENTORY
from tests.helpers.records import T0, SteppingClock, put

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from stockroom.domain.catalog import CatalogService


@pytest.fixture
def reset_sqlalchemy() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_build_store_memory_backend() -> None:
    assert isinstance(build_store(StoreConfig(backend=StoreBackend.MEMORY)), InMemoryEntityStore)


@pytest.mark.usefixtures("reset_sqlalchemy")
def test_build_store_starts_sqlalchemy_once() -> None:
    store = build_store(StoreConfig(backend=StoreBackend.SQLALCHEMY))

    assert isinstance(store, SqlAlchemyEntityStore)
    assert is_started()
    second = build_store(StoreConfig(backend=StoreBackend.SQLALCHEMY))
    assert isinstance(second, SqlAlchemyEntityStore)


def test_build_catalog_uses_given_clock() -> None:
    clock = SteppingClock()
    catalog = build_catalog(store=InMemoryEntityStore(), clock=clock)

    record_id = catalog.add(MACHINES, {"codigo": "M1"})

    assert catalog.get(MACHINES, record_id).created_at == T0


def test_startup_sweep_reports_every_kind(
    memory_store: InMemoryEntityStore, catalog: CatalogService
) -> None:
    put(memory_store, PRODUCTS, "P1")
    put(memory_store, PRODUCTS, "P1")
    put(memory_store, MACHINES, "M1")

    results = startup_sweep(catalog)

    assert set(results) == set(ENTITY_KINDS)
    products = results["products"]
    assert products is not None
    assert products.removed == 1
    assert results["machines"] is None
    assert results["unified_inventory"] is None


def test_startup_sweep_limited_to_given_kinds(catalog: CatalogService) -> None:
    assert startup_sweep(catalog, [UNIFIED_INVENTORY]) == {"unified_inventory": None}


def test_seed_if_empty_only_imports_once(catalog: CatalogService) -> None:
    first = seed_if_empty(catalog, PRODUCTS, [{"codigo": "P1"}, {"codigo": "P2"}])
    second = seed_if_empty(catalog, PRODUCTS, [{"codigo": "P3"}])

    assert first is not None
    assert first.inserted == 2
    assert second is None
    assert len(catalog.get_all(PRODUCTS)) == 2


def test_load_records_accepts_array_and_json_lines(tmp_path: Path) -> None:
    array_file = tmp_path / "records.json"
    array_file.write_text('  [{"codigo": "A"}, {"codigo": "B"}]', encoding="utf-8")
    lines_file = tmp_path / "records.jsonl"
    lines_file.write_text('{"codigo": "A"}\n{"codigo": "B"}\n', encoding="utf-8")

    assert load_records(array_file) == load_records(lines_file) == [
        {"codigo": "A"},
        {"codigo": "B"},
    ]


def test_load_records_rejects_non_objects(tmp_path: Path) -> None:
    source = tmp_path / "records.json"
    source.write_text('[{"codigo": "A"}, "B"]', encoding="utf-8")

    with pytest.raises(ValueError, match="#1"):
        load_records(source)
