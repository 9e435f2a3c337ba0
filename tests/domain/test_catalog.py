from __future__ import annotations

from datetime import timedelta

import pytest

from stockroom.adapters.memory import InMemoryEntityStore
from stockroom.domain.catalog import CatalogService
from stockroom.domain.errors import (
    BatchPartialFailureError,
    DuplicateKeyError,
    RecordNotFoundError,
    ValidationError,
)
from stockroom.domain.model import MACHINES, PRODUCTS, UNIFIED_INVENTORY, EntityKind, Record
from tests.helpers.records import T0, SteppingClock, put


def test_get_all_is_ordered_by_natural_key(catalog: CatalogService) -> None:
    for key in ["M3", "M1", "M2"]:
        catalog.add(MACHINES, {"codigo": key})

    assert [record.natural_key for record in catalog.get_all(MACHINES)] == ["M1", "M2", "M3"]


def test_add_stamps_new_record(catalog: CatalogService, clock: SteppingClock) -> None:
    stamp = clock.current

    record_id = catalog.add(MACHINES, {"codigo": "M1", "descripcion": "Tractor X"})

    stored = catalog.get(MACHINES, record_id)
    assert stored.natural_key == "M1"
    assert stored.fields == {"descripcion": "Tractor X"}
    assert stored.created_at == stored.updated_at == stamp


def test_add_ignores_caller_identity(catalog: CatalogService) -> None:
    record = Record(natural_key="M1", id="mine", created_at=T0 - timedelta(days=30))

    record_id = catalog.add(MACHINES, record)

    assert record_id != "mine"
    assert catalog.get(MACHINES, record_id).created_at != record.created_at


@pytest.mark.parametrize("payload", [{}, {"codigo": ""}, {"codigo": "   "}])
def test_add_requires_a_natural_key(catalog: CatalogService, payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError, match="codigo"):
        catalog.add(MACHINES, payload)

    assert catalog.get_all(MACHINES) == []


@pytest.mark.parametrize("kind", [MACHINES, PRODUCTS], ids=lambda kind: kind.name)
def test_strict_kinds_reject_colliding_keys(catalog: CatalogService, kind: EntityKind) -> None:
    existing = catalog.add(kind, {"codigo": "K1", "descripcion": "original"})

    with pytest.raises(DuplicateKeyError) as excinfo:
        catalog.add(kind, {"codigo": "K1", "descripcion": "otra"})

    assert excinfo.value.existing_ids == (existing,)
    (stored,) = catalog.get_all(kind)
    assert stored.fields["descripcion"] == "original"


def test_merging_kind_folds_a_colliding_add_into_the_stored_record(
    catalog: CatalogService,
) -> None:
    existing = catalog.add(
        UNIFIED_INVENTORY, {"codigo": "I1", "estado": "PEDIDO", "cliente": "Acme"}
    )

    merged_id = catalog.add(UNIFIED_INVENTORY, {"codigo": "I1", "estado": "EN TRANSITO", "cr": 4})

    (stored,) = catalog.get_all(UNIFIED_INVENTORY)
    assert merged_id == existing
    assert stored.fields == {"estado": "EN TRANSITO", "cliente": "Acme", "cr": 4}
    assert stored.updated_at is not None
    assert stored.created_at is not None
    assert stored.updated_at > stored.created_at


def test_merging_add_targets_the_best_ranked_duplicate(
    memory_store: InMemoryEntityStore, catalog: CatalogService
) -> None:
    put(memory_store, UNIFIED_INVENTORY, "I1", created_at=T0)
    richer = put(
        memory_store,
        UNIFIED_INVENTORY,
        "I1",
        created_at=T0 + timedelta(hours=1),
        descripcion="Pulverizadora",
    )

    assert catalog.add(UNIFIED_INVENTORY, {"codigo": "I1", "lugar": "Rosario"}) == richer


def test_update_merges_partial_fields(catalog: CatalogService) -> None:
    record_id = catalog.add(
        UNIFIED_INVENTORY, {"codigo": "I1", "estado": "PEDIDO", "cliente": "Acme"}
    )

    catalog.update(UNIFIED_INVENTORY, record_id, {"estado": "FACTURADO"})

    stored = catalog.get(UNIFIED_INVENTORY, record_id)
    assert stored.fields["estado"] == "FACTURADO"
    assert stored.fields["cliente"] == "Acme"


def test_update_can_rekey_a_record(catalog: CatalogService) -> None:
    record_id = catalog.add(MACHINES, {"codigo": "M1"})

    catalog.update(MACHINES, record_id, {"codigo": "M1-B"})

    assert catalog.get(MACHINES, record_id).natural_key == "M1-B"


def test_update_rejects_blank_key_and_reserved_fields(catalog: CatalogService) -> None:
    record_id = catalog.add(MACHINES, {"codigo": "M1"})

    with pytest.raises(ValidationError):
        catalog.update(MACHINES, record_id, {"codigo": " "})
    with pytest.raises(ValidationError):
        catalog.update(MACHINES, record_id, {"createdAt": "2020-01-01"})

    assert catalog.get(MACHINES, record_id).natural_key == "M1"


def test_update_of_missing_record_raises(catalog: CatalogService) -> None:
    with pytest.raises(RecordNotFoundError):
        catalog.update(MACHINES, "missing", {"estado": "STOCK"})


def test_get_of_missing_record_raises(catalog: CatalogService) -> None:
    with pytest.raises(RecordNotFoundError, match="missing"):
        catalog.get(MACHINES, "missing")


def test_delete_removes_the_record_and_ignores_missing_ids(catalog: CatalogService) -> None:
    record_id = catalog.add(MACHINES, {"codigo": "M1"})

    catalog.delete(MACHINES, record_id)
    catalog.delete(MACHINES, record_id)

    assert catalog.get_all(MACHINES) == []


def test_returned_records_do_not_alias_the_store(catalog: CatalogService) -> None:
    record_id = catalog.add(MACHINES, {"codigo": "M1", "estado": "STOCK"})

    catalog.get(MACHINES, record_id).fields["estado"] = "VENDIDO"

    assert catalog.get(MACHINES, record_id).fields["estado"] == "STOCK"


def test_bulk_import_then_get_all(catalog: CatalogService) -> None:
    catalog.bulk_import(UNIFIED_INVENTORY, [{"codigo": "I1"}, {"codigo": "I2"}])

    records = catalog.get_all(UNIFIED_INVENTORY)
    assert [record.natural_key for record in records] == ["I1", "I2"]
    assert all(record.created_at == record.updated_at for record in records)
    assert all(record.created_at is not None for record in records)


def test_bulk_import_reports_partial_failure(catalog: CatalogService) -> None:
    with pytest.raises(BatchPartialFailureError, match="2 succeeded, 1 failed"):
        catalog.bulk_import(MACHINES, [{"codigo": "M1"}, {"codigo": ""}, {"codigo": "M3"}])

    assert [record.natural_key for record in catalog.get_all(MACHINES)] == ["M1", "M3"]


def test_reconcile_and_startup_check(
    memory_store: InMemoryEntityStore, catalog: CatalogService
) -> None:
    put(memory_store, MACHINES, "M1", created_at=T0, descripcion="Tractor X", estado="STOCK")
    keeper = put(
        memory_store,
        MACHINES,
        "M1",
        created_at=T0 + timedelta(minutes=5),
        descripcion="Tractor X",
        estado="STOCK",
        chasis="CH99",
    )

    result = catalog.auto_reconcile_if_needed(MACHINES)

    assert result is not None
    assert (result.removed, result.kept) == (1, 1)
    assert [record.id for record in catalog.get_all(MACHINES)] == [keeper]
    assert catalog.reconcile(MACHINES).removed == 0
    assert catalog.auto_reconcile_if_needed(MACHINES) is None


def test_needs_seed_data_only_for_empty_collections(catalog: CatalogService) -> None:
    assert catalog.needs_seed_data(PRODUCTS)

    catalog.add(PRODUCTS, {"codigo": "P1"})

    assert not catalog.needs_seed_data(PRODUCTS)
    assert catalog.needs_seed_data(MACHINES)


def test_clear_all_deletes_every_record_of_the_kind(catalog: CatalogService) -> None:
    catalog.add(MACHINES, {"codigo": "M1"})
    catalog.add(MACHINES, {"codigo": "M2"})
    catalog.add(PRODUCTS, {"codigo": "P1"})

    assert catalog.clear_all(MACHINES) == 2
    assert catalog.get_all(MACHINES) == []
    assert len(catalog.get_all(PRODUCTS)) == 1
