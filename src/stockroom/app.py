"""Application orchestration entry points."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, cast

from stockroom.adapters.firestore import FirestoreEntityStore
from stockroom.adapters.memory import InMemoryEntityStore
from stockroom.adapters.sqlalchemy import SqlAlchemyEntityStore, is_started, startup
from stockroom.config import StoreBackend, get_store_config
from stockroom.domain.catalog import CatalogService
from stockroom.domain.model import ENTITY_KINDS

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from stockroom.config import StoreConfig
    from stockroom.domain.clock import Clock
    from stockroom.domain.model import EntityKind
    from stockroom.domain.ports import EntityStore
    from stockroom.domain.reconciliation import BulkImportResult, ImportItem, ReconcileResult

log = getLogger(__name__)


def build_store(config: StoreConfig | None = None) -> EntityStore:
    """Create the entity store selected by ``STOCKROOM_STORE``."""

    backend = (config or get_store_config()).backend
    log.debug("Using %s entity store", backend)
    match backend:
        case StoreBackend.MEMORY:
            return InMemoryEntityStore()
        case StoreBackend.FIRESTORE:
            return FirestoreEntityStore()
        case StoreBackend.SQLALCHEMY:
            if not is_started():
                startup()
            return SqlAlchemyEntityStore()


def build_catalog(
    *,
    store: EntityStore | None = None,
    clock: Clock | None = None,
) -> CatalogService:
    effective_store = store or build_store()
    if clock is None:
        return CatalogService(effective_store)
    return CatalogService(effective_store, clock=clock)


def close_catalog(catalog: CatalogService) -> None:
    """Release the connections held by the catalog's store, if it holds any."""

    close = getattr(catalog.store, "close", None)
    if callable(close):
        close()


def startup_sweep(
    catalog: CatalogService,
    kinds: Iterable[EntityKind] | None = None,
) -> dict[str, ReconcileResult | None]:
    """Repair transient duplicates of every kind once per process start."""

    results: dict[str, ReconcileResult | None] = {}
    for kind in kinds if kinds is not None else ENTITY_KINDS.values():
        result = catalog.auto_reconcile_if_needed(kind)
        results[kind.name] = result
        if result is not None:
            log.info(
                "Startup sweep for %s: removed=%s, kept=%s", kind.name, result.removed, result.kept
            )
    return results


def seed_if_empty(
    catalog: CatalogService,
    kind: EntityKind,
    records: Iterable[ImportItem],
) -> BulkImportResult | None:
    """Bulk-import ``records`` only when the collection holds no records yet."""

    if not catalog.needs_seed_data(kind):
        log.info("%s already holds records; skipping seed data", kind.name)
        return None
    log.info("Loading seed data for %s", kind.name)
    return catalog.bulk_import(kind, records)


def load_records(path: Path) -> list[dict[str, object]]:
    """Read records from a JSON array file or a JSON Lines file.

    Raises ``ValueError`` when the file holds anything but JSON objects.
    """

    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        loaded: object = json.loads(stripped)
        items = cast("list[object]", loaded)
    else:
        items = [json.loads(line) for line in text.splitlines() if line.strip()]

    records: list[dict[str, object]] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"Record #{index} in {path} is not a JSON object")
        records.append(cast("dict[str, object]", item))
    return records
