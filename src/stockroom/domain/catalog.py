"""Catalog service: the operations collaborators use to manage records.

Every call re-reads the store; nothing is cached between calls. The service
trusts its caller and carries no authorization state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from stockroom.domain.clock import utcnow
from stockroom.domain.errors import DuplicateKeyError, RecordNotFoundError
from stockroom.domain.model import AddPolicy, Record
from stockroom.domain.reconciliation import (
    BulkImportCoordinator,
    ReconciliationEngine,
    ResolutionStatus,
    create_record,
    merge_records,
    resolve_identity,
    save_record,
    validate_for_write,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stockroom.domain.clock import Clock
    from stockroom.domain.model import EntityKind
    from stockroom.domain.ports import EntityStore
    from stockroom.domain.reconciliation import BulkImportResult, ImportItem, ReconcileResult

log = getLogger(__name__)


@dataclass(slots=True)
class CatalogService:
    """Record lifecycle for every entity kind backed by one entity store."""

    store: EntityStore
    clock: Clock = field(default=utcnow)

    def get_all(self, kind: EntityKind) -> list[Record]:
        """Return every record of ``kind`` ordered by natural key."""
        return self.store.list_all(kind)

    def get(self, kind: EntityKind, record_id: str) -> Record:
        record = self.store.get(kind, record_id)
        if record is None:
            raise RecordNotFoundError(kind=kind.name, record_id=record_id)
        return record

    def add(self, kind: EntityKind, record: Record | Mapping[str, object]) -> str:
        """Add one record, applying the kind's policy on a natural-key collision.

        ``AddPolicy.REJECT`` raises ``DuplicateKeyError``; ``AddPolicy.MERGE``
        merges the incoming record into the stored one and returns its id.
        """

        incoming = record if isinstance(record, Record) else kind.record_from_mapping(record)
        validate_for_write(kind, incoming)

        resolution = resolve_identity(self.store, kind, incoming.natural_key)
        target = resolution.target
        if target is None:
            return create_record(self.store, kind, incoming, now=self.clock())

        if kind.add_policy is AddPolicy.REJECT:
            raise DuplicateKeyError(
                kind=kind.name,
                natural_key=incoming.natural_key,
                existing_ids=[candidate.id for candidate in resolution.candidates if candidate.id],
            )

        if resolution.status is ResolutionStatus.AMBIGUOUS:
            log.warning(
                "%s records share natural key %r; merging into best-ranked record %s",
                len(resolution.candidates),
                incoming.natural_key,
                target.id,
            )
        merged = merge_records(target, incoming.as_patch(), now=self.clock())
        save_record(self.store, kind, merged)
        log.info("%s record %s updated with new fields", kind.name, incoming.natural_key)
        if merged.id is None:
            raise ValueError(f"Stored {kind.name} record without id: {incoming.natural_key!r}")
        return merged.id

    def update(
        self, kind: EntityKind, record_id: str, partial_fields: Mapping[str, object]
    ) -> None:
        """Merge ``partial_fields`` into the stored record ``record_id``."""

        patch = kind.patch_from_mapping(partial_fields)
        existing = self.get(kind, record_id)
        merged = merge_records(existing, patch, now=self.clock())
        save_record(self.store, kind, merged)

    def delete(self, kind: EntityKind, record_id: str) -> None:
        self.store.delete(kind, record_id)

    def bulk_import(self, kind: EntityKind, records: Iterable[ImportItem]) -> BulkImportResult:
        """Insert the records whose natural keys are new; see ``BulkImportCoordinator``."""
        return BulkImportCoordinator(self.store, clock=self.clock).run(kind, records)

    def reconcile(self, kind: EntityKind) -> ReconcileResult:
        return ReconciliationEngine(self.store, clock=self.clock).reconcile(kind)

    def auto_reconcile_if_needed(self, kind: EntityKind) -> ReconcileResult | None:
        return ReconciliationEngine(self.store, clock=self.clock).auto_reconcile_if_needed(kind)

    def needs_seed_data(self, kind: EntityKind) -> bool:
        """Return whether the collection is empty and should receive starter data."""
        return not self.store.natural_keys(kind)

    def clear_all(self, kind: EntityKind) -> int:
        """Delete every record of ``kind`` and return how many were deleted."""

        records = self.store.list_all(kind)
        for record in records:
            if record.id is not None:
                self.store.delete(kind, record.id)
        log.info("All %s records cleared (%s deleted)", kind.name, len(records))
        return len(records)
