"""Best-effort bulk import of brand-new natural keys.

The batch is not atomic: records are created one by one, a failing record is
counted and skipped, and records created before or after it stay persisted.
Records whose natural key already exists are skipped; bulk import never merges.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from stockroom.domain.clock import utcnow
from stockroom.domain.errors import BatchPartialFailureError, CatalogError
from stockroom.domain.model import Record

from .writes import create_record

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stockroom.domain.clock import Clock
    from stockroom.domain.model import EntityKind
    from stockroom.domain.ports import EntityStore

type ImportItem = Record | Mapping[str, object]

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportFailure:
    """One record of a batch that could not be created."""

    index: int
    natural_key: str | None
    message: str


@dataclass(slots=True)
class BulkImportResult:
    """Per-batch outcome of a bulk import."""

    total: int = 0
    inserted: int = 0
    skipped: int = 0
    inserted_ids: list[str] = field(default_factory=list["str"])
    failures: list[ImportFailure] = field(default_factory=list["ImportFailure"])

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def is_noop(self) -> bool:
        return self.inserted == 0 and self.failed == 0


@dataclass(slots=True)
class BulkImportCoordinator:
    """Insert the records of a batch whose natural keys are not stored yet."""

    store: EntityStore
    clock: Clock = field(default=utcnow)

    def run(self, kind: EntityKind, items: Iterable[ImportItem]) -> BulkImportResult:
        """Import ``items`` and return the batch summary.

        Raises ``BatchPartialFailureError`` after the whole batch was processed
        if at least one record failed.
        """

        batch = list(items)
        result = BulkImportResult(total=len(batch))
        log.info("Starting bulk import of %s records to %s", len(batch), kind.collection)

        known_keys = set(self.store.natural_keys(kind))

        for index, item in enumerate(batch):
            try:
                record = _as_record(kind, item)
            except CatalogError as exc:
                log.error("Error reading %s import record #%s: %s", kind.name, index, exc)
                result.failures.append(ImportFailure(index, _raw_key(kind, item), str(exc)))
                continue

            if record.natural_key in known_keys:
                result.skipped += 1
                continue

            try:
                record_id = create_record(self.store, kind, record, now=self.clock())
            except CatalogError as exc:
                log.error("Error importing %s record %r: %s", kind.name, record.natural_key, exc)
                result.failures.append(ImportFailure(index, record.natural_key, str(exc)))
                continue

            known_keys.add(record.natural_key)
            result.inserted += 1
            result.inserted_ids.append(record_id)

        if result.is_noop:
            log.info("No new %s records to import - all records already exist", kind.name)
            return result

        log.info(
            "Import completed: %s successful, %s errors, %s skipped out of %s",
            result.inserted,
            result.failed,
            result.skipped,
            result.total,
        )
        if result.failed:
            raise BatchPartialFailureError(result)
        return result


def _as_record(kind: EntityKind, item: ImportItem) -> Record:
    if isinstance(item, Record):
        return item
    return kind.record_from_mapping(item)


def _raw_key(kind: EntityKind, item: ImportItem) -> str | None:
    if isinstance(item, Record):
        return item.natural_key
    value = item.get(kind.natural_key_field)
    return value if isinstance(value, str) else None
