"""Dict-backed entity store for tests and the ``memory`` backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from stockroom.domain.errors import RecordNotFoundError
from stockroom.domain.model import values_equal

if TYPE_CHECKING:
    from stockroom.domain.model import EntityKind, FieldValue, Record
    from stockroom.domain.ports import EntityStore

log = getLogger(__name__)


@dataclass(slots=True)
class InMemoryEntityStore:
    """Process-local store; records are copied on the way in and out."""

    _collections: dict[str, dict[str, Record]] = field(
        default_factory=dict["str", "dict[str, Record]"]
    )

    def list_all(self, kind: EntityKind) -> list[Record]:
        records = self._collection(kind).values()
        return [record.copy() for record in sorted(records, key=lambda r: r.natural_key)]

    def find_by_field(self, kind: EntityKind, name: str, value: FieldValue) -> list[Record]:
        return [
            record
            for record in self.list_all(kind)
            if values_equal(kind.value_of(record, name), value)
        ]

    def natural_keys(self, kind: EntityKind) -> list[str]:
        return [record.natural_key for record in self.list_all(kind)]

    def get(self, kind: EntityKind, record_id: str) -> Record | None:
        record = self._collection(kind).get(record_id)
        return record.copy() if record is not None else None

    def insert(self, kind: EntityKind, record: Record) -> str:
        record_id = uuid4().hex
        stored = record.copy()
        stored.id = record_id
        self._collection(kind)[record_id] = stored
        return record_id

    def replace(self, kind: EntityKind, record: Record) -> None:
        collection = self._collection(kind)
        if record.id is None or record.id not in collection:
            raise RecordNotFoundError(kind=kind.name, record_id=record.id or "")
        collection[record.id] = record.copy()

    def delete(self, kind: EntityKind, record_id: str) -> None:
        if self._collection(kind).pop(record_id, None) is None:
            log.debug("Delete of missing %s record %s ignored", kind.name, record_id)

    def _collection(self, kind: EntityKind) -> dict[str, Record]:
        return self._collections.setdefault(kind.collection, {})


if TYPE_CHECKING:
    _store_check: EntityStore = InMemoryEntityStore()
