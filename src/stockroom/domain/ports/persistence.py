"""Ports for persisting records in a remote document store.

The store guarantees single-document atomicity only: no uniqueness
constraints, no transactions spanning several records. Implementations
translate their own failures into ``StoreUnavailableError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stockroom.domain.model import EntityKind, FieldValue, Record


@runtime_checkable
class EntityStore(Protocol):
    """Persistent collections of records, one collection per entity kind."""

    def list_all(self, kind: EntityKind) -> list[Record]:
        """Return every record of ``kind`` ordered by natural key."""
        ...

    def find_by_field(self, kind: EntityKind, name: str, value: FieldValue) -> list[Record]:
        """Return the records whose field ``name`` equals ``value`` exactly."""
        ...

    def natural_keys(self, kind: EntityKind) -> list[str]:
        """Return the natural key of every record, one entry per record."""
        ...

    def get(self, kind: EntityKind, record_id: str) -> Record | None: ...

    def insert(self, kind: EntityKind, record: Record) -> str:
        """Persist a new record and return the id assigned by the store."""
        ...

    def replace(self, kind: EntityKind, record: Record) -> None:
        """Overwrite the stored document ``record.id``.

        Raises ``RecordNotFoundError`` if it does not exist.
        """
        ...

    def delete(self, kind: EntityKind, record_id: str) -> None:
        """Delete a record; deleting a missing id is not an error."""
        ...
