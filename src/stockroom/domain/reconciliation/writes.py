"""Single-record writes: validation and timestamp stamping before the store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from stockroom.domain.errors import ValidationError
from stockroom.domain.model import Record, coerce_fields, is_blank_key

if TYPE_CHECKING:
    from datetime import datetime

    from stockroom.domain.model import EntityKind
    from stockroom.domain.ports import EntityStore

log = getLogger(__name__)


def validate_for_write(kind: EntityKind, record: Record) -> None:
    """Raise ``ValidationError`` unless ``record`` may be persisted as ``kind``."""

    if is_blank_key(record.natural_key):
        raise ValidationError(f"{kind.natural_key_field!r} is required and must not be blank")
    kind.validate_fields(coerce_fields(record.fields))


def create_record(store: EntityStore, kind: EntityKind, record: Record, *, now: datetime) -> str:
    """Insert ``record`` as a brand-new document and return its id.

    Caller-supplied ids and timestamps are ignored.
    """

    validate_for_write(kind, record)
    new_record = Record(
        natural_key=record.natural_key,
        fields=dict(record.fields),
        created_at=now,
        updated_at=now,
    )
    record_id = store.insert(kind, new_record)
    log.debug("Created %s record %s (%s)", kind.name, record_id, record.natural_key)
    return record_id


def save_record(store: EntityStore, kind: EntityKind, record: Record) -> None:
    """Overwrite an existing document with an already-merged record."""

    if record.id is None:
        raise ValueError("Cannot save a record that has no id")
    validate_for_write(kind, record)
    store.replace(kind, record)
