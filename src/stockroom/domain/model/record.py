"""Records and their scalar field values.

A record is identified across duplicates by its natural key. Every other
attribute lives in ``fields`` as one of a small closed set of scalar kinds so
merge and serialization can be written once for every entity kind.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from stockroom.domain.errors import ValidationError

if TYPE_CHECKING:
    from datetime import datetime

type FieldValue = str | int | float | bool

FIELD_VALUE_TYPES: tuple[type, ...] = (str, int, float, bool)

# Document keys owned by the store and the engine.
RESERVED_FIELDS = frozenset({"id", "createdAt", "updatedAt"})


def coerce_field_value(name: str, value: object) -> FieldValue:
    """Return ``value`` if it is a supported scalar, else raise ``ValidationError``."""

    if not isinstance(value, FIELD_VALUE_TYPES):
        raise ValidationError(
            f"Unsupported value for field {name!r}: {type(value).__name__} "
            "(expected str, int, float or bool)"
        )
    return cast("FieldValue", value)


def coerce_fields(values: Mapping[str, object]) -> dict[str, FieldValue]:
    coerced: dict[str, FieldValue] = {}
    for name, value in values.items():
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"Field names must be non-empty strings, got {name!r}")
        if name in RESERVED_FIELDS:
            raise ValidationError(f"Field {name!r} is managed by the store and cannot be written")
        coerced[name] = coerce_field_value(name, value)
    return coerced


def is_blank_key(natural_key: object) -> bool:
    return not isinstance(natural_key, str) or not natural_key.strip()


@dataclass(slots=True, kw_only=True)
class Record:
    """One stored (or about to be stored) entity of some kind."""

    natural_key: str
    fields: dict[str, FieldValue] = field(default_factory=dict["str", "FieldValue"])
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def get(self, name: str) -> FieldValue | None:
        return self.fields.get(name)

    def as_patch(self) -> RecordPatch:
        """Return this record as a full-overwrite merge payload."""
        return RecordPatch(natural_key=self.natural_key, fields=dict(self.fields))

    def copy(self) -> Record:
        return Record(
            natural_key=self.natural_key,
            fields=dict(self.fields),
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordPatch:
    """Incoming side of a merge: only the keys it mentions are overwritten."""

    fields: Mapping[str, FieldValue] = field(default_factory=dict["str", "FieldValue"])
    natural_key: str | None = None

    def mentions(self, name: str) -> bool:
        return name in self.fields


def values_equal(stored: FieldValue | None, wanted: FieldValue) -> bool:
    """Exact field-value equality: booleans never equal numbers, text never equals numbers."""

    if isinstance(stored, bool) or isinstance(wanted, bool):
        return isinstance(stored, bool) and isinstance(wanted, bool) and stored == wanted
    if isinstance(stored, str) or isinstance(wanted, str):
        return isinstance(stored, str) and isinstance(wanted, str) and stored == wanted
    return stored is not None and stored == wanted
