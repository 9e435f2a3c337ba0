"""Domain model: records, field values and entity-kind policies."""

from __future__ import annotations

from .kinds import (
    ENTITY_KINDS,
    MACHINES,
    NATURAL_KEY_FIELD,
    PRODUCTS,
    UNIFIED_INVENTORY,
    AddPolicy,
    EntityKind,
    FieldType,
    ScoreCheck,
    ScoreRule,
    get_entity_kind,
)
from .record import (
    FIELD_VALUE_TYPES,
    RESERVED_FIELDS,
    FieldValue,
    Record,
    RecordPatch,
    coerce_field_value,
    coerce_fields,
    is_blank_key,
    values_equal,
)

__all__ = [
    "ENTITY_KINDS",
    "FIELD_VALUE_TYPES",
    "MACHINES",
    "NATURAL_KEY_FIELD",
    "PRODUCTS",
    "RESERVED_FIELDS",
    "UNIFIED_INVENTORY",
    "AddPolicy",
    "EntityKind",
    "FieldType",
    "FieldValue",
    "Record",
    "RecordPatch",
    "ScoreCheck",
    "ScoreRule",
    "coerce_field_value",
    "coerce_fields",
    "get_entity_kind",
    "is_blank_key",
    "values_equal",
]
