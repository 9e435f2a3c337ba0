"""Translate between records and Firestore REST documents."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from stockroom.domain.model import Record

from .schema import DocumentPayload, ValuePayload

if TYPE_CHECKING:
    from stockroom.domain.model import EntityKind, FieldValue

log = getLogger(__name__)

CREATED_AT_FIELD = "createdAt"
UPDATED_AT_FIELD = "updatedAt"

_SIMPLE_FIELD_PATH = re.compile(r"[A-Za-z_][A-Za-z_0-9]*")
# RFC 3339 timestamps from Firestore carry up to nanosecond precision.
_FRACTION = re.compile(r"(\.\d{6})\d+")


def field_path(name: str) -> str:
    """Return ``name`` as a Firestore field path, quoting it when required."""

    if _SIMPLE_FIELD_PATH.fullmatch(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def document_id(name: str) -> str:
    """Return the id part of a full document resource name."""

    return name.rsplit("/", 1)[-1]


def encode_value(value: FieldValue) -> dict[str, object]:
    # bool is an int subclass
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    return {"stringValue": value}


def encode_timestamp(value: datetime) -> dict[str, object]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.astimezone(UTC).isoformat().replace("+00:00", "Z")
    return {"timestampValue": text}


def parse_timestamp(text: str) -> datetime:
    normalized = _FRACTION.sub(r"\1", text.strip()).replace("Z", "+00:00")
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def decode_value(name: str, payload: ValuePayload) -> FieldValue | None:
    """Return the scalar held by ``payload``; ``None`` for null or unsupported kinds."""

    match payload.kind():
        case "stringValue":
            return payload.string_value
        case "integerValue":
            return payload.integer_value
        case "doubleValue":
            return payload.double_value
        case "booleanValue":
            return payload.boolean_value
        case "timestampValue" if payload.timestamp_value is not None:
            return parse_timestamp(payload.timestamp_value).isoformat()
        case "nullValue":
            return None
        case other:
            log.warning("Ignoring field %r with unsupported Firestore value kind %s", name, other)
            return None


def record_to_fields(kind: EntityKind, record: Record) -> dict[str, object]:
    """Encode a record as the ``fields`` map of a Firestore document."""

    fields: dict[str, object] = {kind.natural_key_field: encode_value(record.natural_key)}
    for name, value in record.fields.items():
        fields[name] = encode_value(value)
    if record.created_at is not None:
        fields[CREATED_AT_FIELD] = encode_timestamp(record.created_at)
    if record.updated_at is not None:
        fields[UPDATED_AT_FIELD] = encode_timestamp(record.updated_at)
    return fields


def document_to_record(kind: EntityKind, document: DocumentPayload) -> Record:
    payload = dict(document.fields)
    natural_key = payload.pop(kind.natural_key_field, None)
    created_at = _timestamp_of(payload.pop(CREATED_AT_FIELD, None))
    updated_at = _timestamp_of(payload.pop(UPDATED_AT_FIELD, None))

    fields: dict[str, FieldValue] = {}
    for name, value_payload in payload.items():
        value = decode_value(name, value_payload)
        if value is not None:
            fields[name] = value

    key = decode_value(kind.natural_key_field, natural_key) if natural_key else None
    return Record(
        natural_key=key if isinstance(key, str) else "",
        fields=fields,
        id=document_id(document.name),
        created_at=created_at,
        updated_at=updated_at,
    )


def _timestamp_of(payload: ValuePayload | None) -> datetime | None:
    if payload is None or payload.timestamp_value is None:
        return None
    return parse_timestamp(payload.timestamp_value)
