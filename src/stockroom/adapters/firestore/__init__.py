"""Firestore REST adapter package for Stockroom."""

from __future__ import annotations

from .client import FirestoreEntityStore
from .schema import DocumentPayload, ErrorResponse, RunQueryItem, ValuePayload
from .translator import (
    document_to_record,
    encode_timestamp,
    encode_value,
    field_path,
    parse_timestamp,
    record_to_fields,
)

__all__ = [
    "DocumentPayload",
    "ErrorResponse",
    "FirestoreEntityStore",
    "RunQueryItem",
    "ValuePayload",
    "document_to_record",
    "encode_timestamp",
    "encode_value",
    "field_path",
    "parse_timestamp",
    "record_to_fields",
]
