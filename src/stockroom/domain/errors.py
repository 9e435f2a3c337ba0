"""Error types surfaced by the catalog and its reconciliation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stockroom.domain.reconciliation.bulk_import import BulkImportResult


class CatalogError(Exception):
    """Base class for every error raised by the catalog."""


class ValidationError(CatalogError, ValueError):
    """Raised when a write carries an invalid natural key or field value."""


class DuplicateKeyError(CatalogError):
    """Raised by the strict add policy when the natural key is already taken."""

    def __init__(self, *, kind: str, natural_key: str, existing_ids: Sequence[str]) -> None:
        self.kind = kind
        self.natural_key = natural_key
        self.existing_ids = tuple(existing_ids)
        super().__init__(f"A {kind} record with natural key {natural_key!r} already exists")


class StoreUnavailableError(CatalogError):
    """Raised when the entity store cannot be reached or answers unexpectedly."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecordNotFoundError(CatalogError, LookupError):
    """Raised when a record id does not exist in the store."""

    def __init__(self, *, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"No {kind} record with id {record_id!r}")


class BatchPartialFailureError(CatalogError):
    """Raised after a bulk import in which at least one record failed.

    Records inserted before and after the failures stay persisted.
    """

    def __init__(self, result: BulkImportResult) -> None:
        self.result = result
        self.succeeded = result.inserted
        self.failed = result.failed
        super().__init__(
            f"Import completed with {self.failed} errors: "
            f"{self.succeeded} succeeded, {self.failed} failed"
        )
