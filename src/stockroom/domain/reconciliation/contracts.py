"""Shared reconciliation result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stockroom.domain.model import Record


class ResolutionStatus(StrEnum):
    """Outcome of looking up a natural key in the store."""

    NEW = "new"
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentityResolution:
    """Existing records sharing one natural key, ranked best-first.

    ``AMBIGUOUS`` means the store holds a transient duplicate that the next
    reconcile pass will repair; ``target`` is then the record that pass would keep.
    """

    natural_key: str
    status: ResolutionStatus
    candidates: tuple[Record, ...] = ()

    @property
    def target(self) -> Record | None:
        return self.candidates[0] if self.candidates else None


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Summary of one reconcile pass."""

    removed: int
    kept: int
