"""Duplicate reconciliation over a whole entity-kind collection.

The engine scans the collection, groups records by natural key, keeps the
best-ranked record of every group and deletes the rest. It runs on demand
or as a startup sweep; writes never lock, so transient duplicates created by
racing callers are repaired here rather than prevented.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from stockroom.domain.clock import utcnow
from stockroom.domain.errors import ValidationError
from stockroom.domain.model import RecordPatch

from .contracts import ReconcileResult
from .merge import fold_missing_fields, merge_records
from .scoring import rank_candidates
from .writes import save_record

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stockroom.domain.clock import Clock
    from stockroom.domain.model import EntityKind, Record
    from stockroom.domain.ports import EntityStore

log = getLogger(__name__)


def group_by_natural_key(records: Iterable[Record]) -> dict[str, list[Record]]:
    """Group records by exact natural key, preserving first-seen order."""

    groups: dict[str, list[Record]] = {}
    for record in records:
        groups.setdefault(record.natural_key, []).append(record)
    return groups


def count_surplus_duplicates(natural_keys: Iterable[str]) -> int:
    """Return how many records a reconcile pass would remove."""

    return sum(count - 1 for count in Counter(natural_keys).values() if count > 1)


@dataclass(slots=True)
class ReconciliationEngine:
    """Collapse duplicate natural keys down to one record each."""

    store: EntityStore
    clock: Clock = field(default=utcnow)

    def reconcile(self, kind: EntityKind) -> ReconcileResult:
        """Keep the best record per natural key and delete the others."""

        log.info("Starting duplicate removal for %s", kind.name)
        records = self.store.list_all(kind)
        log.info("Found %s total %s records", len(records), kind.name)

        removed = 0
        kept = 0
        for natural_key, group in group_by_natural_key(records).items():
            kept += 1
            if len(group) == 1:
                continue
            log.info("Found %s duplicates for %s: %s", len(group), kind.name, natural_key)
            winner, *losers = rank_candidates(group, kind)
            if kind.fold_loser_fields:
                self._fold_into_winner(kind, winner, losers)
            log.info("Keeping record %s, deleting %s duplicates", winner.id, len(losers))
            for loser in losers:
                if loser.id is None:
                    raise ValueError(f"Stored {kind.name} record without id: {natural_key!r}")
                self.store.delete(kind, loser.id)
                removed += 1

        log.info(
            "Duplicate removal completed for %s: removed=%s, kept=%s", kind.name, removed, kept
        )
        return ReconcileResult(removed=removed, kept=kept)

    def auto_reconcile_if_needed(self, kind: EntityKind) -> ReconcileResult | None:
        """Run ``reconcile`` only when some natural key occurs more than once.

        Returns ``None`` when there was nothing to do.
        """

        surplus = count_surplus_duplicates(self.store.natural_keys(kind))
        if surplus == 0:
            log.debug("No %s duplicates found", kind.name)
            return None
        log.info("Auto-removing %s %s duplicates", surplus, kind.name)
        return self.reconcile(kind)

    def _fold_into_winner(self, kind: EntityKind, winner: Record, losers: list[Record]) -> None:
        folded = fold_missing_fields(winner, losers)
        if not folded:
            return
        log.info(
            "Folding %s loser-only fields into %s record %s: %s",
            len(folded),
            kind.name,
            winner.id,
            ", ".join(sorted(folded)),
        )
        merged = merge_records(winner, RecordPatch(fields=folded), now=self.clock())
        try:
            save_record(self.store, kind, merged)
        except ValidationError as exc:
            # Stored data written elsewhere may not pass our own write checks.
            log.warning(
                "Not folding into %s record %s (%s); deleting duplicates only: %s",
                kind.name,
                winner.id,
                winner.natural_key or "<blank key>",
                exc,
            )
