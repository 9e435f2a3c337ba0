"""Merge policy: shallow, key-wise override of a stored record.

Incoming values win for every key the patch mentions; everything else is
carried over from the stored record. ``id`` and ``created_at`` never change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stockroom.domain.model import Record

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from stockroom.domain.model import FieldValue, RecordPatch


def merge_records(existing: Record, incoming: RecordPatch, *, now: datetime) -> Record:
    """Return a new record combining ``existing`` with ``incoming``."""

    fields = dict(existing.fields)
    fields.update(incoming.fields)
    natural_key = (
        incoming.natural_key if incoming.natural_key is not None else existing.natural_key
    )
    return Record(
        natural_key=natural_key,
        fields=fields,
        id=existing.id,
        created_at=existing.created_at,
        updated_at=stamp_update(existing, now),
    )


def stamp_update(existing: Record, now: datetime) -> datetime:
    """Return the ``updated_at`` for a write, never earlier than the stored one."""

    if existing.updated_at is None:
        return now
    return max(existing.updated_at, now)


def fold_missing_fields(winner: Record, losers: Iterable[Record]) -> dict[str, FieldValue]:
    """Collect fields present on a loser but absent from the winner.

    ``losers`` must be ranked best-first; the first loser carrying a field wins.
    """

    folded: dict[str, FieldValue] = {}
    for loser in losers:
        for name, value in loser.fields.items():
            if name in winner.fields or name in folded:
                continue
            folded[name] = value
    return folded
