"""Completeness scoring and winner ranking for duplicate records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stockroom.domain.clock import EPOCH
from stockroom.domain.model import ScoreCheck

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stockroom.domain.model import EntityKind, FieldValue, Record, ScoreRule


def score(record: Record, kind: EntityKind) -> int:
    """Return the completeness score of ``record`` under ``kind``'s weight table."""

    return sum(rule.points for rule in kind.score_rules if _populated(record, kind, rule))


def rank_candidates(records: Iterable[Record], kind: EntityKind) -> list[Record]:
    """Order duplicates best-first.

    Most complete first; ties go to the earliest created record, then to the
    smallest id so the outcome never depends on store ordering.
    """

    return sorted(records, key=lambda record: _rank_key(record, kind))


def _rank_key(record: Record, kind: EntityKind) -> tuple[int, float, str]:
    created_at = record.created_at or EPOCH
    return (-score(record, kind), created_at.timestamp(), record.id or "")


def _populated(record: Record, kind: EntityKind, rule: ScoreRule) -> bool:
    value = kind.value_of(record, rule.field)
    return _passes(value, rule.check)


def _passes(value: FieldValue | None, check: ScoreCheck) -> bool:
    if check is ScoreCheck.TEXT:
        return isinstance(value, str) and bool(value.strip())
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return value > 0
