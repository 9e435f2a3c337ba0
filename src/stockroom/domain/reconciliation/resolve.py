"""Identity resolution by natural key.

Responsibilities of this stage:
- exact-match lookup of a natural key against the store
- classify the lookup as NEW/RESOLVED/AMBIGUOUS

Out of scope: add policy decisions, writes, retries. Store failures propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import IdentityResolution, ResolutionStatus
from .scoring import rank_candidates

if TYPE_CHECKING:
    from stockroom.domain.model import EntityKind, Record
    from stockroom.domain.ports import EntityStore


def find_by_natural_key(store: EntityStore, kind: EntityKind, key: str) -> tuple[Record, ...]:
    """Return every stored record of ``kind`` whose natural key equals ``key``."""

    return tuple(store.find_by_field(kind, kind.natural_key_field, key))


def resolve_identity(store: EntityStore, kind: EntityKind, key: str) -> IdentityResolution:
    """Resolve ``key`` against the store.

    Matching policy:
    - no record -> ``NEW``
    - one record -> ``RESOLVED``
    - several records -> ``AMBIGUOUS`` (candidates ranked best-first)
    """

    candidates = find_by_natural_key(store, kind, key)
    if not candidates:
        return IdentityResolution(natural_key=key, status=ResolutionStatus.NEW)
    if len(candidates) == 1:
        return IdentityResolution(
            natural_key=key,
            status=ResolutionStatus.RESOLVED,
            candidates=candidates,
        )
    return IdentityResolution(
        natural_key=key,
        status=ResolutionStatus.AMBIGUOUS,
        candidates=tuple(rank_candidates(candidates, kind)),
    )
