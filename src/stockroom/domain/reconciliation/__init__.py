"""Reconciliation core shared by every entity kind.

Layered flow:
1) score records by completeness (``scoring``)
2) resolve natural keys against the store (``resolve``)
3) merge incoming data into stored records (``merge``)
4) validate and stamp single-record writes (``writes``)
5) collapse duplicate natural keys (``engine``)
6) insert batches of new natural keys (``bulk_import``)
"""

from __future__ import annotations

from .bulk_import import BulkImportCoordinator, BulkImportResult, ImportFailure, ImportItem
from .contracts import IdentityResolution, ReconcileResult, ResolutionStatus
from .engine import ReconciliationEngine, count_surplus_duplicates, group_by_natural_key
from .merge import fold_missing_fields, merge_records, stamp_update
from .resolve import find_by_natural_key, resolve_identity
from .scoring import rank_candidates, score
from .writes import create_record, save_record, validate_for_write

__all__ = [
    "BulkImportCoordinator",
    "BulkImportResult",
    "IdentityResolution",
    "ImportFailure",
    "ImportItem",
    "ReconcileResult",
    "ReconciliationEngine",
    "ResolutionStatus",
    "count_surplus_duplicates",
    "create_record",
    "find_by_natural_key",
    "fold_missing_fields",
    "group_by_natural_key",
    "merge_records",
    "rank_candidates",
    "resolve_identity",
    "save_record",
    "score",
    "stamp_update",
    "validate_for_write",
]
