"""Reconciliation between the Source Site and the Target Platform.

Flow of one pass:
1) locate a single record (event-driven) or load both sides (sweep)
2) classify origin records as new / changed / unchanged, mirrors as orphaned
3) apply inserts, whitelisted updates and orphan deletes, in that order
4) write sync markers back onto the origin
Review decisions taken on a mirror travel the other way via ``propagate``.
"""

from __future__ import annotations

from .apply import Reconciler, ReconcilePhase, ReconcileResult, RowFailure, mirror_update_values
from .detect import Classification, RecordChange, classify_record, classify_records, index_mirrors
from .locate import LocatedRecord, locate_registration
from .propagate import (
    PropagationOutcome,
    PropagationResult,
    StatusChange,
    propagate_status_change,
)
from .sweep import SweepResult, sweep_registrations

__all__ = [
    "Classification",
    "LocatedRecord",
    "PropagationOutcome",
    "PropagationResult",
    "ReconcilePhase",
    "ReconcileResult",
    "Reconciler",
    "RecordChange",
    "RowFailure",
    "StatusChange",
    "SweepResult",
    "classify_record",
    "classify_records",
    "index_mirrors",
    "locate_registration",
    "mirror_update_values",
    "propagate_status_change",
    "sweep_registrations",
]
