"""
BOQ vs Drawings Reconciliation Engine
Matches Bill of Quantities items against drawing items, classifies the
discrepancies and gates the workflow until every conflict is resolved.
"""

__version__ = "1.0.0"

from .config import ReconciliationPolicy, load_policy
from .errors import (
    ReconciliationError,
    MalformedItem,
    UnknownConflictId,
    IncompleteInputs,
    WorkflowBlocked,
)
from .alignment import ResolutionLedger, run_reconciliation_engine
from .gates import WorkflowGate
from .pipeline import ReconciliationEngine, ReconciliationResult, reconcile, acquire_and_reconcile

__all__ = [
    "ReconciliationPolicy",
    "load_policy",
    "ReconciliationError",
    "MalformedItem",
    "UnknownConflictId",
    "IncompleteInputs",
    "WorkflowBlocked",
    "ResolutionLedger",
    "run_reconciliation_engine",
    "WorkflowGate",
    "ReconciliationEngine",
    "ReconciliationResult",
    "reconcile",
    "acquire_and_reconcile",
]
