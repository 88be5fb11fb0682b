"""
Reconciliation errors.

MalformedItem and UnknownConflictId are the two engine-level failures.
IncompleteInputs and WorkflowBlocked guard the boundaries around the engine.
"""

from typing import Any, Dict, List, Optional


class ReconciliationError(Exception):
    """Base class for all reconciliation failures."""


class MalformedItem(ReconciliationError):
    """Raw item record carries neither a description nor a category."""

    def __init__(self, record: Any, source: str = "", index: Optional[int] = None):
        self.record = record
        self.source = source
        self.index = index
        where = f"{source} item" if source else "item"
        if index is not None:
            where = f"{where} #{index}"
        super().__init__(f"Malformed {where}: no description or category to key on")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "index": self.index,
            "reason": str(self),
        }


class UnknownConflictId(ReconciliationError, KeyError):
    """Resolve call against an id the ledger does not hold."""

    def __init__(self, conflict_id: str):
        self.conflict_id = conflict_id
        super().__init__(conflict_id)

    def __str__(self) -> str:
        return f"Unknown conflict id: {self.conflict_id!r}"


class IncompleteInputs(ReconciliationError):
    """Item acquisition was aborted, timed out or failed."""


class WorkflowBlocked(ReconciliationError):
    """Progression requested while conflicts remain unresolved."""

    def __init__(self, unresolved_ids: List[str]):
        self.unresolved_ids = list(unresolved_ids)
        super().__init__(
            f"{len(self.unresolved_ids)} conflict(s) must be resolved before continuing"
        )
