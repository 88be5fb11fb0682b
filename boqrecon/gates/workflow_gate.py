"""
Workflow Gate

HARD GATE between conflict resolution and gap completion.

Rules:
1. Every conflict in the ledger has a disposition -> PASS, next stage opens
2. Any conflict unresolved -> BLOCKED, progression is disabled

The gate is a pure read of ResolutionLedger.is_all_resolved(); it keeps no
state of its own, so every evaluation reflects the ledger as it is now.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..alignment.ledger import ResolutionLedger
from ..errors import WorkflowBlocked


class WorkflowStage(Enum):
    """Document workflow stages, in order."""
    UPLOAD = "upload"
    ANALYZE = "analyze"
    CONFLICTS = "conflicts"
    GAPS = "gaps"
    GENERATE = "generate"

    @property
    def next_stage(self) -> Optional["WorkflowStage"]:
        stages = list(WorkflowStage)
        idx = stages.index(self)
        return stages[idx + 1] if idx + 1 < len(stages) else None


STAGE_LABELS = {
    WorkflowStage.UPLOAD: "Upload Documents",
    WorkflowStage.ANALYZE: "Analyze",
    WorkflowStage.CONFLICTS: "Resolve Conflicts",
    WorkflowStage.GAPS: "Gap Completion",
    WorkflowStage.GENERATE: "Generate Documents",
}


class GateStatus(Enum):
    """Gate result status."""
    PASS = "PASS"        # All conflicts resolved
    BLOCKED = "BLOCKED"  # Unresolved conflicts remain


@dataclass
class GateResult:
    """Result of workflow gate evaluation."""
    status: GateStatus
    can_proceed: bool
    current_stage: WorkflowStage
    next_stage: Optional[WorkflowStage]
    blockers: List[str] = field(default_factory=list)  # unresolved conflict ids
    warnings: List[str] = field(default_factory=list)
    total_conflicts: int = 0
    unresolved_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "can_proceed": self.can_proceed,
            "current_stage": self.current_stage.value,
            "next_stage": self.next_stage.value if self.next_stage else None,
            "blockers": self.blockers,
            "warnings": self.warnings,
            "metrics": {
                "total_conflicts": self.total_conflicts,
                "unresolved_count": self.unresolved_count,
            },
        }


class WorkflowGate:
    """Permit or block progression past conflict resolution."""

    STAGE = WorkflowStage.CONFLICTS

    def __init__(self, ledger: ResolutionLedger):
        self.ledger = ledger

    def can_proceed(self) -> bool:
        return self.ledger.is_all_resolved()

    def evaluate(self) -> GateResult:
        """Snapshot of the gate against the current ledger."""
        can_proceed = self.ledger.is_all_resolved()
        unresolved = self.ledger.unresolved()

        warnings = []
        high = self.ledger.high_severity()
        if high:
            warnings.append(
                f"{len(high)} high-severity conflict{'s' if len(high) != 1 else ''} "
                f"require{'s' if len(high) == 1 else ''} immediate attention"
            )

        return GateResult(
            status=GateStatus.PASS if can_proceed else GateStatus.BLOCKED,
            can_proceed=can_proceed,
            current_stage=self.STAGE,
            next_stage=self.STAGE.next_stage,
            blockers=[r.id for r in unresolved],
            warnings=warnings,
            total_conflicts=len(self.ledger),
            unresolved_count=len(unresolved),
        )

    def handoff(self) -> ResolutionLedger:
        """
        Release the fully resolved ledger to the next stage.

        Raises:
            WorkflowBlocked: conflicts remain unresolved
        """
        if not self.ledger.is_all_resolved():
            raise WorkflowBlocked([r.id for r in self.ledger.unresolved()])
        return self.ledger


def run_workflow_gate(ledger: ResolutionLedger) -> GateResult:
    """Evaluate the workflow gate for a ledger."""
    return WorkflowGate(ledger).evaluate()
