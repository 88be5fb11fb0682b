"""
Gates module for hard workflow checks.
"""

from .workflow_gate import (
    WorkflowGate,
    GateResult,
    GateStatus,
    WorkflowStage,
    STAGE_LABELS,
    run_workflow_gate,
)

__all__ = [
    "WorkflowGate",
    "GateResult",
    "GateStatus",
    "WorkflowStage",
    "STAGE_LABELS",
    "run_workflow_gate",
]
