"""
Markdown reconciliation report.
"""

from datetime import datetime
from pathlib import Path
import logging

from ..alignment.classifier import describe_conflict
from ..gates import STAGE_LABELS, run_workflow_gate
from ..models import RESOLUTION_LABELS, ConflictType
from ..pipeline import ReconciliationResult

logger = logging.getLogger(__name__)

SECTION_TITLES = [
    (ConflictType.MISSING_IN_BOQ, "Items in Drawings Only (Missing from BOQ)",
     "Scope shown in drawings but not priced. Confirm scope inclusion and price it."),
    (ConflictType.MISSING_IN_DRAWING, "Items in BOQ Only (Not Found in Drawings)",
     "Priced scope not yet drawn. Request drawing revision or treat as provisional."),
    (ConflictType.QUANTITY_MISMATCH, "Quantity Discrepancies", None),
    (ConflictType.SPECIFICATION_MISMATCH, "Specification Discrepancies", None),
    (ConflictType.LOCATION_MISMATCH, "Location Discrepancies", None),
]


def _cell(value) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value).replace("|", "/")


def export_reconciliation_report(
    output_path: Path,
    project_id: str,
    result: ReconciliationResult,
) -> Path:
    """Export reconciliation report as markdown."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    ledger = result.ledger
    summary = ledger.summary()
    gate = run_workflow_gate(ledger)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(f"# BOQ vs Drawings Reconciliation Report: {project_id}\n\n")
        f.write(f"Generated: {datetime.now().isoformat()}\n\n")

        # Summary
        f.write("## Summary\n\n")
        f.write(f"- **BOQ Items**: {result.boq_count}\n")
        f.write(f"- **Drawing Items**: {result.drawing_count}\n")
        f.write(f"- **Matched Items**: {result.stats.matched}\n")
        f.write(f"- **In BOQ Only**: {result.stats.boq_only}\n")
        f.write(f"- **In Drawings Only**: {result.stats.drawing_only}\n")
        f.write(f"- **Total Conflicts**: {summary.total}\n")
        f.write(f"- **High Severity (unresolved)**: {summary.high_severity}\n")
        f.write(f"- **Unresolved / Resolved**: {summary.unresolved} / {summary.resolved}\n\n")
        f.write(f"**Alignment Score**: {result.stats.alignment_score:.1f}%\n\n")

        if result.rejected:
            f.write("## Rejected Item Records\n\n")
            f.write(f"{result.error_message()}\n\n")
            for error in result.rejected:
                f.write(f"- {error}\n")
            f.write("\n")

        for conflict_type, title, action in SECTION_TITLES:
            records = ledger.of_type(conflict_type)
            if not records:
                continue

            f.write(f"## {title}\n\n")
            f.write("| ID | Item | Category | Severity | Details | Resolution |\n")
            f.write("|----|------|----------|----------|---------|------------|\n")
            for record in records:
                f.write(f"| {record.id} | {_cell(record.item_description[:50])} | ")
                f.write(f"{_cell(record.category)} | {record.severity.value.upper()} | ")
                resolution = RESOLUTION_LABELS.get(record.resolution, record.resolution)
                f.write(f"{_cell(describe_conflict(record))} | {_cell(resolution)} |\n")
            f.write("\n")

            if action:
                f.write(f"**Action Required**: {action}\n\n")

        # Gate
        f.write("## Workflow Gate\n\n")
        f.write(f"**Status**: {gate.status.value}\n\n")
        if gate.can_proceed:
            f.write(f"All conflicts resolved. {STAGE_LABELS[gate.next_stage]} may proceed.\n")
        else:
            f.write(
                f"{gate.unresolved_count} conflict(s) must be resolved before "
                f"{STAGE_LABELS[gate.next_stage]}.\n"
            )
        for warning in gate.warnings:
            f.write(f"\n- {warning}")
        f.write("\n")

    logger.info(f"Report exported to: {output_path}")
    return output_path
