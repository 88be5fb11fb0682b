"""
BOQ vs Drawings Alignment Engine.

This module:
- Normalizes raw BOQ and Drawing records into a common shape
- Pairs items on exact (description, category) keys
- Classifies quantity, specification and missing-item conflicts
- Tracks human resolution of each conflict in a ledger
- Outputs: reconciliation_report.md, conflicts.json, matches.json, conflicts.xlsx
"""

from .normalizer import ItemNormalizer, normalize_description
from .matcher import ItemMatcher, MatchStats
from .classifier import ConflictClassifier, conflict_id, describe_conflict
from .ledger import ResolutionLedger, LedgerSummary

__all__ = [
    "ItemNormalizer",
    "normalize_description",
    "ItemMatcher",
    "MatchStats",
    "ConflictClassifier",
    "conflict_id",
    "describe_conflict",
    "ResolutionLedger",
    "LedgerSummary",
    "run_reconciliation_engine",
]


def run_reconciliation_engine(
    project_id: str,
    boq_items: list,
    drawing_items: list,
    output_dir,
    policy=None,
) -> dict:
    """
    Run the reconciliation engine and export its results.

    Args:
        project_id: Project identifier
        boq_items: Raw BOQ item records
        drawing_items: Raw Drawing item records
        output_dir: Output directory
        policy: ReconciliationPolicy (defaults when None)

    Returns:
        Dict with reconciliation summary
    """
    from pathlib import Path
    import json
    import logging

    from ..pipeline import reconcile
    from ..reporting import export_reconciliation_report, export_to_excel

    logger = logging.getLogger(__name__)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    # 1-3. Normalize, match, classify
    logger.info(f"Reconciling project {project_id}...")
    result = reconcile(boq_items, drawing_items, policy)

    # 4. Export results

    # Conflicts JSON (presentation payload)
    with open(output_dir / "conflicts.json", "w", encoding="utf-8") as f:
        json.dump(result.ledger.records_as_dicts(), f, indent=2, ensure_ascii=False)

    # Matches JSON
    with open(output_dir / "matches.json", "w", encoding="utf-8") as f:
        json.dump([p.to_dict() for p in result.pairs], f, indent=2, ensure_ascii=False)

    export_to_excel(result, output_dir / "conflicts.xlsx")
    export_reconciliation_report(output_dir / "reconciliation_report.md", project_id, result)

    summary = result.ledger.summary()

    return {
        "total_boq_items": result.boq_count,
        "total_drawing_items": result.drawing_count,
        "matched_items": result.stats.matched,
        "boq_only": result.stats.boq_only,
        "drawing_only": result.stats.drawing_only,
        "alignment_score": result.stats.alignment_score,
        "conflicts": summary.total,
        "high_severity": summary.high_severity,
        "by_type": summary.by_type,
        "rejected_items": len(result.rejected),
        "error": result.error_message(),
        "all_resolved": result.ledger.is_all_resolved(),
    }
