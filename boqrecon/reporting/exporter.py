"""
Exporter Module
Exports a reconciliation result to Excel and JSON formats.

Excel sheets:
- Summary
- Conflicts
- Rejected_Items
"""

import json
from io import BytesIO
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..alignment.classifier import describe_conflict
from ..alignment.ledger import ResolutionLedger
from ..pipeline import ReconciliationResult

logger = logging.getLogger(__name__)

CONFLICT_COLUMNS = [
    'ID', 'Item', 'Category', 'Conflict Type', 'Severity', 'Details',
    'BOQ Qty', 'BOQ Unit', 'Drawing Qty', 'Drawing Unit',
    'BOQ Location', 'Drawing Location', 'Drawing Notes',
    'Resolved', 'Resolution',
]


def build_conflicts_df(ledger: ResolutionLedger) -> pd.DataFrame:
    """Build conflict ledger DataFrame, one row per conflict in ledger order."""
    if len(ledger) == 0:
        return pd.DataFrame(columns=CONFLICT_COLUMNS)

    data = []
    for record in ledger:
        boq = record.boq_data
        drawing = record.drawing_data
        data.append({
            'ID': record.id,
            'Item': record.item_description,
            'Category': record.category,
            'Conflict Type': record.conflict_type.value,
            'Severity': record.severity.value.upper(),
            'Details': describe_conflict(record),
            'BOQ Qty': boq.quantity if boq else None,
            'BOQ Unit': boq.unit if boq else None,
            'Drawing Qty': drawing.quantity if drawing else None,
            'Drawing Unit': drawing.unit if drawing else None,
            'BOQ Location': boq.location if boq else None,
            'Drawing Location': drawing.location if drawing else None,
            'Drawing Notes': drawing.notes if drawing else None,
            'Resolved': 'Yes' if record.resolved else 'No',
            'Resolution': record.resolution or '-',
        })

    return pd.DataFrame(data, columns=CONFLICT_COLUMNS)


def build_summary_df(result: ReconciliationResult) -> pd.DataFrame:
    """Build summary DataFrame."""
    summary = result.ledger.summary()
    data = [
        {'Item': 'BOQ Items', 'Value': result.boq_count},
        {'Item': 'Drawing Items', 'Value': result.drawing_count},
        {'Item': 'Matched Items', 'Value': result.stats.matched},
        {'Item': 'BOQ Only', 'Value': result.stats.boq_only},
        {'Item': 'Drawing Only', 'Value': result.stats.drawing_only},
        {'Item': 'Alignment Score', 'Value': f"{result.stats.alignment_score:.1f}%"},
        {'Item': 'Total Conflicts', 'Value': summary.total},
        {'Item': 'High Severity (unresolved)', 'Value': summary.high_severity},
        {'Item': 'Unresolved', 'Value': summary.unresolved},
        {'Item': 'Resolved', 'Value': summary.resolved},
        {'Item': 'Rejected Records', 'Value': len(result.rejected)},
        {'Item': 'All Resolved', 'Value': 'Yes' if result.ledger.is_all_resolved() else 'No'},
    ]
    return pd.DataFrame(data)


def build_rejected_df(result: ReconciliationResult) -> pd.DataFrame:
    """Build DataFrame of records skipped as malformed."""
    if not result.rejected:
        return pd.DataFrame(columns=['Source', 'Index', 'Reason'])

    return pd.DataFrame([
        {'Source': e.source, 'Index': e.index, 'Reason': str(e)}
        for e in result.rejected
    ])


def export_to_excel(
    result: ReconciliationResult,
    filepath: Optional[Path] = None
) -> BytesIO:
    """
    Export reconciliation result to Excel file with multiple sheets.

    Args:
        result: ReconciliationResult to export
        filepath: Optional file path to save (if None, only returns BytesIO)

    Returns:
        BytesIO buffer with Excel file
    """
    summary_df = build_summary_df(result)
    conflicts_df = build_conflicts_df(result.ledger)
    rejected_df = build_rejected_df(result)

    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        summary_df.to_excel(writer, sheet_name='Summary', index=False)
        conflicts_df.to_excel(writer, sheet_name='Conflicts', index=False)
        rejected_df.to_excel(writer, sheet_name='Rejected_Items', index=False)

        # Format columns width
        for sheet_name in writer.sheets:
            worksheet = writer.sheets[sheet_name]
            for column in worksheet.columns:
                lengths = [len(str(cell.value)) for cell in column if cell.value is not None]
                max_length = max(lengths, default=0)
                column_letter = column[0].column_letter
                worksheet.column_dimensions[column_letter].width = min(max_length + 2, 60)

    buffer.seek(0)

    # Optionally save to file
    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'wb') as f:
            f.write(buffer.getvalue())
        buffer.seek(0)
        logger.info(f"Excel exported to: {filepath}")

    return buffer


def export_to_json(
    result: ReconciliationResult,
    filepath: Optional[Path] = None,
    indent: int = 2
) -> str:
    """
    Export reconciliation result to JSON.

    Args:
        result: ReconciliationResult to export
        filepath: Optional file path to save
        indent: JSON indentation

    Returns:
        JSON string
    """
    json_str = json.dumps(result.to_dict(), indent=indent, ensure_ascii=False)

    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(json_str)
        logger.info(f"JSON exported to: {filepath}")

    return json_str
