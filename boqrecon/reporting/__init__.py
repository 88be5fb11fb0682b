"""
Reporting - Excel, JSON and markdown exports of a reconciliation run.
"""

from .exporter import (
    build_conflicts_df,
    build_summary_df,
    build_rejected_df,
    export_to_excel,
    export_to_json,
)
from .report import export_reconciliation_report

__all__ = [
    'build_conflicts_df',
    'build_summary_df',
    'build_rejected_df',
    'export_to_excel',
    'export_to_json',
    'export_reconciliation_report',
]
