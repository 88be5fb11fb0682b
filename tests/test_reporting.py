"""
Tests for reporting and the CLI

Tests cover:
- Conflict and summary DataFrames
- Excel, JSON and markdown exports
- run_reconciliation_engine output files
- CLI item loading and commands
"""

import json

import pandas as pd
import pytest

from boqrecon.__main__ import load_items, main
from boqrecon.alignment import run_reconciliation_engine
from boqrecon.alignment.ledger import ResolutionLedger
from boqrecon.errors import ReconciliationError
from boqrecon.pipeline import reconcile
from boqrecon.reporting import (
    build_conflicts_df,
    build_summary_df,
    export_reconciliation_report,
    export_to_excel,
    export_to_json,
)
from boqrecon.reporting.exporter import CONFLICT_COLUMNS
from boqrecon.sample_data import SAMPLE_PROJECT_ID


@pytest.fixture
def sample_result(sample_sets):
    boq, drawings = sample_sets
    return reconcile(boq, drawings)


# =============================================================================
# DATAFRAMES
# =============================================================================


class TestDataFrames:
    def test_conflicts_df(self, sample_result):
        df = build_conflicts_df(sample_result.ledger)

        assert list(df.columns) == CONFLICT_COLUMNS
        assert len(df) == 6
        assert df.iloc[0]['Details'] == "BOQ shows 200 sqm, but Drawing shows 180 sqm"
        assert set(df['Resolved']) == {'No'}

    def test_empty_ledger(self):
        df = build_conflicts_df(ResolutionLedger())
        assert df.empty
        assert list(df.columns) == CONFLICT_COLUMNS

    def test_summary_df(self, sample_result):
        df = build_summary_df(sample_result)
        values = dict(zip(df['Item'], df['Value']))

        assert values['Total Conflicts'] == 6
        assert values['Matched Items'] == 5
        assert values['All Resolved'] == 'No'


# =============================================================================
# EXPORTS
# =============================================================================


class TestExports:
    def test_excel(self, sample_result, tmp_path):
        path = tmp_path / "conflicts.xlsx"
        export_to_excel(sample_result, path)

        sheets = pd.read_excel(path, sheet_name=None)
        assert set(sheets) == {'Summary', 'Conflicts', 'Rejected_Items'}
        assert len(sheets['Conflicts']) == 6

    def test_json(self, sample_result, tmp_path):
        path = tmp_path / "result.json"
        export_to_json(sample_result, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data['boq_items'] == 6
        assert len(data['ledger']['conflicts']) == 6

    def test_markdown_report(self, sample_result, tmp_path):
        path = export_reconciliation_report(tmp_path / "report.md", "PRJ-1", sample_result)
        text = path.read_text(encoding="utf-8")

        assert "# BOQ vs Drawings Reconciliation Report: PRJ-1" in text
        assert "Quantity Discrepancies" in text
        assert "**Status**: BLOCKED" in text
        assert "must be resolved before Gap Completion" in text

    def test_markdown_report_uses_labels(self, sample_result, tmp_path):
        sample_result.ledger.resolve_all_remaining()

        path = export_reconciliation_report(tmp_path / "report.md", "PRJ-1", sample_result)
        text = path.read_text(encoding="utf-8")

        assert "| Accept BOQ Data |" in text
        assert "**Status**: PASS" in text
        assert "All conflicts resolved. Gap Completion may proceed." in text

    def test_run_reconciliation_engine(self, sample_sets, tmp_path):
        boq, drawings = sample_sets
        summary = run_reconciliation_engine(SAMPLE_PROJECT_ID, boq, drawings, tmp_path)

        for name in ("conflicts.json", "matches.json", "conflicts.xlsx", "reconciliation_report.md"):
            assert (tmp_path / name).exists()
        assert summary['conflicts'] == 6
        assert summary['high_severity'] == 2
        assert summary['error'] is None
        assert summary['all_resolved'] is False

        conflicts = json.loads((tmp_path / "conflicts.json").read_text(encoding="utf-8"))
        assert conflicts[0]['conflictType'] == "quantity_mismatch"


# =============================================================================
# CLI
# =============================================================================


class TestCli:
    def test_load_items_list_and_object(self, tmp_path):
        as_list = tmp_path / "a.json"
        as_list.write_text(json.dumps([{"description": "Tiles"}]))
        as_object = tmp_path / "b.json"
        as_object.write_text(json.dumps({"items": [{"description": "Tiles"}]}))

        assert load_items(as_list) == load_items(as_object) == [{"description": "Tiles"}]

    def test_load_items_rejects_non_list(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"rows": []}))

        with pytest.raises(ReconciliationError):
            load_items(path)

    def test_demo_command(self, tmp_path):
        assert main(["demo", "--output", str(tmp_path)]) == 0
        assert (tmp_path / "reconciliation_report.md").exists()

    def test_reconcile_command(self, sample_sets, tmp_path):
        boq, drawings = sample_sets
        (tmp_path / "boq.json").write_text(json.dumps(boq))
        (tmp_path / "drawings.json").write_text(json.dumps(drawings))
        out = tmp_path / "out"

        code = main([
            "reconcile",
            "--boq", str(tmp_path / "boq.json"),
            "--drawings", str(tmp_path / "drawings.json"),
            "--output", str(out),
        ])

        assert code == 0
        assert (out / "conflicts.xlsx").exists()

    def test_reconcile_missing_file(self, tmp_path):
        code = main([
            "reconcile",
            "--boq", str(tmp_path / "absent.json"),
            "--drawings", str(tmp_path / "absent.json"),
            "--output", str(tmp_path),
        ])
        assert code == 1
