"""
Tests for the reconciliation pipeline

Tests cover:
- End-to-end scenarios on raw records
- Sample data producing the expected conflict set
- Malformed records skipped and reported
- Async acquisition boundary: success, timeout, failure, sibling cancellation
- Policy default resolution reaching bulk resolve
"""

import asyncio

import pytest

from boqrecon.config import load_policy
from boqrecon.errors import IncompleteInputs
from boqrecon.models import ConflictType, Severity
from boqrecon.pipeline import ReconciliationEngine, acquire_and_reconcile, reconcile


def _kinds(ledger):
    return [(r.item_description, r.conflict_type, r.severity) for r in ledger]


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenarios:
    def test_quantity_mismatch_scenario(self):
        result = reconcile(
            [{"description": "Ceramic Floor Tiles", "category": "Flooring", "quantity": 200}],
            [{"description": "Ceramic Floor Tiles", "category": "Flooring", "quantity": 180}],
        )
        assert _kinds(result.ledger) == [
            ("Ceramic Floor Tiles", ConflictType.QUANTITY_MISMATCH, Severity.HIGH),
        ]

    def test_boq_only_scenario(self):
        result = reconcile(
            [
                {"description": "Ceramic Floor Tiles", "category": "Flooring", "quantity": 200},
                {"description": "Marble Skirting", "category": "Flooring", "quantity": 40},
            ],
            [{"description": "Ceramic Floor Tiles", "category": "Flooring", "quantity": 200}],
        )
        assert _kinds(result.ledger) == [
            ("Marble Skirting", ConflictType.MISSING_IN_DRAWING, Severity.MEDIUM),
        ]

    def test_drawing_only_scenario(self):
        result = reconcile(
            [],
            [{"description": "Electrical Conduit & Wiring", "category": "MEP"}],
        )
        assert _kinds(result.ledger) == [
            ("Electrical Conduit & Wiring", ConflictType.MISSING_IN_BOQ, Severity.HIGH),
        ]

    def test_agreeing_items_produce_empty_ledger(self):
        record = {"description": "Ceiling Light Fixtures", "category": "Lighting", "quantity": 120, "unit": "nos"}
        result = reconcile([dict(record)], [dict(record)])

        assert len(result.ledger) == 0
        assert result.ledger.is_all_resolved()

    def test_sample_data(self, sample_sets):
        boq, drawings = sample_sets
        result = reconcile(boq, drawings)

        assert _kinds(result.ledger) == [
            ("Ceramic Floor Tiles - Premium Grade", ConflictType.QUANTITY_MISMATCH, Severity.HIGH),
            ("Gypsum Board Partition System", ConflictType.SPECIFICATION_MISMATCH, Severity.MEDIUM),
            ("Aluminum Window Frames", ConflictType.QUANTITY_MISMATCH, Severity.MEDIUM),
            ("Paint - Interior Walls", ConflictType.SPECIFICATION_MISMATCH, Severity.LOW),
            ("Marble Cladding - Lobby", ConflictType.MISSING_IN_DRAWING, Severity.MEDIUM),
            ("Electrical Conduit & Wiring", ConflictType.MISSING_IN_BOQ, Severity.HIGH),
        ]
        assert result.stats.matched == 5
        assert result.stats.boq_only == 1
        assert result.stats.drawing_only == 1


# =============================================================================
# MALFORMED INPUT
# =============================================================================


class TestMalformedInput:
    def test_malformed_item_skipped_run_continues(self):
        result = reconcile(
            [{"quantity": 10}, {"description": "Tiles", "category": "Flooring"}],
            [{"description": "Tiles", "category": "Flooring"}, {"unit": "sqm"}],
        )

        assert len(result.ledger) == 0
        assert result.boq_count == 1
        assert result.drawing_count == 1
        assert [(e.source, e.index) for e in result.rejected] == [("boq", 0), ("drawing", 1)]
        assert result.has_input_errors
        assert "2 item record(s)" in result.error_message()

    def test_clean_input_has_no_error(self, sample_sets):
        boq, drawings = sample_sets
        result = reconcile(boq, drawings)
        assert result.error_message() is None
        assert result.to_dict()["rejected"] == []


# =============================================================================
# ASYNC ACQUISITION
# =============================================================================


class TestAcquisition:
    def test_awaits_both_sets_then_reconciles(self, sample_sets):
        boq, drawings = sample_sets

        async def fetch(items):
            await asyncio.sleep(0.01)
            return items

        result = asyncio.run(acquire_and_reconcile(fetch(boq), fetch(drawings), timeout=5))

        assert len(result.ledger) == 6

    def test_timeout_raises_incomplete_inputs(self):
        async def fast():
            return []

        async def slow():
            await asyncio.sleep(5)
            return []

        with pytest.raises(IncompleteInputs):
            asyncio.run(acquire_and_reconcile(fast(), slow(), timeout=0.05))

    def test_failed_acquisition_raises_incomplete_inputs(self):
        async def ok():
            return []

        async def broken():
            raise RuntimeError("analysis service unavailable")

        with pytest.raises(IncompleteInputs, match="analysis service unavailable"):
            asyncio.run(acquire_and_reconcile(ok(), broken()))

    def test_aborted_acquisition_raises_incomplete_inputs(self):
        async def ok():
            return []

        async def aborted():
            raise asyncio.CancelledError()

        with pytest.raises(IncompleteInputs, match="aborted"):
            asyncio.run(acquire_and_reconcile(ok(), aborted()))

    def test_failure_cancels_other_source(self):
        state = {}

        async def broken():
            await asyncio.sleep(0)
            raise OSError("drawing analysis crashed")

        async def slow():
            try:
                await asyncio.sleep(5)
                state["finished"] = True
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise
            return []

        with pytest.raises(IncompleteInputs, match="drawing analysis crashed"):
            asyncio.run(acquire_and_reconcile(slow(), broken()))

        assert state == {"cancelled": True}

    def test_aborted_source_cancels_other_source(self):
        state = {}

        async def aborted():
            await asyncio.sleep(0)
            raise asyncio.CancelledError()

        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise
            return []

        with pytest.raises(IncompleteInputs):
            asyncio.run(acquire_and_reconcile(aborted(), slow()))

        assert state == {"cancelled": True}

    @pytest.mark.parametrize("bad", [None, 42, object(), "items", {"items": []}])
    def test_non_list_result_raises_incomplete_inputs(self, bad):
        async def ok():
            return []

        async def odd():
            return bad

        with pytest.raises(IncompleteInputs, match="no item list"):
            asyncio.run(acquire_and_reconcile(ok(), odd()))

    def test_engine_not_run_on_missing_items(self, monkeypatch):
        calls = []
        monkeypatch.setattr(ReconciliationEngine, "run", lambda self, b, d: calls.append((b, d)))

        async def ok():
            return []

        async def nothing():
            return None

        with pytest.raises(IncompleteInputs):
            asyncio.run(acquire_and_reconcile(ok(), nothing()))
        assert calls == []


# =============================================================================
# POLICY
# =============================================================================


class TestPolicyDefaultResolution:
    def test_configured_default_reaches_bulk_resolution(self, sample_sets, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("default_resolution: manual_review\n")
        boq, drawings = sample_sets

        ledger = reconcile(boq, drawings, load_policy(path)).ledger
        ledger.resolve_one(ledger.ids[0], "accept_drawing")
        ledger.resolve_all_remaining()

        assert ledger.records[0].resolution == "accept_drawing"
        assert {r.resolution for r in ledger.records[1:]} == {"manual_review"}
        assert ledger.is_all_resolved()

    def test_default_policy_resolves_as_accept_boq(self, sample_sets):
        boq, drawings = sample_sets
        ledger = reconcile(boq, drawings).ledger

        ledger.resolve_all_remaining()

        assert {r.resolution for r in ledger} == {"accept_boq"}
