"""
Conflict Classifier - Derive conflict records from matched pairs.

Rules, evaluated in order (all applicable rules fire):
1. Drawing item with no BOQ counterpart -> missing_in_boq, HIGH
2. BOQ item with no Drawing counterpart -> missing_in_drawing, MEDIUM
3. Both quantities given and unequal -> quantity_mismatch,
   HIGH at or above the relative threshold, MEDIUM below it
4. Notes on one side only, differing notes, or a specification attribute
   given on both sides with different values -> specification_mismatch,
   LOW, or MEDIUM when the item is life-safety relevant
5. (opt-in) Both locations given and different -> location_mismatch

Conflict ids are derived from category, description key and conflict type,
so classifying the same pairs again yields the same ids.
"""

from collections import Counter
from typing import Iterable, List, Optional, Sequence
import hashlib
import logging

from ..config import ReconciliationPolicy
from ..models import ConflictRecord, ConflictType, MatchedPair, NormalizedItem, Severity
from .normalizer import normalize_description

logger = logging.getLogger(__name__)


def conflict_id(category: str, description_key: str, conflict_type: ConflictType) -> str:
    """Deterministic id for a conflict on one join key."""
    raw = f"{category}\x1f{description_key}\x1f{ConflictType(conflict_type).value}"
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]
    return f"CNF-{digest}"


class ConflictClassifier:
    """Classify matched pairs into conflict records."""

    def __init__(self, policy: Optional[ReconciliationPolicy] = None):
        self.policy = policy or ReconciliationPolicy()

    def classify_all(self, pairs: Iterable[MatchedPair]) -> List[ConflictRecord]:
        """
        Classify every pair, in pair order.

        Repeated join keys (duplicate items) get a stable '#n' suffix on the
        second and later conflicts of the same type.
        """
        seen: Counter = Counter()
        records = []

        for pair in pairs:
            records.extend(self.classify(pair, seen=seen))

        by_type = Counter(r.conflict_type.value for r in records)
        logger.info(f"Classified {len(records)} conflicts: {dict(by_type)}")

        return records

    def classify(self, pair: MatchedPair, seen: Optional[Counter] = None) -> List[ConflictRecord]:
        """Emit zero or more conflicts for one pair. Absent optional fields never raise."""
        if seen is None:
            seen = Counter()

        boq = pair.boq_item
        drawing = pair.drawing_item
        records = []

        if boq is None:
            records.append(self._record(pair, ConflictType.MISSING_IN_BOQ, Severity.HIGH, seen))
            return records

        if drawing is None:
            records.append(self._record(pair, ConflictType.MISSING_IN_DRAWING, Severity.MEDIUM, seen))
            return records

        qty_severity = self._quantity_severity(boq, drawing)
        if qty_severity is not None:
            records.append(self._record(pair, ConflictType.QUANTITY_MISMATCH, qty_severity, seen))

        spec_severity = self._specification_severity(boq, drawing)
        if spec_severity is not None:
            records.append(self._record(pair, ConflictType.SPECIFICATION_MISMATCH, spec_severity, seen))

        if self.policy.detect_location_mismatch and self._locations_differ(boq, drawing):
            records.append(self._record(
                pair, ConflictType.LOCATION_MISMATCH, self.policy.location_mismatch_severity, seen,
            ))

        return records

    def _record(
        self,
        pair: MatchedPair,
        conflict_type: ConflictType,
        severity: Severity,
        seen: Counter,
    ) -> ConflictRecord:
        anchor = pair.anchor
        base_id = conflict_id(anchor.category, anchor.description_key, conflict_type)

        seen[base_id] += 1
        record_id = base_id if seen[base_id] == 1 else f"{base_id}#{seen[base_id]}"

        logger.debug(f"{record_id}: {conflict_type.value} ({severity.value}) on '{anchor.description_key}'")

        return ConflictRecord(
            id=record_id,
            item_description=anchor.display_description,
            category=anchor.category,
            boq_data=pair.boq_item.snapshot() if pair.boq_item else None,
            drawing_data=pair.drawing_item.snapshot() if pair.drawing_item else None,
            conflict_type=conflict_type,
            severity=severity,
        )

    def _quantity_severity(self, boq: NormalizedItem, drawing: NormalizedItem) -> Optional[Severity]:
        """Severity of a quantity difference, or None when quantities agree or are missing."""
        b_qty = boq.quantity
        d_qty = drawing.quantity

        if b_qty is None or d_qty is None or b_qty == d_qty:
            return None

        largest = max(b_qty, d_qty)
        if largest <= 0:
            return Severity.HIGH

        relative = abs(b_qty - d_qty) / largest
        if relative >= self.policy.quantity_high_threshold:
            return Severity.HIGH
        return Severity.MEDIUM

    def _specification_severity(self, boq: NormalizedItem, drawing: NormalizedItem) -> Optional[Severity]:
        """Severity of a specification difference, or None when specifications agree."""
        if not self._specifications_differ(boq, drawing):
            return None

        texts = [t for t in (boq.notes, drawing.notes) if t]
        texts.extend(boq.spec_fields.values())
        texts.extend(drawing.spec_fields.values())

        has_fire_rating = "fire_rating" in boq.spec_fields or "fire_rating" in drawing.spec_fields
        if has_fire_rating or self.policy.is_life_safety(boq.category, texts):
            return Severity.MEDIUM
        return Severity.LOW

    def _specifications_differ(self, boq: NormalizedItem, drawing: NormalizedItem) -> bool:
        b_notes = normalize_description(boq.notes) if boq.notes else ""
        d_notes = normalize_description(drawing.notes) if drawing.notes else ""

        if b_notes != d_notes:
            return True

        for name in self.policy.spec_field_names:
            b_value = boq.spec_fields.get(name)
            d_value = drawing.spec_fields.get(name)
            if b_value is None or d_value is None:
                continue
            if normalize_description(b_value) != normalize_description(d_value):
                return True

        return False

    def _locations_differ(self, boq: NormalizedItem, drawing: NormalizedItem) -> bool:
        if not boq.location or not drawing.location:
            return False
        return normalize_description(boq.location) != normalize_description(drawing.location)


def _fmt_qty(value: Optional[float]) -> str:
    return f"{value:g}" if value is not None else "?"


def describe_conflict(record: ConflictRecord) -> str:
    """One-line explanation shown next to a conflict."""
    boq = record.boq_data
    drawing = record.drawing_data

    if record.conflict_type == ConflictType.QUANTITY_MISMATCH and boq and drawing:
        return (
            f"BOQ shows {_fmt_qty(boq.quantity)} {boq.unit or ''}".rstrip()
            + f", but Drawing shows {_fmt_qty(drawing.quantity)} {drawing.unit or ''}".rstrip()
        )
    if record.conflict_type == ConflictType.LOCATION_MISMATCH:
        boq_loc = boq.location if boq and boq.location else "Not specified"
        drawing_loc = drawing.location if drawing and drawing.location else "Not specified"
        return f"BOQ location: {boq_loc} vs Drawing location: {drawing_loc}"
    if record.conflict_type == ConflictType.MISSING_IN_BOQ:
        return "Item found in Drawing but missing in BOQ"
    if record.conflict_type == ConflictType.MISSING_IN_DRAWING:
        return "Item in BOQ but not referenced in Drawing"
    if record.conflict_type == ConflictType.SPECIFICATION_MISMATCH:
        return "Specification differences between BOQ and Drawing"
    return "Conflict detected"


def severity_counts(records: Sequence[ConflictRecord]) -> dict:
    counts = Counter(r.severity.value for r in records)
    return {s.value: counts.get(s.value, 0) for s in Severity}
