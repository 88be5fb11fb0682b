"""
Reconciliation Schema
Strict pydantic models for BOQ vs Drawings reconciliation.

The schema enforces the engine's data invariants:
- Strict enums for conflict kinds, severities and item sources
- Normalized items always carry a description key and a category
- A matched pair always holds at least one side
- A conflict record carries a resolution if and only if it is resolved

NO PRICING - conflicts describe scope discrepancies, not their cost.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Strict categorical values
# =============================================================================

class ItemSource(str, Enum):
    """Which document an item was read from."""
    BOQ = "boq"
    DRAWING = "drawing"


class ConflictType(str, Enum):
    """Kinds of BOQ vs Drawing discrepancy."""
    QUANTITY_MISMATCH = "quantity_mismatch"
    SPECIFICATION_MISMATCH = "specification_mismatch"
    MISSING_IN_BOQ = "missing_in_boq"
    MISSING_IN_DRAWING = "missing_in_drawing"
    LOCATION_MISMATCH = "location_mismatch"  # opt-in, see ReconciliationPolicy


class Severity(str, Enum):
    """Conflict severity level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ResolutionChoice(str, Enum):
    """Standard dispositions offered to the reviewer. Any non-empty string is accepted."""
    ACCEPT_BOQ = "accept_boq"
    ACCEPT_DRAWING = "accept_drawing"
    MANUAL_REVIEW = "manual_review"
    SPLIT_DIFFERENCE = "split_difference"


RESOLUTION_LABELS = {
    ResolutionChoice.ACCEPT_BOQ.value: "Accept BOQ Data",
    ResolutionChoice.ACCEPT_DRAWING.value: "Accept Drawing Data",
    ResolutionChoice.MANUAL_REVIEW.value: "Manual Review Required",
    ResolutionChoice.SPLIT_DIFFERENCE.value: "Use Average/Split",
}


# =============================================================================
# CORE MODELS
# =============================================================================

class NormalizedItem(BaseModel):
    """
    A BOQ or Drawing item in the common comparable shape.

    Everything except the description key and category is optional because
    either source may omit it.
    """
    model_config = ConfigDict(frozen=True)

    description_key: str = Field(description="Trimmed, lower-cased, whitespace-collapsed description")
    category: str = Field(description="Category, case-sensitive and passed through unchanged")
    description: str = Field(default="", description="Original description for display")
    quantity: Optional[float] = None
    unit: Optional[str] = None
    unit_rate: Optional[float] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    spec_fields: Dict[str, str] = Field(default_factory=dict)
    source: ItemSource

    @property
    def join_key(self) -> Tuple[str, str]:
        return (self.description_key, self.category)

    @property
    def display_description(self) -> str:
        return self.description or self.description_key

    def snapshot(self) -> "ItemSnapshot":
        """Copy of the comparable fields, taken when a conflict is created."""
        return ItemSnapshot(
            quantity=self.quantity,
            unit=self.unit,
            unit_rate=self.unit_rate,
            supplier=self.supplier,
            location=self.location,
            notes=self.notes,
            spec_fields=dict(self.spec_fields) or None,
        )


class ItemSnapshot(BaseModel):
    """Point-in-time copy of one side of a conflict, shown side by side to the reviewer."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    quantity: Optional[float] = None
    unit: Optional[str] = None
    unit_rate: Optional[float] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    spec_fields: Optional[Dict[str, str]] = None


class MatchedPair(BaseModel):
    """
    BOQ item and Drawing item believed to describe the same physical scope.
    One side may be absent.
    """
    model_config = ConfigDict(frozen=True)

    boq_item: Optional[NormalizedItem] = None
    drawing_item: Optional[NormalizedItem] = None

    @model_validator(mode='after')
    def check_sides(self):
        if self.boq_item is None and self.drawing_item is None:
            raise ValueError("matched pair needs at least one item")
        if self.boq_item is not None and self.drawing_item is not None:
            if self.boq_item.join_key != self.drawing_item.join_key:
                raise ValueError(
                    f"paired items disagree on key: {self.boq_item.join_key} vs {self.drawing_item.join_key}"
                )
        return self

    @property
    def is_matched(self) -> bool:
        return self.boq_item is not None and self.drawing_item is not None

    @property
    def match_type(self) -> str:
        if self.is_matched:
            return "matched"
        return "boq_only" if self.boq_item is not None else "drawing_only"

    @property
    def anchor(self) -> NormalizedItem:
        """The BOQ side when present, otherwise the Drawing side."""
        return self.boq_item if self.boq_item is not None else self.drawing_item

    @property
    def join_key(self) -> Tuple[str, str]:
        return self.anchor.join_key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_type": self.match_type,
            "description_key": self.join_key[0],
            "category": self.join_key[1],
            "boq_item": self.boq_item.model_dump(mode="json") if self.boq_item else None,
            "drawing_item": self.drawing_item.model_dump(mode="json") if self.drawing_item else None,
        }


class ConflictRecord(BaseModel):
    """
    A detected discrepancy awaiting (or closed by) a human disposition.

    Created by the classifier; only the resolution ledger changes the
    resolution fields afterwards. The id never changes.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    id: str = Field(frozen=True)
    item_description: str
    category: str
    boq_data: Optional[ItemSnapshot] = None
    drawing_data: Optional[ItemSnapshot] = None
    conflict_type: ConflictType
    severity: Severity
    resolved: bool = False
    resolution: Optional[str] = None

    @model_validator(mode='after')
    def check_resolution(self):
        if self.resolved and not self.resolution:
            raise ValueError("resolved conflict must carry a resolution")
        if not self.resolved and self.resolution is not None:
            raise ValueError("unresolved conflict cannot carry a resolution")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Presentation payload, camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=False)
