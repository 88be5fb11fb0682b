# Models package
from .schema import (
    NormalizedItem,
    ItemSnapshot,
    MatchedPair,
    ConflictRecord,
    ItemSource,
    ConflictType,
    Severity,
    ResolutionChoice,
    RESOLUTION_LABELS,
)

__all__ = [
    "NormalizedItem",
    "ItemSnapshot",
    "MatchedPair",
    "ConflictRecord",
    "ItemSource",
    "ConflictType",
    "Severity",
    "ResolutionChoice",
    "RESOLUTION_LABELS",
]
