"""
Resolution Ledger - Track human dispositions of detected conflicts.

Each record moves Unresolved -> Resolved and never back. Two mutating
operations exist:
- resolve_one: resolve (or re-resolve) a single record, last write wins
- resolve_all_remaining: fill every unresolved record with a default,
  leaving earlier choices untouched

Records are replaced by resolved copies, never edited in place.
is_all_resolved() is always computed from the current records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
import logging

from ..errors import UnknownConflictId
from ..models import ConflictRecord, ConflictType, ResolutionChoice, Severity

logger = logging.getLogger(__name__)

Choice = Union[str, Enum]


def _choice_value(choice: Choice) -> str:
    value = choice.value if isinstance(choice, Enum) else choice
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Resolution choice must be a non-empty string, got {choice!r}")
    return value


@dataclass
class LedgerSummary:
    """Counts shown above the conflict list."""
    total: int = 0
    high_severity: int = 0  # unresolved only
    unresolved: int = 0
    resolved: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_resolution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "high_severity": self.high_severity,
            "unresolved": self.unresolved,
            "resolved": self.resolved,
            "by_type": self.by_type,
            "by_severity": self.by_severity,
            "by_resolution": self.by_resolution,
        }


class ResolutionLedger:
    """Ordered conflict records keyed by id, in classification order."""

    def __init__(
        self,
        records: Iterable[ConflictRecord] = (),
        default_resolution: Choice = ResolutionChoice.ACCEPT_BOQ,
    ):
        self.default_resolution = _choice_value(default_resolution)
        self._records: List[ConflictRecord] = []
        self._by_id: Dict[str, ConflictRecord] = {}

        for record in records:
            if record.id in self._by_id:
                raise ValueError(f"Duplicate conflict id: {record.id}")
            self._records.append(record)
            self._by_id[record.id] = record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ConflictRecord]:
        return iter(self._records)

    def __contains__(self, conflict_id: object) -> bool:
        return conflict_id in self._by_id

    @property
    def records(self) -> List[ConflictRecord]:
        return list(self._records)

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self._records]

    def get(self, conflict_id: str) -> ConflictRecord:
        try:
            return self._by_id[conflict_id]
        except KeyError:
            raise UnknownConflictId(conflict_id) from None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _stamp(self, position: int, value: str) -> ConflictRecord:
        """Replace the record at position with a resolved copy."""
        record = self._records[position]
        resolved = record.model_copy(update={"resolved": True, "resolution": value})
        self._records[position] = resolved
        self._by_id[resolved.id] = resolved
        return resolved

    def resolve_one(self, conflict_id: str, resolution: Choice) -> ConflictRecord:
        """
        Resolve the record with this id.

        An already-resolved record takes the new choice (last write wins).

        Raises:
            UnknownConflictId: no record has this id; nothing is changed
        """
        record = self.get(conflict_id)
        value = _choice_value(resolution)

        if record.resolved and record.resolution != value:
            logger.info(f"Re-resolving {conflict_id}: {record.resolution} -> {value}")
        else:
            logger.debug(f"Resolving {conflict_id}: {value}")

        return self._stamp(self._records.index(record), value)

    def resolve_all_remaining(self, default_resolution: Optional[Choice] = None) -> List[str]:
        """
        Resolve every unresolved record with the default choice.

        Without an explicit choice the ledger's own default_resolution is
        used. Records already resolved keep their choice. Returns the ids
        resolved by this call.
        """
        if default_resolution is None:
            default_resolution = self.default_resolution
        value = _choice_value(default_resolution)
        resolved_ids = []

        for position, record in enumerate(self._records):
            if record.resolved:
                continue
            self._stamp(position, value)
            resolved_ids.append(record.id)

        logger.info(f"Bulk-resolved {len(resolved_ids)} conflicts as '{value}'")
        return resolved_ids

    def carry_over_resolutions(self, previous: "ResolutionLedger") -> int:
        """
        Copy resolutions from an earlier ledger onto records with the same id.

        Only called by callers that want prior choices to survive a re-run;
        returns the number of records updated.
        """
        carried = 0
        for old in previous:
            if not old.resolved or old.id not in self._by_id:
                continue
            record = self._by_id[old.id]
            if record.resolved:
                continue
            self._stamp(self._records.index(record), old.resolution)
            carried += 1

        logger.info(f"Carried over {carried} resolutions from previous run")
        return carried

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def is_all_resolved(self) -> bool:
        """True when every record is resolved; vacuously true when empty."""
        return all(r.resolved for r in self._records)

    def unresolved(self) -> List[ConflictRecord]:
        return [r for r in self._records if not r.resolved]

    def resolved(self) -> List[ConflictRecord]:
        return [r for r in self._records if r.resolved]

    def high_severity(self) -> List[ConflictRecord]:
        """Unresolved HIGH severity records."""
        return [r for r in self._records if not r.resolved and r.severity == Severity.HIGH]

    def summary(self) -> LedgerSummary:
        by_type: Dict[str, int] = {}
        by_severity = {s.value: 0 for s in Severity}
        by_resolution: Dict[str, int] = {}

        for record in self._records:
            by_type[record.conflict_type.value] = by_type.get(record.conflict_type.value, 0) + 1
            by_severity[record.severity.value] += 1
            if record.resolved:
                by_resolution[record.resolution] = by_resolution.get(record.resolution, 0) + 1

        unresolved = len(self.unresolved())
        return LedgerSummary(
            total=len(self._records),
            high_severity=len(self.high_severity()),
            unresolved=unresolved,
            resolved=len(self._records) - unresolved,
            by_type=by_type,
            by_severity=by_severity,
            by_resolution=by_resolution,
        )

    def of_type(self, conflict_type: ConflictType) -> List[ConflictRecord]:
        conflict_type = ConflictType(conflict_type)
        return [r for r in self._records if r.conflict_type == conflict_type]

    def records_as_dicts(self) -> List[Dict[str, Any]]:
        """Per-record presentation payload."""
        return [r.to_dict() for r in self._records]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conflicts": self.records_as_dicts(),
            "summary": self.summary().to_dict(),
            "all_resolved": self.is_all_resolved(),
        }
