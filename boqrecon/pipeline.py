"""
Reconciliation Pipeline - Normalizer -> Matcher -> Classifier -> Ledger.

ReconciliationEngine.run() is the single synchronous entry point: given the
fully materialized raw BOQ and Drawing item sets it returns a
ReconciliationResult holding a fresh, fully unresolved ledger.

acquire_and_reconcile() is the async boundary: it awaits the upstream
analysis that produces the raw item sets and only then runs the engine.
A timeout or failed acquisition cancels the other source and raises
IncompleteInputs; the engine is never run on a partial item set.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Sequence

from .alignment.classifier import ConflictClassifier
from .alignment.ledger import ResolutionLedger
from .alignment.matcher import ItemMatcher, MatchStats
from .alignment.normalizer import ItemNormalizer
from .config import ReconciliationPolicy
from .errors import IncompleteInputs, MalformedItem
from .models import ItemSource, MatchedPair

logger = logging.getLogger(__name__)

RawItems = Sequence[Mapping[str, Any]]


@dataclass
class ReconciliationResult:
    """Outcome of one reconciliation run."""
    ledger: ResolutionLedger
    pairs: List[MatchedPair] = field(default_factory=list)
    stats: MatchStats = field(default_factory=MatchStats)
    rejected: List[MalformedItem] = field(default_factory=list)
    boq_count: int = 0
    drawing_count: int = 0

    @property
    def has_input_errors(self) -> bool:
        return bool(self.rejected)

    def error_message(self) -> Optional[str]:
        """Single aggregate error for the workflow page, or None when all inputs were usable."""
        if not self.rejected:
            return None
        boq = sum(1 for e in self.rejected if e.source == ItemSource.BOQ.value)
        drawing = len(self.rejected) - boq
        return (
            f"{len(self.rejected)} item record(s) could not be reconciled "
            f"({boq} BOQ, {drawing} Drawing): missing both description and category"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boq_items": self.boq_count,
            "drawing_items": self.drawing_count,
            "match_stats": self.stats.to_dict(),
            "rejected": [e.to_dict() for e in self.rejected],
            "ledger": self.ledger.to_dict(),
        }


class ReconciliationEngine:
    """Run normalization, matching and classification over two item sets."""

    def __init__(self, policy: Optional[ReconciliationPolicy] = None):
        self.policy = policy or ReconciliationPolicy()
        self.normalizer = ItemNormalizer(self.policy.spec_field_names)
        self.matcher = ItemMatcher()
        self.classifier = ConflictClassifier(self.policy)

    def run(self, boq_records: RawItems, drawing_records: RawItems) -> ReconciliationResult:
        # 1. Normalize items; malformed records are skipped and reported
        logger.info(f"Normalizing {len(boq_records)} BOQ and {len(drawing_records)} Drawing records...")
        boq_items, boq_rejected = self.normalizer.normalize_all(boq_records, ItemSource.BOQ)
        drawing_items, drawing_rejected = self.normalizer.normalize_all(drawing_records, ItemSource.DRAWING)

        rejected = boq_rejected + drawing_rejected
        if rejected:
            logger.warning(f"Skipped {len(rejected)} malformed item records")

        # 2. Match BOQ items with Drawing items
        logger.info("Matching BOQ items against Drawing items...")
        pairs = self.matcher.match(boq_items, drawing_items)

        # 3. Classify conflicts
        logger.info("Classifying conflicts...")
        records = self.classifier.classify_all(pairs)

        # 4. Fresh ledger, every record unresolved
        ledger = ResolutionLedger(records, default_resolution=self.policy.default_resolution)
        logger.info(f"Ledger has {len(ledger)} conflicts, {len(ledger.high_severity())} high severity")

        return ReconciliationResult(
            ledger=ledger,
            pairs=pairs,
            stats=self.matcher.stats(pairs),
            rejected=rejected,
            boq_count=len(boq_items),
            drawing_count=len(drawing_items),
        )


def reconcile(
    boq_records: RawItems,
    drawing_records: RawItems,
    policy: Optional[ReconciliationPolicy] = None,
) -> ReconciliationResult:
    """Reconcile raw BOQ and Drawing records."""
    return ReconciliationEngine(policy).run(boq_records, drawing_records)


async def _cancel_pending(tasks: List[asyncio.Future]):
    """Cancel acquisitions still running and wait for them to unwind."""
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


async def acquire_and_reconcile(
    boq_source: Awaitable[RawItems],
    drawing_source: Awaitable[RawItems],
    timeout: Optional[float] = None,
    policy: Optional[ReconciliationPolicy] = None,
) -> ReconciliationResult:
    """
    Await both item sets, then reconcile them.

    When one acquisition fails, times out or is aborted, the other is
    cancelled before IncompleteInputs is raised.

    Args:
        boq_source: Awaitable yielding raw BOQ records
        drawing_source: Awaitable yielding raw Drawing records
        timeout: Seconds to wait for both sets (None waits indefinitely)
        policy: Classification policy

    Raises:
        IncompleteInputs: acquisition timed out, was aborted, failed, or returned no item list
    """
    tasks = [asyncio.ensure_future(boq_source), asyncio.ensure_future(drawing_source)]

    try:
        boq_records, drawing_records = await asyncio.wait_for(
            asyncio.gather(*tasks),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"Item acquisition timed out after {timeout}s")
        raise IncompleteInputs(f"Item acquisition timed out after {timeout}s") from e
    except asyncio.CancelledError as e:
        # Our own cancellation propagates; an aborted source is an input error
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        logger.error("Item acquisition was aborted")
        raise IncompleteInputs("Item acquisition was aborted") from e
    except IncompleteInputs:
        raise
    except Exception as e:
        logger.error(f"Item acquisition failed: {e}")
        raise IncompleteInputs(f"Item acquisition failed: {e}") from e
    finally:
        await _cancel_pending(tasks)

    for name, records in (("BOQ", boq_records), ("Drawing", drawing_records)):
        if (
            records is None
            or isinstance(records, (str, bytes, Mapping))
            or not isinstance(records, Iterable)
        ):
            raise IncompleteInputs(f"{name} acquisition returned no item list")

    return reconcile(list(boq_records), list(drawing_records), policy)
