"""
Item Matcher - Pair BOQ items with Drawing items.

Join key is (description_key, category), exact equality. There is no
similarity scoring: an item without an exact counterpart is reported as
missing on the other side instead of being guessed.
"""

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Sequence, Set, Tuple
import logging

from ..models import ItemSource, MatchedPair, NormalizedItem

logger = logging.getLogger(__name__)


@dataclass
class MatchStats:
    """Counts of how the item sets paired up."""
    matched: int = 0
    boq_only: int = 0
    drawing_only: int = 0

    @property
    def total_pairs(self) -> int:
        return self.matched + self.boq_only + self.drawing_only

    @property
    def alignment_score(self) -> float:
        """Share of pairs with both sides present, as a percentage."""
        if self.total_pairs == 0:
            return 100.0
        return self.matched / self.total_pairs * 100

    def to_dict(self) -> dict:
        return {
            "matched": self.matched,
            "boq_only": self.boq_only,
            "drawing_only": self.drawing_only,
            "total_pairs": self.total_pairs,
            "alignment_score": self.alignment_score,
        }


class ItemMatcher:
    """Match normalized BOQ items against normalized Drawing items."""

    def match(
        self,
        boq_items: Sequence[NormalizedItem],
        drawing_items: Sequence[NormalizedItem],
    ) -> List[MatchedPair]:
        """
        Pair every item exactly once.

        Items sharing a join key pair up in input order; surplus items on
        either side become one-sided pairs. Output is BOQ encounter order,
        followed by unmatched Drawing items in Drawing order.
        """
        self._check_sources(boq_items, ItemSource.BOQ)
        self._check_sources(drawing_items, ItemSource.DRAWING)

        # Drawing indices per join key, in input order
        drawing_by_key: Dict[Tuple[str, str], Deque[int]] = defaultdict(deque)
        for idx, d_item in enumerate(drawing_items):
            drawing_by_key[d_item.join_key].append(idx)

        results = []
        drawing_matched: Set[int] = set()

        for b_item in boq_items:
            candidates = drawing_by_key.get(b_item.join_key)
            if candidates:
                idx = candidates.popleft()
                drawing_matched.add(idx)
                results.append(MatchedPair(boq_item=b_item, drawing_item=drawing_items[idx]))
            else:
                # No counterpart - item only in BOQ
                results.append(MatchedPair(boq_item=b_item))

        # Add unmatched drawing items
        for idx, d_item in enumerate(drawing_items):
            if idx not in drawing_matched:
                results.append(MatchedPair(drawing_item=d_item))

        stats = self.stats(results)
        logger.info(
            f"Matched: {stats.matched}, BOQ only: {stats.boq_only}, Drawing only: {stats.drawing_only}"
        )

        return results

    def stats(self, pairs: Sequence[MatchedPair]) -> MatchStats:
        stats = MatchStats()
        for pair in pairs:
            if pair.is_matched:
                stats.matched += 1
            elif pair.boq_item is not None:
                stats.boq_only += 1
            else:
                stats.drawing_only += 1
        return stats

    def _check_sources(self, items: Sequence[NormalizedItem], expected: ItemSource) -> None:
        for item in items:
            if item.source != expected:
                raise ValueError(
                    f"Expected {expected.value} items, got {item.source.value} item '{item.description_key}'"
                )
