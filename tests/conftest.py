"""
Test configuration - shared raw-record fixtures for the reconciliation engine.
"""

import pytest

from boqrecon.alignment.normalizer import ItemNormalizer
from boqrecon.config import ReconciliationPolicy
from boqrecon.models import ItemSource
from boqrecon.sample_data import sample_items


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def policy():
    return ReconciliationPolicy()


@pytest.fixture
def normalizer():
    return ItemNormalizer()


@pytest.fixture
def make_item(normalizer):
    """Build a NormalizedItem from keyword fields."""
    def _make(source=ItemSource.BOQ, **fields):
        fields.setdefault("description", "Ceramic Floor Tiles")
        fields.setdefault("category", "Flooring")
        return normalizer.normalize(fields, source)
    return _make


@pytest.fixture
def sample_sets():
    """Fresh copies of the sample BOQ and Drawing records."""
    return sample_items()


@pytest.fixture
def six_conflict_records():
    """Raw records yielding six unresolved conflicts, one per distinct item."""
    boq = [
        {"description": f"BOQ only item {i}", "category": "General", "quantity": 10}
        for i in range(3)
    ]
    drawings = [
        {"description": f"Drawing only item {i}", "category": "General", "quantity": 10}
        for i in range(3)
    ]
    return boq, drawings
