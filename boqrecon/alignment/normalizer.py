"""
Item Normalizer - Canonicalize raw BOQ and Drawing records.

Raw records arrive from the ingestion layer with its own column spellings
("Item Description", "Qty.", "Unit Price (AED)" ...). The normalizer maps
them onto NormalizedItem so the matcher and classifier compare like with like.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import math
import re

from ..config import DEFAULT_SPEC_FIELDS
from ..errors import MalformedItem
from ..models import ItemSource, NormalizedItem

logger = logging.getLogger(__name__)


# Column name variants seen in exported BOQ sheets and drawing schedules
FIELD_ALIASES = {
    "description": ["description", "item_description", "itemDescription", "Item Description", "Description"],
    "category": ["category", "Category"],
    "quantity": ["quantity", "qty", "Qty.", "Qty", "Quantity"],
    "unit": ["unit", "Unit"],
    "unit_rate": ["unit_rate", "unitRate", "rate", "Unit Price (AED)", "Unit Price", "Rate"],
    "supplier": ["supplier", "Supplier"],
    "location": ["location", "Location"],
    "notes": ["notes", "Notes", "remarks", "Remarks", "specification", "Specification"],
}

BRAND_LABEL_PATTERN = re.compile(r"brand:\s*([^,;.]+)", re.IGNORECASE)
BRAND_EQUIVALENT_PATTERN = re.compile(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s+or\s+equivalent")
DIMENSIONS_PATTERN = re.compile(r"(\d+\.?\d*)\s*x\s*(\d+\.?\d*)\s*(mm|cm|m)?\b", re.IGNORECASE)


def normalize_description(text: str) -> str:
    """Trim, collapse internal whitespace and lower-case."""
    return " ".join(text.split()).lower()


def _snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class ItemNormalizer:
    """Turn raw item records into NormalizedItem values."""

    def __init__(self, spec_field_names: Optional[Sequence[str]] = None):
        if spec_field_names is None:
            spec_field_names = DEFAULT_SPEC_FIELDS
        self.spec_field_names = list(spec_field_names)

    def normalize(
        self,
        record: Mapping[str, Any],
        source: ItemSource,
        index: Optional[int] = None,
    ) -> NormalizedItem:
        """
        Normalize one raw record.

        Raises:
            MalformedItem: record has neither a description nor a category
        """
        source = ItemSource(source)

        if not isinstance(record, Mapping):
            raise MalformedItem(record, source=source.value, index=index)

        description = self._text(record, "description") or ""
        category = self._text(record, "category") or ""

        if not description and not category:
            raise MalformedItem(record, source=source.value, index=index)

        # Category-only records key on the category itself
        description_key = normalize_description(description or category)

        return NormalizedItem(
            description_key=description_key,
            category=category,
            description=" ".join(description.split()),
            quantity=self._number(record, "quantity"),
            unit=self._text(record, "unit"),
            unit_rate=self._number(record, "unit_rate"),
            supplier=self._text(record, "supplier"),
            location=self._text(record, "location"),
            notes=self._text(record, "notes"),
            spec_fields=self._spec_fields(record, description),
            source=source,
        )

    def normalize_all(
        self,
        records: Sequence[Mapping[str, Any]],
        source: ItemSource,
    ) -> Tuple[List[NormalizedItem], List[MalformedItem]]:
        """Normalize a whole item set, collecting malformed records instead of aborting."""
        items = []
        rejected = []

        for idx, record in enumerate(records):
            try:
                items.append(self.normalize(record, source, index=idx))
            except MalformedItem as e:
                logger.warning(f"Skipping {e}")
                rejected.append(e)

        logger.debug(f"Normalized {len(items)} {ItemSource(source).value} items, rejected {len(rejected)}")
        return items, rejected

    def _raw(self, record: Mapping[str, Any], field_name: str) -> Any:
        for alias in FIELD_ALIASES.get(field_name, [field_name]):
            value = record.get(alias)
            if value is not None:
                return value
        return None

    def _text(self, record: Mapping[str, Any], field_name: str) -> Optional[str]:
        value = self._raw(record, field_name)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def _number(self, record: Mapping[str, Any], field_name: str) -> Optional[float]:
        value = self._raw(record, field_name)
        return coerce_number(value)

    def _spec_fields(self, record: Mapping[str, Any], description: str) -> Dict[str, str]:
        """Collect specification attributes, explicit first, then from description text."""
        spec = {}

        for name in self.spec_field_names:
            value = record.get(name)
            if value is None:
                value = record.get(_snake_to_camel(name))
            if value is not None and str(value).strip():
                spec[name] = str(value).strip()

        if "brand" in self.spec_field_names and "brand" not in spec:
            brand = extract_brand(description)
            if brand:
                spec["brand"] = brand

        if "dimensions" in self.spec_field_names and "dimensions" not in spec:
            dimensions = extract_dimensions(description)
            if dimensions:
                spec["dimensions"] = dimensions

        return spec


def coerce_number(value: Any) -> Optional[float]:
    """Numeric value or None. Blank and unparseable values are absent, not errors."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            logger.debug(f"Ignoring non-numeric value {value!r}")
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def extract_brand(text: str) -> Optional[str]:
    """Brand from 'Brand: X' or 'X or equivalent'."""
    if not text:
        return None

    match = BRAND_LABEL_PATTERN.search(text)
    if match:
        return match.group(1).strip()

    match = BRAND_EQUIVALENT_PATTERN.search(text)
    if match:
        return match.group(1).strip()

    return None


def extract_dimensions(text: str) -> Optional[str]:
    """Dimensions like '600x600 mm' as '600x600 mm'."""
    if not text:
        return None

    match = DIMENSIONS_PATTERN.search(text)
    if match:
        unit = (match.group(3) or "mm").lower()
        return f"{match.group(1)}x{match.group(2)} {unit}"

    return None
