"""
Sample BOQ and Drawing item sets for demonstration.

Running these through the engine yields six conflicts, one of each kind
plus a second quantity mismatch below the high threshold:
- Ceramic Floor Tiles: quantity 200 vs 180 (HIGH)
- Gypsum Board Partition System: fire-rated note on drawing only (MEDIUM)
- Aluminum Window Frames: quantity 45 vs 48 (MEDIUM)
- Paint - Interior Walls: specification note on drawing only (LOW)
- Electrical Conduit & Wiring: drawn but not priced (HIGH)
- Marble Cladding - Lobby: priced but not drawn (MEDIUM)
Ceiling Light Fixtures agree on both sides and raise no conflict.
"""

import copy
from typing import Any, Dict, List, Tuple

SAMPLE_PROJECT_ID = "SAMPLE-001"

SAMPLE_BOQ_ITEMS: List[Dict[str, Any]] = [
    {
        "itemDescription": "Ceramic Floor Tiles - Premium Grade",
        "category": "Flooring",
        "quantity": 200,
        "unit": "sqm",
        "unitRate": 120,
        "supplier": "Al Futtaim Ceramics",
        "location": "Ground Floor",
        "notes": "High traffic area requires premium grade",
    },
    {
        "itemDescription": "Gypsum Board Partition System",
        "category": "Partitioning",
        "quantity": 150,
        "unit": "sqm",
        "unitRate": 85,
        "supplier": "Emirates Gypsum",
        "location": "Level 1-3",
    },
    {
        "itemDescription": "Aluminum Window Frames",
        "category": "Fenestration",
        "quantity": 45,
        "unit": "units",
        "unitRate": 450,
        "supplier": "Gulf Aluminum",
        "location": "Facade",
    },
    {
        "itemDescription": "Paint - Interior Walls",
        "category": "Finishing",
        "quantity": 500,
        "unit": "liters",
        "unitRate": 35,
        "supplier": "Nippon Paint",
        "location": "All Interior",
    },
    {
        "itemDescription": "Marble Cladding - Lobby",
        "category": "Cladding",
        "quantity": 80,
        "unit": "sqm",
        "unitRate": 250,
        "supplier": "Emirates Marble",
        "location": "Lobby Area",
    },
    {
        "itemDescription": "Ceiling Light Fixtures",
        "category": "Lighting",
        "quantity": 120,
        "unit": "nos",
        "unitRate": 60,
        "supplier": "Philips",
        "location": "All Floors",
    },
]

SAMPLE_DRAWING_ITEMS: List[Dict[str, Any]] = [
    {
        "itemDescription": "Ceramic Floor Tiles - Premium Grade",
        "category": "Flooring",
        "quantity": 180,
        "unit": "sqm",
        "location": "Ground Floor - Lobby Area",
        "notes": "High traffic area requires premium grade",
    },
    {
        "itemDescription": "Gypsum Board Partition System",
        "category": "Partitioning",
        "quantity": 150,
        "unit": "sqm",
        "location": "Levels 1-3, Zones A & B",
        "notes": "Fire-rated partition required in Zone A",
    },
    {
        "itemDescription": "Aluminum Window Frames",
        "category": "Fenestration",
        "quantity": 48,
        "unit": "units",
        "location": "Facade - All Elevations",
    },
    {
        "itemDescription": "Paint - Interior Walls",
        "category": "Finishing",
        "location": "All Interior Walls",
        "notes": "Specification: Acrylic emulsion, 2 coats",
    },
    {
        "itemDescription": "Electrical Conduit & Wiring",
        "category": "MEP",
        "quantity": 2000,
        "unit": "meters",
        "location": "All floors - Conduit routing per drawing",
    },
    {
        "itemDescription": "Ceiling Light Fixtures",
        "category": "Lighting",
        "quantity": 120,
        "unit": "nos",
        "location": "All Floors",
    },
]


def sample_items() -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Fresh copies of the sample BOQ and Drawing item sets."""
    return copy.deepcopy(SAMPLE_BOQ_ITEMS), copy.deepcopy(SAMPLE_DRAWING_ITEMS)
