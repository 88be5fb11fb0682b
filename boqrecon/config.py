"""
Reconciliation Policy - YAML Configuration Layer

Lets the reviewer tune how conflicts are classified without code changes:
1. Quantity severity threshold (relative difference)
2. Life-safety keywords and categories that raise specification severity
3. Which specification attributes are compared
4. Optional location mismatch detection
5. Default disposition for bulk "Resolve All"
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import Severity

logger = logging.getLogger(__name__)

POLICY_FILENAME = "reconciliation_policy.yaml"


# =============================================================================
# DEFAULT POLICY TEMPLATE
# =============================================================================

DEFAULT_POLICY_YAML = """
# BOQ vs Drawings Reconciliation Policy
# Edit this file to tune conflict classification, then re-run reconciliation.

# Project Information
project:
  name: "{project_id}"

# Quantity mismatches at or above this relative difference are HIGH severity,
# smaller ones MEDIUM. Relative difference = |boq - drawing| / max(boq, drawing)
quantity_high_threshold: 0.10

# Specification mismatches are LOW severity unless the item is life-safety
# relevant, in which case they are MEDIUM.
life_safety:
  keywords:
    - fire
    - fire-rated
    - fire rated
    - smoke
    - sprinkler
    - emergency
    - egress
    - intumescent
  categories:
    - Fire Protection
    - Life Safety

# Specification attributes compared between BOQ and Drawing
spec_fields:
  - brand
  - dimensions
  - fire_rating
  - finish
  - grade

# Location comparison (off by default)
location:
  detect_mismatch: false
  severity: low

# Disposition applied by "Resolve All"
default_resolution: accept_boq
"""

DEFAULT_LIFE_SAFETY_KEYWORDS = [
    "fire",
    "fire-rated",
    "fire rated",
    "smoke",
    "sprinkler",
    "emergency",
    "egress",
    "intumescent",
]

DEFAULT_LIFE_SAFETY_CATEGORIES = ["Fire Protection", "Life Safety"]

DEFAULT_SPEC_FIELDS = ["brand", "dimensions", "fire_rating", "finish", "grade"]


@dataclass
class ReconciliationPolicy:
    """Classification policy, loadable from YAML."""
    project_name: str = ""
    quantity_high_threshold: float = 0.10
    life_safety_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_LIFE_SAFETY_KEYWORDS))
    life_safety_categories: List[str] = field(default_factory=lambda: list(DEFAULT_LIFE_SAFETY_CATEGORIES))
    spec_field_names: List[str] = field(default_factory=lambda: list(DEFAULT_SPEC_FIELDS))
    detect_location_mismatch: bool = False
    location_mismatch_severity: Severity = Severity.LOW
    default_resolution: str = "accept_boq"

    # Source tracking
    yaml_path: Optional[Path] = None
    loaded_from_file: bool = False

    def __post_init__(self):
        if not 0.0 <= self.quantity_high_threshold <= 1.0:
            raise ValueError(
                f"quantity_high_threshold must be between 0 and 1, got {self.quantity_high_threshold}"
            )
        if not self.default_resolution:
            raise ValueError("default_resolution cannot be empty")
        self.location_mismatch_severity = Severity(self.location_mismatch_severity)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReconciliationPolicy":
        project = data.get("project") or {}
        life_safety = data.get("life_safety") or {}
        location = data.get("location") or {}

        return cls(
            project_name=project.get("name", ""),
            quantity_high_threshold=float(data.get("quantity_high_threshold", 0.10)),
            life_safety_keywords=life_safety.get("keywords") or list(DEFAULT_LIFE_SAFETY_KEYWORDS),
            life_safety_categories=life_safety.get("categories") or list(DEFAULT_LIFE_SAFETY_CATEGORIES),
            spec_field_names=data.get("spec_fields") or list(DEFAULT_SPEC_FIELDS),
            detect_location_mismatch=bool(location.get("detect_mismatch", False)),
            location_mismatch_severity=location.get("severity", Severity.LOW.value),
            default_resolution=data.get("default_resolution") or "accept_boq",
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "ReconciliationPolicy":
        """Load policy from YAML file, falling back to defaults."""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            logger.info(f"No reconciliation policy file at {yaml_path}, using defaults")
            return cls()

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f) or {}

            policy = cls.from_dict(data)
            policy.yaml_path = yaml_path
            policy.loaded_from_file = True

            logger.info(f"Loaded reconciliation policy from {yaml_path}")
            logger.info(f"  - Quantity high threshold: {policy.quantity_high_threshold:.0%}")
            logger.info(f"  - Life-safety keywords: {len(policy.life_safety_keywords)}")
            logger.info(f"  - Location mismatch: {'on' if policy.detect_location_mismatch else 'off'}")

            return policy

        except (OSError, yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading reconciliation policy: {e}")
            return cls()

    def is_life_safety(self, category: str, texts: List[str]) -> bool:
        """True when the category or any text mentions a life-safety concern."""
        if category in self.life_safety_categories:
            return True

        for text in texts:
            text_lower = text.lower()
            for keyword in self.life_safety_keywords:
                if keyword.lower() in text_lower:
                    return True

        return False


def create_default_policy_yaml(output_dir: Path, project_id: str = "") -> Path:
    """Create default reconciliation_policy.yaml in the output directory."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    yaml_path = output_dir / POLICY_FILENAME

    if yaml_path.exists():
        logger.info(f"{POLICY_FILENAME} already exists at {yaml_path}")
        return yaml_path

    content = DEFAULT_POLICY_YAML.format(project_id=project_id)

    with open(yaml_path, "w") as f:
        f.write(content)

    logger.info(f"Created default {POLICY_FILENAME} at {yaml_path}")
    return yaml_path


def load_policy(config_path: Optional[Path] = None) -> ReconciliationPolicy:
    """Load a policy from an explicit path, or return defaults."""
    if config_path is None:
        return ReconciliationPolicy()
    return ReconciliationPolicy.from_yaml(Path(config_path))
