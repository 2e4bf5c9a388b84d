"""Recipe category normalisation.

Two canonical categories exist. Older recipes may still carry one of the
legacy flavour categories, which are mapped on read and matched by filters.
"""

from typing import Dict, List, Optional

from core.exceptions import ValidationError

PLATS = "plats"
DESSERT = "dessert"
CANONICAL_CATEGORIES = (PLATS, DESSERT)

LEGACY_CATEGORIES: Dict[str, str] = {
    "sweet": DESSERT,
    "sour": PLATS,
    "salty": PLATS,
    "spicy": PLATS,
}


def normalize_category(value: Optional[str]) -> Optional[str]:
    """Map a stored or submitted category to its canonical value.

    Unknown values are returned unchanged (lower-cased) so a read never fails
    on unexpected data; use `parse_category` for input validation.
    """
    if value is None:
        return None
    key = value.strip().lower()
    return LEGACY_CATEGORIES.get(key, key)


def parse_category(value: Optional[str]) -> str:
    """Validate submitted category input and return its canonical value."""
    if not value or not value.strip():
        raise ValidationError("Category is required", field="category")
    category = normalize_category(value)
    if category not in CANONICAL_CATEGORIES:
        raise ValidationError(
            f"Invalid category '{value}'. Must be one of: {', '.join(CANONICAL_CATEGORIES)}",
            field="category",
        )
    return category


def category_synonyms(category: str) -> List[str]:
    """Return every stored value that reads as `category` (used by list filters)."""
    canonical = parse_category(category)
    return [canonical] + [legacy for legacy, target in LEGACY_CATEGORIES.items() if target == canonical]
