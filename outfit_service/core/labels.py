"""
Label Normalizer (v1.0.0)
Maps hex colors and category/subcategory ids to readable labels.
"""
import logging
from typing import Dict, List, Optional

from outfit_service.core.models import Category, Subcategory

logger = logging.getLogger(__name__)


COLOR_NAMES: Dict[str, str] = {
    "#000000": "black",
    "#FFFFFF": "white",
    "#0000FF": "blue",
    "#FF0000": "red",
    "#00FF00": "green",
    "#FFFF00": "yellow",
    "#FFA500": "orange",
    "#800080": "purple",
    "#A52A2A": "brown",
    "#FFC0CB": "pink",
    "#808080": "gray",
    "#F0E68C": "khaki",
}

UNKNOWN = "unknown"


def normalize_hex(value: str) -> str:
    """Uppercase a hex color and expand #RGB shorthand to #RRGGBB."""
    value = value.strip().upper()
    if len(value) == 4:
        value = "#" + "".join(ch * 2 for ch in value[1:])
    return value


def label_for_color(color: Optional[str]) -> str:
    """
    Get a color name for a stored color value.

    Known hex values map to a lowercase name; unknown hex values come back
    normalized (uppercase, '#'-prefixed). Values without a leading '#'
    are treated as names already.
    """
    if not color or not color.strip():
        return UNKNOWN

    if not color.strip().startswith("#"):
        return color.strip().lower()

    normalized = normalize_hex(color)
    return COLOR_NAMES.get(normalized, normalized)


# Built-in reference data, used when the reference store is empty
DEFAULT_CATEGORIES: List[Category] = [
    Category(id="cat-1", name="T-Shirt", type="upper"),
    Category(id="cat-2", name="Shirt", type="upper"),
    Category(id="cat-3", name="Sweater", type="upper"),
    Category(id="cat-4", name="Jeans", type="bottom"),
    Category(id="cat-5", name="Pants", type="bottom"),
    Category(id="cat-6", name="Shorts", type="bottom"),
]

DEFAULT_SUBCATEGORIES: List[Subcategory] = [
    Subcategory(id="subcat-1", name="Plain", category_id="cat-1"),
    Subcategory(id="subcat-2", name="Graphic", category_id="cat-1"),
    Subcategory(id="subcat-3", name="Polo", category_id="cat-2"),
    Subcategory(id="subcat-4", name="Button-up", category_id="cat-2"),
    Subcategory(id="subcat-5", name="Hoodie", category_id="cat-3"),
    Subcategory(id="subcat-6", name="Cardigan", category_id="cat-3"),
    Subcategory(id="subcat-7", name="Slim", category_id="cat-4"),
    Subcategory(id="subcat-8", name="Regular", category_id="cat-4"),
    Subcategory(id="subcat-9", name="Chino", category_id="cat-5"),
    Subcategory(id="subcat-10", name="Dress", category_id="cat-5"),
    Subcategory(id="subcat-11", name="Cargo", category_id="cat-6"),
    Subcategory(id="subcat-12", name="Athletic", category_id="cat-6"),
]


class ReferenceData:
    """Loaded category and subcategory lists with id -> name lookups."""

    def __init__(
        self,
        categories: Optional[List[Category]] = None,
        subcategories: Optional[List[Subcategory]] = None
    ):
        self.categories = list(categories) if categories else list(DEFAULT_CATEGORIES)
        self.subcategories = list(subcategories) if subcategories else list(DEFAULT_SUBCATEGORIES)
        self._category_names = {c.id: c.name for c in self.categories}
        self._subcategory_names = {s.id: s.name for s in self.subcategories}

    @classmethod
    def defaults(cls) -> "ReferenceData":
        return cls(DEFAULT_CATEGORIES, DEFAULT_SUBCATEGORIES)

    def label_for_category(self, category_id: Optional[str]) -> str:
        """Category name, or the id itself when unknown."""
        if category_id is None:
            return UNKNOWN
        return self._category_names.get(category_id, category_id)

    def label_for_subcategory(self, subcategory_id: Optional[str]) -> str:
        """Subcategory name, or the id itself when unknown."""
        if subcategory_id is None:
            return UNKNOWN
        return self._subcategory_names.get(subcategory_id, subcategory_id)

    def category_mapping(self) -> Dict[str, str]:
        return dict(self._category_names)

    def subcategory_mapping(self) -> Dict[str, str]:
        return dict(self._subcategory_names)

    def to_dict(self) -> dict:
        return {
            "categories": [vars(c) for c in self.categories],
            "subcategories": [vars(s) for s in self.subcategories],
        }
