"""
Domain Models (v1.0.0)
Clothing items, suggestions, outfits and the weekly plan view.
"""
import uuid
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Any, Optional, List

UPPER = "upper"
BOTTOM = "bottom"
CLOTHING_TYPES = (UPPER, BOTTOM)

DAYS_OF_WEEK = [
    "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday",
]

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def _text(value: Any, default: str = "") -> str:
    """Stored fields may come back as numbers or null."""
    return default if value is None else str(value)


def opposite_type(clothing_type: str) -> str:
    """upper <-> bottom."""
    return BOTTOM if clothing_type == UPPER else UPPER


@dataclass
class ClothingItem:
    """A garment in a user's wardrobe."""
    item_id: str
    type: str  # upper | bottom
    category_id: str
    subcategory_id: str
    color: str  # hex string, e.g. "#FFFFFF"
    image_url: str = ""
    name: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClothingItem":
        return cls(
            item_id=_text(data["item_id"]),
            type=_text(data["type"]).lower(),
            category_id=_text(data.get("category_id")),
            subcategory_id=_text(data.get("subcategory_id")),
            color=_text(data.get("color")),
            image_url=_text(data.get("image_url")),
            name=data.get("name"),
            owner_id=data.get("owner_id"),
            created_at=data.get("created_at") or utc_now_iso(),
        )


@dataclass
class Category:
    id: str
    name: str
    type: Optional[str] = None


@dataclass
class Subcategory:
    id: str
    name: str
    category_id: Optional[str] = None


@dataclass
class Suggestion:
    """
    Description of a garment that would complement a seed item.

    Never persisted except in the suggestion cache's serialized form.
    """
    type: str
    category: str
    subcategory: Optional[str] = None
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "category": self.category,
            "subcategory": self.subcategory,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suggestion":
        """
        Build a Suggestion from a dict.

        Raises:
            ValueError: If type or category is missing or not a string
        """
        if not isinstance(data, dict):
            raise ValueError(f"Suggestion must be an object, got {type(data).__name__}")

        suggestion_type = data.get("type")
        category = data.get("category")
        if not isinstance(suggestion_type, str) or not isinstance(category, str):
            raise ValueError("Suggestion requires string 'type' and 'category'")

        subcategory = data.get("subcategory")
        color = data.get("color")
        return cls(
            type=suggestion_type,
            category=category,
            subcategory=subcategory if isinstance(subcategory, str) else None,
            color=color if isinstance(color, str) else None,
        )


@dataclass
class Outfit:
    """One day's pairing of an upper and a bottom item."""
    upper: ClothingItem
    bottom: ClothingItem
    day: str
    owner_id: Optional[str] = None
    outfit_id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outfit_id": self.outfit_id,
            "upper": self.upper.to_dict(),
            "bottom": self.bottom.to_dict(),
            "day": self.day,
            "owner_id": self.owner_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Outfit":
        return cls(
            outfit_id=data["outfit_id"],
            upper=ClothingItem.from_dict(data["upper"]),
            bottom=ClothingItem.from_dict(data["bottom"]),
            day=_text(data["day"]).strip().lower(),
            owner_id=data.get("owner_id"),
            created_at=data.get("created_at") or utc_now_iso(),
        )


class WeeklyPlan:
    """
    Up to seven outfits for one owner, keyed by day.

    A derived view over the outfit store, not a stored entity.
    """

    def __init__(self, outfits: Optional[List[Outfit]] = None):
        self._outfits: List[Outfit] = []
        for outfit in outfits or []:
            if outfit.day not in DAYS_OF_WEEK:
                logger.warning(f"Skipping outfit {outfit.outfit_id}: unknown day {outfit.day!r}")
                continue
            self.merge(outfit)

    def get(self, day: str) -> Optional[Outfit]:
        day = day.lower()
        for outfit in self._outfits:
            if outfit.day == day:
                return outfit
        return None

    def merge(self, outfit: Outfit) -> None:
        """Replace any entry for the outfit's day with the outfit."""
        self._outfits = [o for o in self._outfits if o.day != outfit.day]
        self._outfits.append(outfit)

    def outfits(self) -> List[Outfit]:
        """Outfits ordered monday..sunday."""
        return sorted(self._outfits, key=lambda o: DAYS_OF_WEEK.index(o.day))

    def days(self) -> List[str]:
        return [o.day for o in self.outfits()]

    def is_complete(self) -> bool:
        return len(self._outfits) == len(DAYS_OF_WEEK)

    def __len__(self) -> int:
        return len(self._outfits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outfits": [o.to_dict() for o in self.outfits()],
            "days": self.days(),
            "complete": self.is_complete(),
        }


@dataclass
class Notice:
    """Toast-style notification for the UI path."""
    title: str
    description: str
    variant: str = "default"  # default | info | warning | destructive

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
