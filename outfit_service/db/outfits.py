"""
Outfit Store (v1.0.0)
Owner-scoped outfit persistence with one outfit per (owner, day).

replace_week swaps a whole plan in one step: readers see either the old
plan or the new one, never an empty week in between.
"""
import copy
import logging
from typing import Dict, List, Optional

from outfit_service.core.models import Outfit
from outfit_service.db import mongo

logger = logging.getLogger(__name__)


class OutfitStore:
    """Interface for outfit persistence."""

    def list_outfits(self, owner_id: str) -> List[Outfit]:
        raise NotImplementedError

    def get_outfit(self, owner_id: str, day: str) -> Optional[Outfit]:
        raise NotImplementedError

    def replace_week(self, owner_id: str, outfits: List[Outfit]) -> None:
        """Make `outfits` the owner's whole plan."""
        raise NotImplementedError

    def replace_day(self, owner_id: str, outfit: Outfit) -> None:
        """Supersede the owner's outfit for outfit.day only."""
        raise NotImplementedError

    def delete_all(self, owner_id: str) -> int:
        raise NotImplementedError


class MemoryOutfitStore(OutfitStore):
    """In-process outfits, keyed by owner then day."""

    def __init__(self):
        self._outfits: Dict[str, Dict[str, Outfit]] = {}

    def list_outfits(self, owner_id: str) -> List[Outfit]:
        return [copy.deepcopy(o) for o in self._outfits.get(owner_id, {}).values()]

    def get_outfit(self, owner_id: str, day: str) -> Optional[Outfit]:
        outfit = self._outfits.get(owner_id, {}).get(day)
        return copy.deepcopy(outfit) if outfit else None

    def replace_week(self, owner_id: str, outfits: List[Outfit]) -> None:
        self._outfits[owner_id] = {o.day: copy.deepcopy(o) for o in outfits}

    def replace_day(self, owner_id: str, outfit: Outfit) -> None:
        self._outfits.setdefault(owner_id, {})[outfit.day] = copy.deepcopy(outfit)

    def delete_all(self, owner_id: str) -> int:
        return len(self._outfits.pop(owner_id, {}))


class MongoOutfitStore(OutfitStore):
    """Outfits in the `outfits` collection (unique index on owner_id + day)."""

    collection_name = "outfits"

    def _collection(self):
        return mongo.require_collection(self.collection_name)

    def list_outfits(self, owner_id: str) -> List[Outfit]:
        cursor = self._collection().find({"owner_id": owner_id}, {"_id": 0})
        return [Outfit.from_dict(doc) for doc in cursor]

    def get_outfit(self, owner_id: str, day: str) -> Optional[Outfit]:
        doc = self._collection().find_one({"owner_id": owner_id, "day": day}, {"_id": 0})
        return Outfit.from_dict(doc) if doc else None

    def replace_week(self, owner_id: str, outfits: List[Outfit]) -> None:
        from pymongo import ReplaceOne, DeleteMany

        days = [o.day for o in outfits]
        operations = [
            ReplaceOne(
                {"owner_id": owner_id, "day": outfit.day},
                {**outfit.to_dict(), "owner_id": owner_id},
                upsert=True
            )
            for outfit in outfits
        ]
        # Days missing from a partial plan are dropped
        operations.append(DeleteMany({"owner_id": owner_id, "day": {"$nin": days}}))

        result = self._collection().bulk_write(operations, ordered=True)
        logger.info(
            f"Weekly plan saved for {owner_id}: "
            f"{result.upserted_count} inserted, {result.modified_count} replaced, "
            f"{result.deleted_count} removed"
        )

    def replace_day(self, owner_id: str, outfit: Outfit) -> None:
        self._collection().replace_one(
            {"owner_id": owner_id, "day": outfit.day},
            {**outfit.to_dict(), "owner_id": owner_id},
            upsert=True
        )
        logger.info(f"Outfit saved for {owner_id}: {outfit.day}")

    def delete_all(self, owner_id: str) -> int:
        result = self._collection().delete_many({"owner_id": owner_id})
        return result.deleted_count
