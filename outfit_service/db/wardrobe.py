"""
Wardrobe Store (v1.0.0)
Owner-scoped CRUD for clothing items.
"""
import logging
from typing import Dict, List, Optional

from outfit_service.core.errors import ItemNotFoundError, ItemTypeChangeError, WardrobeError
from outfit_service.core.models import ClothingItem, CLOTHING_TYPES, new_id, utc_now_iso
from outfit_service.db import mongo

logger = logging.getLogger(__name__)


def _check_type(clothing_type: str) -> None:
    if clothing_type not in CLOTHING_TYPES:
        raise WardrobeError(
            f"Invalid clothing type: {clothing_type!r}. Allowed: {', '.join(CLOTHING_TYPES)}"
        )


class WardrobeStore:
    """Interface for clothing item persistence."""

    def add_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    def get_items(self, owner_id: str, clothing_type: Optional[str] = None) -> List[ClothingItem]:
        raise NotImplementedError

    def get_item(self, owner_id: str, item_id: str) -> Optional[ClothingItem]:
        raise NotImplementedError

    def replace_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    def delete_item(self, owner_id: str, item_id: str) -> None:
        raise NotImplementedError

    @staticmethod
    def _prepare_new(owner_id: str, item: ClothingItem) -> ClothingItem:
        _check_type(item.type)
        item.item_id = item.item_id or new_id()
        item.owner_id = owner_id
        item.created_at = item.created_at or utc_now_iso()
        return item

    @staticmethod
    def _prepare_replace(owner_id: str, existing: ClothingItem, item: ClothingItem) -> ClothingItem:
        if item.type != existing.type:
            raise ItemTypeChangeError(existing.item_id)
        item.item_id = existing.item_id
        item.owner_id = owner_id
        item.created_at = existing.created_at
        return item


class MemoryWardrobeStore(WardrobeStore):
    """In-process wardrobe, keyed by owner."""

    def __init__(self):
        self._items: Dict[str, Dict[str, ClothingItem]] = {}

    def _owner_items(self, owner_id: str) -> Dict[str, ClothingItem]:
        return self._items.setdefault(owner_id, {})

    def add_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        item = self._prepare_new(owner_id, item)
        self._owner_items(owner_id)[item.item_id] = item
        logger.info(f"Wardrobe item created: {item.item_id} ({item.type})")
        return item

    def get_items(self, owner_id: str, clothing_type: Optional[str] = None) -> List[ClothingItem]:
        items = list(self._owner_items(owner_id).values())
        if clothing_type:
            items = [i for i in items if i.type == clothing_type]
        return items

    def get_item(self, owner_id: str, item_id: str) -> Optional[ClothingItem]:
        return self._owner_items(owner_id).get(item_id)

    def replace_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        existing = self.get_item(owner_id, item.item_id)
        if existing is None:
            raise ItemNotFoundError(item.item_id)
        item = self._prepare_replace(owner_id, existing, item)
        self._owner_items(owner_id)[item.item_id] = item
        return item

    def delete_item(self, owner_id: str, item_id: str) -> None:
        if self._owner_items(owner_id).pop(item_id, None) is None:
            raise ItemNotFoundError(item_id)
        logger.info(f"Wardrobe item deleted: {item_id}")


class MongoWardrobeStore(WardrobeStore):
    """Clothing items in the `clothing_items` collection."""

    collection_name = "clothing_items"

    def _collection(self):
        return mongo.require_collection(self.collection_name)

    def add_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        item = self._prepare_new(owner_id, item)
        self._collection().insert_one(item.to_dict())
        logger.info(f"Wardrobe item created: {item.item_id} ({item.type})")
        return item

    def get_items(self, owner_id: str, clothing_type: Optional[str] = None) -> List[ClothingItem]:
        query = {"owner_id": owner_id}
        if clothing_type:
            query["type"] = clothing_type

        cursor = self._collection().find(query, {"_id": 0}).sort("created_at", 1)
        return [ClothingItem.from_dict(doc) for doc in cursor]

    def get_item(self, owner_id: str, item_id: str) -> Optional[ClothingItem]:
        doc = self._collection().find_one({"owner_id": owner_id, "item_id": item_id}, {"_id": 0})
        return ClothingItem.from_dict(doc) if doc else None

    def replace_item(self, owner_id: str, item: ClothingItem) -> ClothingItem:
        existing = self.get_item(owner_id, item.item_id)
        if existing is None:
            raise ItemNotFoundError(item.item_id)
        item = self._prepare_replace(owner_id, existing, item)
        self._collection().replace_one(
            {"owner_id": owner_id, "item_id": item.item_id},
            item.to_dict()
        )
        return item

    def delete_item(self, owner_id: str, item_id: str) -> None:
        result = self._collection().delete_one({"owner_id": owner_id, "item_id": item_id})
        if result.deleted_count == 0:
            raise ItemNotFoundError(item_id)
        logger.info(f"Wardrobe item deleted: {item_id}")
