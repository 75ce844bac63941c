"""
Reference Data Store (v1.0.0)
Category/subcategory lists, with the built-in set as fallback.
"""
import logging
from typing import Optional

from outfit_service.core.labels import ReferenceData
from outfit_service.core.models import Category, Subcategory
from outfit_service.db import mongo

logger = logging.getLogger(__name__)


class ReferenceStore:
    """Loads reference data; never fails."""

    def __init__(self, data: Optional[ReferenceData] = None):
        self._data = data

    def load(self) -> ReferenceData:
        if self._data is None:
            self._data = ReferenceData.defaults()
        return self._data


class MongoReferenceStore(ReferenceStore):
    """Reads `clothing_categories` and `clothing_subcategories` once."""

    def load(self) -> ReferenceData:
        if self._data is not None:
            return self._data

        try:
            categories_col = mongo.get_collection("clothing_categories")
            subcategories_col = mongo.get_collection("clothing_subcategories")

            if categories_col is None or subcategories_col is None:
                logger.warning("MongoDB not available - using default categories")
                self._data = ReferenceData.defaults()
                return self._data

            categories = [
                Category(id=doc["id"], name=doc["name"], type=doc.get("type"))
                for doc in categories_col.find({}, {"_id": 0})
            ]
            subcategories = [
                Subcategory(id=doc["id"], name=doc["name"], category_id=doc.get("category_id"))
                for doc in subcategories_col.find({}, {"_id": 0})
            ]

        except Exception as e:
            logger.warning(f"Failed to load reference data, using defaults: {e}")
            self._data = ReferenceData.defaults()
            return self._data

        if not categories:
            logger.info("No categories stored - using defaults")

        self._data = ReferenceData(categories, subcategories)
        logger.info(
            f"Reference data loaded: {len(self._data.categories)} categories, "
            f"{len(self._data.subcategories)} subcategories"
        )
        return self._data
