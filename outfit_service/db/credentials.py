"""
Credential Store (v1.0.0)
Per-owner Gemini API key, falling back to the service-wide key.
"""
import logging
from typing import Dict, Optional

from outfit_service.db import mongo

logger = logging.getLogger(__name__)


class CredentialStore:
    """In-process credential store."""

    def __init__(self, default_key: Optional[str] = None):
        self.default_key = default_key
        self._keys: Dict[str, str] = {}

    def _get_own(self, owner_id: str) -> Optional[str]:
        return self._keys.get(owner_id)

    def get_key(self, owner_id: str) -> Optional[str]:
        """Owner's key, else the default key."""
        return self._get_own(owner_id) or self.default_key

    def has_own_key(self, owner_id: str) -> bool:
        return bool(self._get_own(owner_id))

    def set_key(self, owner_id: str, api_key: str) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("API key must not be empty")
        self._keys[owner_id] = api_key.strip()
        logger.info(f"Gemini key set for {owner_id}")

    def clear_key(self, owner_id: str) -> None:
        self._keys.pop(owner_id, None)
        logger.info(f"Gemini key cleared for {owner_id}")


class MongoCredentialStore(CredentialStore):
    """Credentials in the `api_credentials` collection."""

    collection_name = "api_credentials"

    def _get_own(self, owner_id: str) -> Optional[str]:
        collection = mongo.get_collection(self.collection_name)
        if collection is None:
            return None

        doc = collection.find_one({"owner_id": owner_id}, {"_id": 0})
        return doc.get("api_key") if doc else None

    def set_key(self, owner_id: str, api_key: str) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("API key must not be empty")

        collection = mongo.require_collection(self.collection_name)
        collection.replace_one(
            {"owner_id": owner_id},
            {"owner_id": owner_id, "api_key": api_key.strip()},
            upsert=True
        )
        logger.info(f"Gemini key set for {owner_id}")

    def clear_key(self, owner_id: str) -> None:
        collection = mongo.require_collection(self.collection_name)
        collection.delete_one({"owner_id": owner_id})
        logger.info(f"Gemini key cleared for {owner_id}")
