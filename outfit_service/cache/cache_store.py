"""
Cache Store (v1.0.0)
Key-value backends for the suggestion cache: memory, disk JSON, MongoDB.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Narrow key-value interface the suggestion cache persists through."""

    kind = "abstract"

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store; contents are lost on restart."""

    kind = "memory"

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class DiskKeyValueStore(KeyValueStore):
    """Disk-based store using one JSON file per key."""

    kind = "disk_json"

    def __init__(self, cache_dir: Optional[str] = None):
        """
        Args:
            cache_dir: Directory for cache files (default: outfit_service/data/cache)
        """
        if cache_dir is None:
            module_dir = Path(__file__).parent.parent
            cache_dir = module_dir / "data" / "cache"

        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in key)
        return self.cache_dir / f"{safe}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._get_path(key)
        if not path.exists():
            return None

        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        path = self._get_path(key)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(value, f, indent=2)

    def delete(self, key: str) -> None:
        path = self._get_path(key)
        if path.exists():
            path.unlink()


class MongoKeyValueStore(KeyValueStore):
    """Store backed by a MongoDB collection of {key, value} documents."""

    kind = "mongo"

    def __init__(self, collection_name: str = "kv_store"):
        self.collection_name = collection_name

    def _collection(self):
        from outfit_service.db import mongo
        return mongo.get_collection(self.collection_name)

    def get(self, key: str) -> Optional[Any]:
        collection = self._collection()
        if collection is None:
            return None

        doc = collection.find_one({"key": key}, {"_id": 0})
        return doc.get("value") if doc else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        collection = self._collection()
        if collection is None:
            return

        collection.replace_one({"key": key}, {"key": key, "value": value}, upsert=True)

    def delete(self, key: str) -> None:
        collection = self._collection()
        if collection is None:
            return

        collection.delete_one({"key": key})


def create_store(backend: str, cache_dir: Optional[str] = None) -> KeyValueStore:
    """Build a key-value store for a configured backend name."""
    if backend == "disk":
        return DiskKeyValueStore(cache_dir)
    if backend == "mongo":
        return MongoKeyValueStore()
    if backend != "memory":
        logger.warning(f"Unknown cache backend '{backend}', using memory")
    return MemoryKeyValueStore()
