"""
Suggestion Cache (v1.0.0)

Per-owner, time-bounded cache of suggestions keyed by seed item id.
Avoids repeating external calls for the same item within the TTL.

Storage layout:
---------------
One payload per owner under "suggestion_cache:<owner_id>":

    {
      "<item_id>": {"suggestions": [{...}, ...], "cached_at": <epoch seconds>},
      ...
    }

Guarantees:
-----------
- Entries older than the TTL are treated as absent and dropped on read
- A missing store or corrupt payload behaves as an empty cache
- Owners never see each other's entries
"""
import time
import logging
from typing import Any, Callable, Dict, List, Optional

from outfit_service.cache.cache_store import KeyValueStore, MemoryKeyValueStore
from outfit_service.core.models import Suggestion
from outfit_service.observability import metrics

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 1440  # 24 hours


def cache_key_for_owner(owner_id: str) -> str:
    return f"suggestion_cache:{owner_id}"


class SuggestionCache:
    """Suggestion cache for a single owner."""

    def __init__(
        self,
        owner_id: str,
        store: Optional[KeyValueStore] = None,
        ttl_minutes: int = DEFAULT_TTL_MINUTES,
        clock: Callable[[], float] = time.time
    ):
        self.owner_id = owner_id
        self._store = store
        self._ttl_seconds = ttl_minutes * 60
        self._clock = clock
        self._entries: Optional[Dict[str, Dict[str, Any]]] = None
        self._hits = 0
        self._misses = 0

    @property
    def _key(self) -> str:
        return cache_key_for_owner(self.owner_id)

    def _load(self) -> Dict[str, Dict[str, Any]]:
        """Load entries from the backing store once."""
        if self._entries is not None:
            return self._entries

        self._entries = {}
        if self._store is None:
            return self._entries

        try:
            payload = self._store.get(self._key)
        except Exception as e:
            logger.warning(f"Suggestion cache read error for {self.owner_id}: {e}")
            return self._entries

        if payload is None:
            return self._entries

        if not isinstance(payload, dict):
            logger.warning(f"Corrupt suggestion cache for {self.owner_id}, starting empty")
            return self._entries

        for item_id, entry in payload.items():
            if (
                isinstance(entry, dict)
                and isinstance(entry.get("suggestions"), list)
                and isinstance(entry.get("cached_at"), (int, float))
            ):
                self._entries[item_id] = entry
            else:
                logger.warning(f"Dropping corrupt cache entry {item_id} for {self.owner_id}")

        return self._entries

    def _save(self) -> None:
        if self._store is None:
            return
        try:
            self._store.set(self._key, self._entries or {})
        except Exception as e:
            logger.warning(f"Suggestion cache write error for {self.owner_id}: {e}")

    def _is_expired(self, entry: Dict[str, Any]) -> bool:
        return self._clock() - entry["cached_at"] > self._ttl_seconds

    def get(self, item_id: str) -> Optional[List[Suggestion]]:
        """
        Get cached suggestions for an item.

        Returns None if not found, expired or undecodable.
        """
        entries = self._load()
        entry = entries.get(item_id)

        if entry is None:
            self._misses += 1
            metrics.increment("cache_misses")
            return None

        if self._is_expired(entry):
            del entries[item_id]
            self._save()
            self._misses += 1
            metrics.increment("cache_misses")
            logger.debug(f"Suggestion cache expired: {item_id}")
            return None

        try:
            suggestions = [Suggestion.from_dict(s) for s in entry["suggestions"]]
        except ValueError as e:
            logger.warning(f"Undecodable cache entry {item_id}: {e}")
            del entries[item_id]
            self._save()
            self._misses += 1
            metrics.increment("cache_misses")
            return None

        self._hits += 1
        metrics.increment("cache_hits")
        logger.info(f"Suggestion cache HIT: {item_id}")
        return suggestions

    def put(self, item_id: str, suggestions: List[Suggestion]) -> None:
        """Store suggestions for an item (last write wins)."""
        entries = self._load()
        entries[item_id] = {
            "suggestions": [s.to_dict() for s in suggestions],
            "cached_at": self._clock(),
        }
        self._save()
        logger.info(f"Suggestion cache SET: {item_id} ({len(suggestions)} suggestions)")

    def reset(self) -> None:
        """Clear all entries for this owner, in memory and in the store."""
        self._entries = {}
        if self._store is not None:
            try:
                self._store.delete(self._key)
            except Exception as e:
                logger.warning(f"Suggestion cache delete error for {self.owner_id}: {e}")
        logger.info(f"Suggestion cache reset for {self.owner_id}")

    def __len__(self) -> int:
        return len(self._load())

    def stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            "entries": len(self),
            "hits": self._hits,
            "misses": self._misses,
            "hit_ratio": round(self._hits / total, 3) if total > 0 else 0.0,
            "ttl_minutes": self._ttl_seconds // 60,
        }


class SuggestionCacheManager:
    """Hands out one SuggestionCache per owner over a shared store."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        ttl_minutes: int = DEFAULT_TTL_MINUTES,
        enabled: bool = True,
        clock: Callable[[], float] = time.time
    ):
        self.store = store if store is not None else MemoryKeyValueStore()
        self.ttl_minutes = ttl_minutes
        self.enabled = enabled
        self._clock = clock
        self._caches: Dict[str, SuggestionCache] = {}

    def for_owner(self, owner_id: str) -> SuggestionCache:
        cache = self._caches.get(owner_id)
        if cache is None:
            cache = SuggestionCache(
                owner_id,
                store=self.store,
                ttl_minutes=self.ttl_minutes,
                clock=self._clock,
            )
            self._caches[owner_id] = cache
        return cache

    def reset(self, owner_id: str) -> None:
        self.for_owner(owner_id).reset()

    def get_status(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "type": self.store.kind,
            "ttl_minutes": self.ttl_minutes,
            "owners_loaded": len(self._caches),
        }
