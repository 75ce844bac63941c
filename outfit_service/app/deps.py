"""
Service Wiring (v1.0.0)
Builds the planner and its stores from settings.
"""
import logging
from typing import Optional

from outfit_service.cache import SuggestionCacheManager, create_store
from outfit_service.config import get_settings, Settings
from outfit_service.core.planner import OutfitPlanner
from outfit_service.core.rate_limit import RateLimiter
from outfit_service.db import (
    MemoryWardrobeStore,
    MongoWardrobeStore,
    MemoryOutfitStore,
    MongoOutfitStore,
    ReferenceStore,
    MongoReferenceStore,
    CredentialStore,
    MongoCredentialStore,
)
from outfit_service.llm import GeminiClient, SuggestionSource

logger = logging.getLogger(__name__)


def build_planner(settings: Settings) -> OutfitPlanner:
    """Assemble an OutfitPlanner for the configured backends."""
    if settings.storage_backend == "mongo":
        wardrobe = MongoWardrobeStore()
        outfits = MongoOutfitStore()
        reference = MongoReferenceStore()
        credentials = MongoCredentialStore(default_key=settings.gemini_api_key)
    else:
        if settings.storage_backend != "memory":
            logger.warning(f"Unknown storage backend '{settings.storage_backend}', using memory")
        wardrobe = MemoryWardrobeStore()
        outfits = MemoryOutfitStore()
        reference = ReferenceStore()
        credentials = CredentialStore(default_key=settings.gemini_api_key)

    source = SuggestionSource(
        client=GeminiClient(
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout_seconds,
        ),
        rate_limiter=RateLimiter(
            max_calls=settings.rate_limit_per_minute,
            cooldown_seconds=settings.cooldown_seconds,
        ),
        llm_enabled=settings.llm_enabled,
        max_suggestions=settings.max_suggestions,
        mock_delay_ms=settings.mock_delay_ms,
    )

    caches = SuggestionCacheManager(
        store=create_store(settings.cache_backend, settings.cache_dir),
        ttl_minutes=settings.cache_ttl_minutes,
        enabled=settings.cache_enabled,
    )

    logger.info(
        f"Planner ready: storage={settings.storage_backend}, "
        f"cache={settings.cache_backend}, llm={'on' if settings.llm_enabled else 'off'}"
    )
    return OutfitPlanner(wardrobe, outfits, reference, credentials, source, caches)


def get_planner() -> OutfitPlanner:
    """Get the service planner (cached singleton)."""
    global _planner
    if _planner is None:
        _planner = build_planner(get_settings())
    return _planner


def set_planner(planner: Optional[OutfitPlanner]) -> None:
    """Replace the service planner (for testing)."""
    global _planner
    _planner = planner


# Singleton instance
_planner: Optional[OutfitPlanner] = None
