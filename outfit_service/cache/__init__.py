# Cache module
from outfit_service.cache.cache_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    DiskKeyValueStore,
    MongoKeyValueStore,
    create_store,
)
from outfit_service.cache.suggestion_cache import (
    SuggestionCache,
    SuggestionCacheManager,
    cache_key_for_owner,
)
