"""
Metrics Module (v1.0.0)
Track suggestion calls, fallbacks, cache performance and plan generation.
"""
import threading
from typing import Dict, Any

COUNTERS = (
    "gemini_calls",
    "gemini_failures",
    "rate_limited",
    "mock_fallbacks",
    "cache_hits",
    "cache_misses",
    "plans_generated",
    "days_regenerated",
    "day_fallbacks",
    "generation_rejected",
    "persistence_failures",
    "credential_failures",
)

# Thread-safe metrics storage
_lock = threading.Lock()
_metrics: Dict[str, int] = {name: 0 for name in COUNTERS}


def increment(name: str, amount: int = 1) -> None:
    """Add `amount` to a counter."""
    with _lock:
        _metrics[name] = _metrics.get(name, 0) + amount


def get_metrics() -> Dict[str, Any]:
    """Get current metrics snapshot."""
    with _lock:
        snapshot = dict(_metrics)

    hits = snapshot["cache_hits"]
    lookups = hits + snapshot["cache_misses"]
    snapshot["cache_hit_ratio"] = round(hits / lookups, 3) if lookups > 0 else 0.0
    return snapshot


def reset_metrics() -> None:
    """Reset all metrics (for testing)."""
    global _metrics
    with _lock:
        _metrics = {name: 0 for name in COUNTERS}
