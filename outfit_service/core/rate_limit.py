"""
Rate Limiting Module (v1.0.0)
Sliding window limiter and circuit breaker for external suggestion calls.

State is keyed by credential fingerprint so one key's budget, cool-down
or "model unavailable" flag never affects another.
"""
import time
import hashlib
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from outfit_service.core.errors import RateLimitedError

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60
DEFAULT_MAX_CALLS = 60
DEFAULT_COOLDOWN_SECONDS = 60


def credential_key(api_key: Optional[str]) -> str:
    """Stable, non-reversible key for a credential."""
    if not api_key:
        return "anonymous"
    return "key:" + hashlib.sha256(api_key.encode()).hexdigest()[:16]


class RateLimiter:
    """
    Sliding window rate limiter with cool-down and unavailable flags.

    Usage:
        limiter = RateLimiter(max_calls=60)
        limiter.acquire(key)          # raises RateLimitedError when exhausted
        limiter.start_cooldown(key)   # after an upstream 429
        limiter.mark_unavailable(key) # after an upstream 404
    """

    def __init__(
        self,
        max_calls: int = DEFAULT_MAX_CALLS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        # Structure: {key: [timestamp, ...]}
        self._calls: Dict[str, List[float]] = defaultdict(list)
        self._cooldown_until: Dict[str, float] = {}
        self._unavailable: set = set()

    def _cleanup_old_calls(self, key: str) -> None:
        """Remove calls older than the window."""
        cutoff = self._clock() - self.window_seconds
        self._calls[key] = [ts for ts in self._calls[key] if ts > cutoff]

    def remaining(self, key: str) -> int:
        """Calls left in the current window."""
        self._cleanup_old_calls(key)
        return max(0, self.max_calls - len(self._calls[key]))

    def acquire(self, key: str) -> None:
        """
        Record an external call, or fail fast if the window is full.

        Raises:
            RateLimitedError: If max_calls were already made in the window
        """
        self._cleanup_old_calls(key)
        calls = self._calls[key]

        if len(calls) >= self.max_calls:
            retry_after = self.window_seconds - (self._clock() - calls[0])
            logger.warning(f"Suggestion rate limit reached for {key} ({len(calls)}/{self.max_calls})")
            raise RateLimitedError(
                f"Rate limit exceeded. Try again in {int(retry_after)}s",
                retry_after=retry_after
            )

        calls.append(self._clock())

    # ==================== COOL-DOWN ====================

    def start_cooldown(self, key: str, seconds: Optional[float] = None) -> None:
        """
        Skip external calls for at least cooldown_seconds.

        A longer `seconds` (e.g. from Retry-After) extends the window; a shorter one is ignored.
        """
        duration = max(self.cooldown_seconds, seconds or 0)
        self._cooldown_until[key] = self._clock() + duration
        logger.warning(f"Suggestion cool-down started for {key}: {duration:.0f}s")

    def cooldown_remaining(self, key: str) -> float:
        until = self._cooldown_until.get(key)
        if until is None:
            return 0.0
        remaining = until - self._clock()
        if remaining <= 0:
            del self._cooldown_until[key]
            return 0.0
        return remaining

    def in_cooldown(self, key: str) -> bool:
        return self.cooldown_remaining(key) > 0

    # ==================== MODEL UNAVAILABLE ====================

    def mark_unavailable(self, key: str) -> bool:
        """
        Route this credential to the mock until cleared.

        Returns:
            True if the flag was newly set
        """
        if key in self._unavailable:
            return False
        self._unavailable.add(key)
        logger.warning(f"Suggestion model marked unavailable for {key}")
        return True

    def is_unavailable(self, key: str) -> bool:
        return key in self._unavailable

    def clear_unavailable(self, key: str) -> None:
        if key in self._unavailable:
            self._unavailable.discard(key)
            logger.info(f"Suggestion model availability reset for {key}")

    def reset(self) -> None:
        """Clear all state (for testing)."""
        self._calls.clear()
        self._cooldown_until.clear()
        self._unavailable.clear()

    def get_status(self, key: str) -> dict:
        return {
            "limit": self.max_calls,
            "window_seconds": self.window_seconds,
            "remaining": self.remaining(key),
            "cooldown_remaining": round(self.cooldown_remaining(key), 1),
            "model_unavailable": self.is_unavailable(key),
        }
