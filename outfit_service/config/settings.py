"""
Settings Module (v1.0.0)
Centralized configuration from environment variables.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Settings:
    """Application settings from environment variables."""

    # Gemini
    gemini_api_key: Optional[str] = None
    llm_enabled: bool = True
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 10.0

    # Suggestion source
    rate_limit_per_minute: int = 60
    cooldown_seconds: int = 60
    max_suggestions: int = 3
    mock_delay_ms: int = 0

    # Suggestion cache
    cache_enabled: bool = True
    cache_ttl_minutes: int = 1440  # 24 hours
    cache_backend: str = "memory"
    cache_dir: Optional[str] = None

    # Persistence
    storage_backend: str = "memory"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            llm_enabled=_env_bool("CLOS8_LLM_ENABLED", "true"),
            gemini_model=os.getenv("CLOS8_GEMINI_MODEL", "gemini-1.5-flash"),
            gemini_base_url=os.getenv(
                "CLOS8_GEMINI_BASE_URL",
                "https://generativelanguage.googleapis.com/v1beta"
            ).rstrip("/"),
            gemini_timeout_seconds=float(os.getenv("CLOS8_GEMINI_TIMEOUT_SECONDS", "10")),

            rate_limit_per_minute=int(os.getenv("CLOS8_RATE_LIMIT_PER_MINUTE", "60")),
            cooldown_seconds=int(os.getenv("CLOS8_COOLDOWN_SECONDS", "60")),
            max_suggestions=int(os.getenv("CLOS8_MAX_SUGGESTIONS", "3")),
            mock_delay_ms=int(os.getenv("CLOS8_MOCK_DELAY_MS", "0")),

            cache_enabled=_env_bool("CLOS8_CACHE_ENABLED", "true"),
            cache_ttl_minutes=int(os.getenv("CLOS8_CACHE_TTL_MINUTES", "1440")),
            cache_backend=os.getenv("CLOS8_CACHE_BACKEND", "memory").lower(),
            cache_dir=os.getenv("CLOS8_CACHE_DIR"),

            storage_backend=os.getenv("CLOS8_STORAGE_BACKEND", "memory").lower(),
        )

    def has_gemini(self) -> bool:
        """Check if a service-wide Gemini API key is configured."""
        return bool(self.gemini_api_key)

    def to_dict(self) -> dict:
        """Export settings as dict (without sensitive keys)."""
        return {
            "llm_enabled": self.llm_enabled,
            "gemini_configured": self.has_gemini(),
            "gemini_model": self.gemini_model,
            "rate_limit_per_minute": self.rate_limit_per_minute,
            "cooldown_seconds": self.cooldown_seconds,
            "cache_enabled": self.cache_enabled,
            "cache_ttl_minutes": self.cache_ttl_minutes,
            "cache_backend": self.cache_backend,
            "storage_backend": self.storage_backend,
        }


def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(f"Settings loaded: {_settings.to_dict()}")
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment."""
    global _settings
    _settings = Settings.from_env()
    logger.info(f"Settings reloaded: {_settings.to_dict()}")
    return _settings


# Singleton instance
_settings: Optional[Settings] = None
