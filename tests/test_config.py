"""
Tests for settings, wiring and generation logging.
"""
import json
import logging

from outfit_service.app.deps import build_planner
from outfit_service.config import Settings, reload_settings
from outfit_service.observability import log_generation, increment, get_metrics
from outfit_service.observability.logger import generation_logger


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "CLOS8_RATE_LIMIT_PER_MINUTE", "CLOS8_CACHE_BACKEND"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.rate_limit_per_minute == 60
        assert settings.cooldown_seconds == 60
        assert settings.max_suggestions == 3
        assert settings.cache_ttl_minutes == 1440
        assert settings.cache_backend == "memory"
        assert not settings.has_gemini()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        monkeypatch.setenv("CLOS8_LLM_ENABLED", "false")
        monkeypatch.setenv("CLOS8_CACHE_BACKEND", "DISK")
        monkeypatch.setattr("outfit_service.config.settings._settings", None)

        settings = reload_settings()

        assert settings.has_gemini()
        assert settings.llm_enabled is False
        assert settings.cache_backend == "disk"
        assert "secret" not in json.dumps(settings.to_dict())

    def test_build_planner_from_settings(self, tmp_path):
        settings = Settings(
            llm_enabled=False,
            rate_limit_per_minute=5,
            cache_backend="disk",
            cache_dir=str(tmp_path),
        )

        planner = build_planner(settings)

        assert planner.source.rate_limiter.max_calls == 5
        assert planner.caches.get_status()["type"] == "disk_json"
        assert planner.source.llm_enabled is False


class TestObservability:

    def test_counters(self):
        increment("cache_hits")
        increment("cache_misses", 3)
        metrics = get_metrics()
        assert metrics["cache_hits"] == 1
        assert metrics["cache_hit_ratio"] == 0.25

    def test_generation_log_written(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLOS8_LOGGING_ENABLED", "true")
        monkeypatch.setenv("CLOS8_LOG_DIR", str(tmp_path))
        monkeypatch.setattr(generation_logger, "handlers", [])

        log_generation("alice", "weekly", "completed", 12, days=7)
        for handler in generation_logger.handlers:
            handler.flush()
            handler.close()

        entry = json.loads((tmp_path / "generation.log").read_text(encoding="utf-8").strip())
        assert entry["owner_id"] == "alice"
        assert entry["days"] == 7
        assert "error" not in entry

    def test_disabled_logging_writes_nothing(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CLOS8_LOG_DIR", str(tmp_path))
        log_generation("alice", "weekly", "failed", 5, error="boom")
        assert not (tmp_path / "generation.log").exists()
