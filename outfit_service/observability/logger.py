"""
Generation Logger (v1.0.0)
Structured JSON-lines log of plan generation runs.
"""
import os
import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional

generation_logger = logging.getLogger("clos8.generation")
generation_logger.setLevel(logging.INFO)

# Prevent propagation to root logger
generation_logger.propagate = False


def is_logging_enabled() -> bool:
    """Check if generation logging is enabled."""
    return os.getenv("CLOS8_LOGGING_ENABLED", "true").lower() == "true"


def _ensure_handler() -> None:
    """Attach the file handler on first use."""
    if generation_logger.handlers:
        return

    logs_dir = Path(os.getenv("CLOS8_LOG_DIR", "logs"))
    logs_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(logs_dir / "generation.log", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    generation_logger.addHandler(file_handler)


def log_generation(
    owner_id: str,
    action: str,
    status: str,
    latency_ms: int,
    days: int = 0,
    fallback_days: int = 0,
    error: Optional[str] = None
):
    """
    Log a structured generation entry.

    Args:
        owner_id: Owner the plan belongs to
        action: weekly or regenerate_day
        status: completed, partially_completed, failed or rejected
        latency_ms: Run latency in milliseconds
        days: Number of days produced
        fallback_days: Days that fell back to a random pairing after an error
        error: Error message if failed
    """
    if not is_logging_enabled():
        return

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "owner_id": owner_id,
        "action": action,
        "status": status,
        "latency_ms": latency_ms,
        "days": days,
        "fallback_days": fallback_days,
    }

    if error:
        entry["error"] = error

    _ensure_handler()
    generation_logger.info(json.dumps(entry))
