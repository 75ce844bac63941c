"""
Clos8 Outfit Service v1.0.0
Weekly outfit planning with Gemini suggestions and a cached mock fallback.

API ROUTES:
-----------
- /wardrobe/*              - Wardrobe items and category reference data
- /outfits/*               - Weekly plan, generation, day regeneration
- /suggestions/cache       - Per-owner suggestion cache reset
- /settings/gemini-key     - Owner's Gemini credential
- /health, /metrics        - Health and monitoring
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from outfit_service.app.deps import get_planner
from outfit_service.app.routes import router
from outfit_service.config import get_settings
from outfit_service.db import mongo
from outfit_service.observability import is_logging_enabled

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 50)
    logger.info("Clos8 Outfit Service v1.0.0 Starting...")
    logger.info("=" * 50)

    settings = get_settings()

    uses_mongo = "mongo" in (settings.storage_backend, settings.cache_backend)
    if uses_mongo:
        mongo_connected = mongo.connect()
        logger.info(f"MongoDB: {'connected' if mongo_connected else 'disconnected'}")

    planner = get_planner()
    logger.info(f"Gemini: {'configured' if settings.has_gemini() else 'no default key'}")

    cache_status = planner.caches.get_status()
    logger.info(f"Cache: {'enabled' if cache_status['enabled'] else 'disabled'} ({cache_status['type']})")

    logger.info(f"Logging: {'enabled' if is_logging_enabled() else 'disabled'}")

    logger.info("✓ Service ready! http://localhost:8000")
    logger.info("✓ Metrics available at /metrics")
    logger.info("=" * 50)

    yield

    logger.info("Service shutting down...")


app = FastAPI(
    title="Clos8 Outfit Service",
    description="Weekly outfit planning from your own wardrobe",
    version="1.0.0",
    lifespan=lifespan
)

# ============================================================================
# MIDDLEWARE
# ============================================================================
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

app.include_router(router)
