"""
MongoDB Connection Module (v1.0.0)
Shared client and collection access for the MongoDB-backed stores.
"""
import os
import logging

logger = logging.getLogger(__name__)

# MongoDB configuration
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "clos8")

# Global client
_client = None
_db = None


def connect() -> bool:
    """
    Connect to MongoDB.

    Returns:
        True if connected, False otherwise
    """
    global _client, _db

    try:
        from pymongo import MongoClient
        from pymongo.errors import PyMongoError

        logger.info(f"Connecting to MongoDB: {MONGO_URI[:30]}...")

        _client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=5000)

        # Test connection
        _client.admin.command("ping")

        _db = _client[MONGO_DB_NAME]
        ensure_indexes()

        logger.info(f"✓ Connected to MongoDB database: {MONGO_DB_NAME}")
        return True

    except PyMongoError as e:
        logger.warning(f"MongoDB connection failed: {e}")
        _client = None
        _db = None
        return False


def ensure_indexes() -> None:
    """Create the indexes the stores rely on."""
    if _db is None:
        return

    from pymongo import ASCENDING

    _db["clothing_items"].create_index([("owner_id", ASCENDING), ("type", ASCENDING)])
    _db["clothing_items"].create_index("item_id", unique=True)
    # One outfit per (owner, day)
    _db["outfits"].create_index([("owner_id", ASCENDING), ("day", ASCENDING)], unique=True)
    _db["api_credentials"].create_index("owner_id", unique=True)
    _db["kv_store"].create_index("key", unique=True)


def get_collection(name: str):
    """Get a MongoDB collection, or None if MongoDB is unreachable."""
    if _db is None:
        connect()

    if _db is None:
        return None

    return _db[name]


def require_collection(name: str):
    """
    Get a MongoDB collection.

    Raises:
        RuntimeError: If MongoDB is unreachable
    """
    collection = get_collection(name)
    if collection is None:
        raise RuntimeError("MongoDB not available")
    return collection


def health_check() -> dict:
    """Check MongoDB connection health."""
    try:
        if _client is None:
            connect()

        if _client:
            _client.admin.command("ping")
            return {"status": "connected", "uri": MONGO_URI[:30] + "..."}
        else:
            return {"status": "disconnected", "reason": "client not initialized"}

    except Exception as e:
        return {"status": "disconnected", "reason": str(e)}
