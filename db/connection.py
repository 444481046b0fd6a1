"""
MongoDB connection for the aggregate_paginate server.

Holds one lazily-created motor client per process. Library callers that
already own a collection pass it to ``MotorAggregateExecutor`` directly and
never touch this module.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from config import get_config

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """
    Return the process-wide motor client, creating it on first use.

    Returns:
        AsyncIOMotorClient for the configured URI
    """
    global _client
    if _client is None:
        config = get_config()
        _client = AsyncIOMotorClient(config.mongo_uri, tz_aware=True)
        logger.info(f"MongoDB client created for database: {config.mongo_db}")
    return _client


def get_collection(name: str, database: Optional[str] = None) -> AsyncIOMotorCollection:
    """
    Look up a collection in the configured (or given) database.

    Args:
        name: Collection name
        database: Database name override (default: AGGPAGINATE_MONGO_DB)

    Returns:
        AsyncIOMotorCollection handle (no round trip is made)
    """
    db_name = database or get_config().mongo_db
    return get_client()[db_name][name]


def close_client() -> None:
    """Close and forget the process-wide client."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
