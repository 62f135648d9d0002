#!/usr/bin/env python3
"""
MongoDB initialization script for the nutrition cache.

Creates the nutrition_cache collection and its indexes.

Usage:
    python -m nutriscan.scripts.setup_mongodb
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import CollectionInvalid, PyMongoError

from nutriscan.infrastructure.config import get_mongodb_uri
from nutriscan.infrastructure.database.nutrition_cache_mongo import (
    NutritionCacheRepositoryMongo,
)
from nutriscan.infrastructure.logging_config import configure_logging

logger = structlog.get_logger(__name__)

COLLECTION_NAME = NutritionCacheRepositoryMongo.COLLECTION_NAME
EXPECTED_INDEXES = ["unique_food_name_normalized", "idx_times_used"]


def setup_logging() -> None:
    """Configure structlog from LOG_LEVEL and LOG_FORMAT."""
    configure_logging(
        os.getenv("LOG_LEVEL", "INFO"),
        json_logs=os.getenv("LOG_FORMAT", "console").strip().lower() == "json",
    )


async def create_collection(db: AsyncIOMotorDatabase[dict[str, Any]]) -> None:
    """Create the cache collection if missing."""
    try:
        await db.create_collection(COLLECTION_NAME)
        logger.info("Created collection", collection=COLLECTION_NAME)
    except CollectionInvalid:
        logger.info("Collection already exists", collection=COLLECTION_NAME)


async def create_indexes(db: AsyncIOMotorDatabase[dict[str, Any]]) -> None:
    """Create cache indexes."""
    cache = db[COLLECTION_NAME]

    # One entry per normalized food name
    await cache.create_index(
        "food_name_normalized",
        unique=True,
        name="unique_food_name_normalized",
    )
    logger.info("Created index", index="unique_food_name_normalized", unique=True)

    # Most used foods first
    await cache.create_index([("times_used", -1)], name="idx_times_used")
    logger.info("Created index", index="idx_times_used")


async def verify_indexes(db: AsyncIOMotorDatabase[dict[str, Any]]) -> bool:
    """Check every expected index exists."""
    indexes = await db[COLLECTION_NAME].index_information()
    missing = [name for name in EXPECTED_INDEXES if name not in indexes]

    for name in EXPECTED_INDEXES:
        if name in missing:
            logger.error("Index missing", index=name)
        else:
            logger.info("Index present", index=name)

    return not missing


async def main() -> int:
    """Main setup function."""
    mongodb_uri = get_mongodb_uri() or "mongodb://localhost:27017"
    database_name = os.getenv("MONGODB_DATABASE", "nutriscan")

    logger.info("MongoDB setup starting", database=database_name)

    client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(mongodb_uri)
    try:
        db = client[database_name]

        await client.admin.command("ping")
        logger.info("MongoDB connection successful")

        await create_collection(db)
        await create_indexes(db)

        if not await verify_indexes(db):
            logger.error("MongoDB setup incomplete")
            return 1

        logger.info("MongoDB setup completed")
        return 0

    except PyMongoError as e:
        logger.error("Setup failed", error=str(e))
        return 1

    finally:
        client.close()


if __name__ == "__main__":
    setup_logging()
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
