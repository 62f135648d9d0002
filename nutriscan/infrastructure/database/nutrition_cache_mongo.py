"""
MongoDB implementation of the nutrition cache store.

One document per normalized food name; no TTL, nutrition facts for a
named food are kept indefinitely.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from nutriscan.domain.nutrition.models import CachedNutritionEntry, NutritionRecord
from nutriscan.domain.shared.errors import CacheError, PersistenceWriteError

logger = structlog.get_logger(__name__)


class NutritionCacheRepositoryMongo:
    """
    MongoDB implementation of INutritionCacheStore.

    Storage design:
    - Collection: nutrition_cache
    - Unique index on food_name_normalized (one entry per food)
    - Index on times_used DESC (popular foods)

    Example:
        >>> from motor.motor_asyncio import AsyncIOMotorClient
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017")
        >>> store = NutritionCacheRepositoryMongo(client.nutriscan)
        >>> entry = await store.find("jollof rice")
    """

    COLLECTION_NAME = "nutrition_cache"

    def __init__(self, db: AsyncIOMotorDatabase[Any]):
        """
        Initialize repository with MongoDB database.

        Creates indexes on first use.

        Args:
            db: Motor AsyncIOMotorDatabase instance
        """
        self.db = db
        self.collection = db[self.COLLECTION_NAME]
        self._indexes_created = False

    async def _ensure_indexes(self) -> None:
        """
        Create indexes if not already created.

        Indexes:
        - Unique index on food_name_normalized
        - Index on times_used DESC
        """
        if self._indexes_created:
            return

        await self.collection.create_index(
            "food_name_normalized",
            unique=True,
            name="unique_food_name_normalized",
        )
        await self.collection.create_index(
            [("times_used", -1)],
            name="idx_times_used",
        )

        self._indexes_created = True

    def _from_document(self, doc: dict[str, Any]) -> CachedNutritionEntry:
        """
        Convert MongoDB document to CachedNutritionEntry.

        Args:
            doc: MongoDB document

        Returns:
            CachedNutritionEntry domain model
        """
        return CachedNutritionEntry(
            food_name=doc["food_name"],
            food_name_normalized=doc["food_name_normalized"],
            calories=doc["calories"],
            protein=doc["protein"],
            carbs=doc["carbs"],
            fat=doc["fat"],
            fiber=doc["fiber"],
            data_source=doc["data_source"],
            verified=doc.get("verified", False),
            times_used=doc.get("times_used", 1),
            updated_at=doc.get("updated_at") or datetime.now(timezone.utc),
        )

    async def find(self, normalized_name: str) -> Optional[CachedNutritionEntry]:
        """Retrieve entry by normalized name."""
        try:
            await self._ensure_indexes()
            doc = await self.collection.find_one({"food_name_normalized": normalized_name})
        except PyMongoError as e:
            raise CacheError(f"Cache read failed for '{normalized_name}': {e}") from e

        if doc is None:
            return None

        try:
            return self._from_document(doc)
        except (KeyError, ValueError) as e:
            raise CacheError(f"Invalid cache document for '{normalized_name}': {e}") from e

    async def upsert(self, record: NutritionRecord) -> None:
        """Insert or overwrite the entry and bump its usage counter."""
        try:
            await self._ensure_indexes()
            await self.collection.update_one(
                {"food_name_normalized": record.normalized_name},
                {
                    "$set": {
                        "food_name": record.name,
                        "calories": record.calories,
                        "protein": record.protein,
                        "carbs": record.carbs,
                        "fat": record.fat,
                        "fiber": record.fiber,
                        "data_source": record.source,
                        "verified": False,
                        "updated_at": datetime.now(timezone.utc),
                    },
                    "$inc": {"times_used": 1},
                },
                upsert=True,
            )
        except PyMongoError as e:
            raise PersistenceWriteError(
                f"Cache write failed for '{record.normalized_name}': {e}"
            ) from e

        logger.debug("Cache entry upserted", key=record.normalized_name)

    async def increment_usage(self, normalized_name: str) -> None:
        """Bump the usage counter; missing entries are left alone."""
        try:
            await self.collection.update_one(
                {"food_name_normalized": normalized_name},
                {"$inc": {"times_used": 1}},
            )
        except PyMongoError as e:
            raise PersistenceWriteError(
                f"Usage increment failed for '{normalized_name}': {e}"
            ) from e
