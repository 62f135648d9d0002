"""
Nutrition cache.

Best-effort cache of resolved nutrition records in front of the
external food database. Store failures never reach the caller: a
failed read is a miss and a failed write is logged and dropped.
"""

import asyncio
from typing import Optional, Set

import structlog

from nutriscan.domain.nutrition.models import NutritionRecord
from nutriscan.domain.nutrition.ports import INutritionCacheStore

logger = structlog.get_logger(__name__)


class NutritionCache:
    """
    Read/write-through cache over an INutritionCacheStore.

    Example:
        >>> cache = NutritionCache(InMemoryNutritionCacheStore())
        >>> await cache.put(record)
        >>> cached = await cache.get("jollof rice")
    """

    def __init__(self, store: INutritionCacheStore) -> None:
        """Initialize cache.

        Args:
            store: Durable store implementation
        """
        self.store = store
        self._pending: Set["asyncio.Task[None]"] = set()

    async def get(self, normalized_name: str) -> Optional[NutritionRecord]:
        """Get cached record by normalized name.

        On hit the usage counter is bumped in the background; that
        increment is not awaited and its failure does not affect the read.

        Args:
            normalized_name: Lookup key (see normalize())

        Returns:
            Cached record or None on miss or store failure
        """
        try:
            entry = await self.store.find(normalized_name)
            record = entry.to_record() if entry is not None else None
        except Exception as e:
            logger.warning(
                "Cache lookup failed",
                key=normalized_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if record is None:
            logger.debug("Cache miss", key=normalized_name)
            return None

        logger.debug("Cache hit", key=normalized_name, source=record.source)
        self._schedule_increment(normalized_name)
        return record

    async def put(self, record: NutritionRecord) -> None:
        """Cache a resolved record, keyed by its normalized name.

        Args:
            record: Record to store
        """
        try:
            await self.store.upsert(record)
        except Exception as e:
            logger.warning(
                "Cache write failed",
                key=record.normalized_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        logger.debug("Cached record", key=record.normalized_name, source=record.source)

    async def drain(self) -> None:
        """Wait for background counter increments to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule_increment(self, normalized_name: str) -> None:
        task = asyncio.ensure_future(self._increment(normalized_name))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _increment(self, normalized_name: str) -> None:
        try:
            await self.store.increment_usage(normalized_name)
        except Exception as e:
            logger.warning("Cache usage increment failed", key=normalized_name, error=str(e))
