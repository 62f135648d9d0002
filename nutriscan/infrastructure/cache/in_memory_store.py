"""
In-memory nutrition cache store.

Process-local implementation of INutritionCacheStore for development
and tests. Entries live as long as the process; there is no expiry.
"""

from typing import Dict, Optional

from nutriscan.domain.nutrition.models import CachedNutritionEntry, NutritionRecord


class InMemoryNutritionCacheStore:
    """Dict-backed store keyed by normalized food name."""

    def __init__(self) -> None:
        self._entries: Dict[str, CachedNutritionEntry] = {}

    async def find(self, normalized_name: str) -> Optional[CachedNutritionEntry]:
        return self._entries.get(normalized_name)

    async def upsert(self, record: NutritionRecord) -> None:
        existing = self._entries.get(record.normalized_name)
        times_used = existing.times_used + 1 if existing else 1
        self._entries[record.normalized_name] = CachedNutritionEntry.from_record(
            record, times_used=times_used
        )

    async def increment_usage(self, normalized_name: str) -> None:
        entry = self._entries.get(normalized_name)
        if entry is None:
            return
        self._entries[normalized_name] = entry.model_copy(
            update={"times_used": entry.times_used + 1}
        )

    def size(self) -> int:
        """Number of cached entries."""
        return len(self._entries)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
