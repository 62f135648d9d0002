"""
Ports (Interfaces) for nutrition resolution dependencies.

Defines the interfaces the ResolutionOrchestrator depends on, so that
resolution logic can run against fakes in tests and against
OpenFoodFacts/MongoDB in production.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Optional, Protocol, runtime_checkable

from nutriscan.domain.nutrition.models import CachedNutritionEntry, NutritionRecord


@runtime_checkable
class IFoodDatabaseClient(Protocol):
    """
    Port for an external food database (barcode + free-text search).

    Implementations must never raise: network, timeout and payload
    errors are reported as ``None``.
    """

    async def lookup_by_barcode(self, barcode: str) -> Optional[NutritionRecord]:
        """
        Exact product lookup by barcode.

        Args:
            barcode: EAN/UPC digits

        Returns:
            NutritionRecord on hit, None on miss or failure
        """
        ...

    async def search_by_name(
        self, query: str, brand: Optional[str] = None
    ) -> Optional[NutritionRecord]:
        """
        Free-text search, top-ranked result only.

        Args:
            query: Food or dish name
            brand: Optional brand prefixed to the query

        Returns:
            NutritionRecord named after ``query`` on hit, None otherwise
        """
        ...


@runtime_checkable
class INutritionCacheStore(Protocol):
    """
    Port for the durable store behind the nutrition cache.

    Keyed by normalized food name. Methods may raise on storage failure;
    NutritionCache turns every failure into a miss or a logged no-op.
    """

    async def find(self, normalized_name: str) -> Optional[CachedNutritionEntry]:
        """Read the entry for a normalized name."""
        ...

    async def upsert(self, record: NutritionRecord) -> None:
        """
        Insert or overwrite the entry keyed by ``record.normalized_name``.

        Overwrites macros and provenance and increments the usage
        counter (1 on first write).
        """
        ...

    async def increment_usage(self, normalized_name: str) -> None:
        """Bump the usage counter of an existing entry."""
        ...


@runtime_checkable
class INutritionCache(Protocol):
    """
    Port for the best-effort nutrition cache used by the orchestrator.

    Neither method raises.
    """

    async def get(self, normalized_name: str) -> Optional[NutritionRecord]:
        """Cached record, or None on miss or store failure."""
        ...

    async def put(self, record: NutritionRecord) -> None:
        """Write a record; failures are logged and swallowed."""
        ...
