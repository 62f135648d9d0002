"""Component factory for the resolution pipeline.

Settings-based selection of the cache store, plus construction of the
OpenFoodFacts client and the orchestrator, and logging setup.

Usage:
    from nutriscan.infrastructure.config import load_settings
    from nutriscan.infrastructure.factory import (
        create_food_database_client,
        create_resolution_orchestrator,
        setup_logging,
    )

    settings = load_settings(".env")
    setup_logging(settings)
    async with create_food_database_client(settings) as off:
        orchestrator = create_resolution_orchestrator(settings, off)
        result = await orchestrator.resolve(estimate)
"""

from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from nutriscan.application.resolution.orchestrator import ResolutionOrchestrator
from nutriscan.domain.knowledge.curated_dishes import CuratedDishKnowledgeBase
from nutriscan.domain.nutrition.ports import IFoodDatabaseClient, INutritionCacheStore
from nutriscan.infrastructure.cache.in_memory_store import InMemoryNutritionCacheStore
from nutriscan.infrastructure.cache.nutrition_cache import NutritionCache
from nutriscan.infrastructure.config import ResolverSettings
from nutriscan.infrastructure.database.nutrition_cache_mongo import (
    NutritionCacheRepositoryMongo,
)
from nutriscan.infrastructure.logging_config import configure_logging
from nutriscan.infrastructure.openfoodfacts.api_client import OpenFoodFactsClient


def setup_logging(settings: ResolverSettings) -> None:
    """Configure structlog from LOG_LEVEL and LOG_FORMAT."""
    configure_logging(settings.log_level, json_logs=settings.log_format == "json")


def create_cache_store(settings: ResolverSettings) -> INutritionCacheStore:
    """Create cache store based on settings.cache_backend.

    Values:
        - "mongodb": MongoDB collection (requires MONGODB_URI)
        - "memory": process-local dict (default)

    Returns:
        INutritionCacheStore: Store instance

    Raises:
        ValueError: If mongodb is selected without a URI
    """
    if settings.cache_backend == "mongodb":
        if not settings.mongodb_uri:
            raise ValueError(
                "NUTRITION_CACHE_BACKEND=mongodb but MONGODB_URI not set. "
                "Set MONGODB_URI in .env or use NUTRITION_CACHE_BACKEND=memory"
            )
        client: AsyncIOMotorClient[Any] = AsyncIOMotorClient(settings.mongodb_uri)
        return NutritionCacheRepositoryMongo(client[settings.mongodb_database])

    return InMemoryNutritionCacheStore()


def create_food_database_client(settings: ResolverSettings) -> OpenFoodFactsClient:
    """Create the OpenFoodFacts client; enter it with ``async with`` before use."""
    return OpenFoodFactsClient(
        timeout_seconds=settings.off_timeout_seconds,
        base_url=settings.off_base_url,
        user_agent=settings.off_user_agent,
    )


def create_resolution_orchestrator(
    settings: ResolverSettings,
    food_database: IFoodDatabaseClient,
    store: Optional[INutritionCacheStore] = None,
) -> ResolutionOrchestrator:
    """Create orchestrator wired to the configured cache store.

    Args:
        settings: Resolver settings
        food_database: External food database client (already entered)
        store: Cache store override; built from settings if None

    Returns:
        ResolutionOrchestrator
    """
    return ResolutionOrchestrator(
        food_database=food_database,
        cache=NutritionCache(store if store is not None else create_cache_store(settings)),
        knowledge_base=CuratedDishKnowledgeBase(),
        low_confidence_threshold=settings.low_confidence_threshold,
        max_ingredient_lookups=settings.max_ingredient_lookups,
    )
