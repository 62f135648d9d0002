"""
Shared fixtures for nutriscan tests.

External collaborators (OpenFoodFacts, MongoDB, vision model) are
replaced with mocks or in-memory implementations.
"""

from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from nutriscan.application.resolution.orchestrator import ResolutionOrchestrator
from nutriscan.domain.knowledge.curated_dishes import CuratedDishKnowledgeBase
from nutriscan.domain.nutrition.models import NutritionRecord, SourceTag
from nutriscan.domain.nutrition.ports import IFoodDatabaseClient
from nutriscan.domain.recognition.models import VisualEstimate
from nutriscan.infrastructure.cache.in_memory_store import InMemoryNutritionCacheStore
from nutriscan.infrastructure.cache.nutrition_cache import NutritionCache


def _make_estimate(**overrides: Any) -> VisualEstimate:
    """Build a VisualEstimate from camelCase fields, with sane defaults."""
    data: dict[str, Any] = {
        "dishName": "Grilled Chicken",
        "ingredients": ["chicken", "oil"],
        "mainIngredients": ["chicken"],
        "calories": 190,
        "protein": 27,
        "carbs": 0,
        "fat": 9,
        "fiber": 0,
        "estimatedWeight": 200,
        "confidence": 80,
    }
    data.update(overrides)
    return VisualEstimate.model_validate(data)


def _make_record(name: str, calories: float = 100, **overrides: Any) -> NutritionRecord:
    """Build a search-style NutritionRecord."""
    data: dict[str, Any] = {
        "name": name,
        "calories": calories,
        "protein": 10,
        "carbs": 10,
        "fat": 5,
        "fiber": 1,
        "source": SourceTag.OPEN_FOOD_FACTS,
    }
    data.update(overrides)
    return NutritionRecord(**data)


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def make_estimate() -> Callable[..., VisualEstimate]:
    """Factory for estimates; keyword overrides use camelCase keys."""
    return _make_estimate


@pytest.fixture
def make_record() -> Callable[..., NutritionRecord]:
    """Factory for search-style records."""
    return _make_record


@pytest.fixture
def jollof_estimate() -> VisualEstimate:
    """Low-confidence read of a curated dish."""
    return _make_estimate(
        dishName="Jollof Rice",
        ingredients=["rice", "tomato", "onion"],
        mainIngredients=["rice", "tomato"],
        calories=210,
        protein=6,
        carbs=38,
        fat=5,
        fiber=2,
        estimatedWeight=300,
        confidence=45,
    )


@pytest.fixture
def coke_estimate() -> VisualEstimate:
    """Packaged product with a readable barcode."""
    return _make_estimate(
        dishName="Coca-Cola",
        ingredients=["water", "sugar"],
        mainIngredients=["water"],
        calories=40,
        protein=0,
        carbs=10,
        fat=0,
        fiber=0,
        estimatedWeight=330,
        confidence=90,
        barcode="5000112637922",
        productBrand="Coca-Cola",
    )


@pytest.fixture
def coke_record() -> NutritionRecord:
    """Barcode lookup result for the Coca-Cola estimate."""
    return NutritionRecord(
        name="Coca-Cola",
        calories=250,
        protein=0,
        carbs=62,
        fat=0,
        fiber=0,
        source=SourceTag.OPEN_FOOD_FACTS_BARCODE,
        product_name="Coca-Cola",
    )


# ═══════════════════════════════════════════════════════════
# COLLABORATOR FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def food_database() -> AsyncMock:
    """Food database client that misses everything unless configured."""
    client = AsyncMock(spec=IFoodDatabaseClient)
    client.lookup_by_barcode.return_value = None
    client.search_by_name.return_value = None
    return client


@pytest.fixture
def store() -> InMemoryNutritionCacheStore:
    return InMemoryNutritionCacheStore()


@pytest.fixture
def cache(store: InMemoryNutritionCacheStore) -> NutritionCache:
    return NutritionCache(store)


@pytest.fixture
def knowledge_base() -> CuratedDishKnowledgeBase:
    return CuratedDishKnowledgeBase()


@pytest.fixture
def orchestrator(
    food_database: AsyncMock,
    cache: NutritionCache,
    knowledge_base: CuratedDishKnowledgeBase,
) -> ResolutionOrchestrator:
    """Orchestrator with mocked food database and in-memory cache."""
    return ResolutionOrchestrator(
        food_database=food_database,
        cache=cache,
        knowledge_base=knowledge_base,
    )
