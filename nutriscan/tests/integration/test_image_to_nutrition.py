"""
Integration tests: photo -> vision text -> validated estimate -> nutrition.

Real components throughout (factory, OpenFoodFacts client, in-memory
cache, curated knowledge base); only the HTTP layer is patched.
"""

import json
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nutriscan.application.analysis.service import FoodImageAnalysisService
from nutriscan.domain.recognition.validator import VisionEstimateValidator
from nutriscan.infrastructure.cache.in_memory_store import InMemoryNutritionCacheStore
from nutriscan.infrastructure.config import ResolverSettings
from nutriscan.infrastructure.factory import (
    create_food_database_client,
    create_resolution_orchestrator,
)
from nutriscan.infrastructure.vision.stub_vision_source import StubVisionEstimateSource

SETTINGS = ResolverSettings(off_timeout_seconds=5)


class FakeOpenFoodFacts:
    """Routes patched ClientSession.get calls to canned payloads."""

    def __init__(
        self,
        products: Optional[dict[str, Any]] = None,
        searches: Optional[dict[str, Any]] = None,
    ) -> None:
        self.products = products or {}
        self.searches = searches or {}
        self.urls: list[str] = []

    def __call__(self, url: str, params: Optional[dict[str, Any]] = None, **_: Any) -> MagicMock:
        self.urls.append(url)
        if "/api/v2/product/" in url:
            code = url.rsplit("/", 1)[-1].removesuffix(".json")
            body = self.products.get(code, {"status": 0})
        else:
            terms = (params or {}).get("search_terms", "")
            body = {"count": 0, "products": []}
            if terms in self.searches:
                body = {"count": 1, "products": [self.searches[terms]]}

        response = MagicMock()
        response.status = 200
        response.json = AsyncMock(return_value=body)
        ctx = MagicMock()
        ctx.__aenter__ = AsyncMock(return_value=response)
        ctx.__aexit__ = AsyncMock(return_value=False)
        return ctx


def vision_text(**fields: Any) -> str:
    data: dict[str, Any] = {
        "ingredients": [],
        "mainIngredients": [],
        "protein": 5,
        "carbs": 20,
        "fat": 5,
        "fiber": 1,
        "estimatedWeight": 250,
    }
    data.update(fields)
    return "Here is my analysis:\n```json\n" + json.dumps(data) + "\n```"


async def analyze(raw: str, off: FakeOpenFoodFacts, store: InMemoryNutritionCacheStore) -> Any:
    with patch("aiohttp.ClientSession.get", side_effect=off):
        async with create_food_database_client(SETTINGS) as client:
            orchestrator = create_resolution_orchestrator(SETTINGS, client, store=store)
            service = FoodImageAnalysisService(
                StubVisionEstimateSource(raw), VisionEstimateValidator(), orchestrator
            )
            analysis = await service.analyze(b"\x89PNG")
            await orchestrator.cache.drain()  # type: ignore[attr-defined]
            return analysis


@pytest.fixture
def store() -> InMemoryNutritionCacheStore:
    return InMemoryNutritionCacheStore()


async def test_packaged_drink_resolved_by_barcode(store: InMemoryNutritionCacheStore) -> None:
    off = FakeOpenFoodFacts(
        products={
            "5000112637922": {
                "status": 1,
                "product": {
                    "product_name": "Coca-Cola",
                    "nutriments": {"energy-kcal_100g": 250, "carbohydrates_100g": 62},
                },
            }
        }
    )
    raw = vision_text(
        dishName="Coca-Cola can", calories=40, confidence=95, barcode="5000112637922"
    )

    analysis = await analyze(raw, off, store)

    assert analysis.result.calories == 250
    assert analysis.result.sources == ["Open Food Facts (Barcode)"]
    assert len(off.urls) == 1
    assert await store.find("coca-cola") is not None


async def test_low_confidence_jollof_uses_curated_recipe(
    store: InMemoryNutritionCacheStore,
) -> None:
    off = FakeOpenFoodFacts()
    raw = vision_text(
        dishName="Jollof Rice",
        calories=210,
        confidence=45,
        ingredients=["rice", "tomato", "onion"],
        mainIngredients=["rice", "tomato"],
    )

    analysis = await analyze(raw, off, store)

    assert analysis.result.enriched is True
    assert analysis.result.sources == ["African Dishes Database (typical recipe)"]
    assert analysis.result.calories == 200
    assert analysis.result.ingredients == [
        "rice",
        "tomato",
        "onion",
        "bell pepper",
        "oil",
        "spices",
        "chicken",
    ]
    assert analysis.result.main_ingredients == ["rice", "tomato", "chicken"]
    assert off.urls == []


async def test_unknown_dish_keeps_ai_estimate(store: InMemoryNutritionCacheStore) -> None:
    off = FakeOpenFoodFacts()
    raw = vision_text(dishName="xyz-unknown-dish", calories=321, confidence=30)

    analysis = await analyze(raw, off, store)

    assert analysis.result.enriched is False
    assert analysis.result.sources == ["AI Estimate"]
    assert analysis.result.calories == 321
    assert store.size() == 0


async def test_ingredient_average_then_cache_reuse(store: InMemoryNutritionCacheStore) -> None:
    off = FakeOpenFoodFacts(
        searches={
            "plantain": {"product_name": "Plantain", "nutriments": {"energy-kcal_100g": 122}},
            "beans": {"product_name": "Beans", "nutriments": {"energy-kcal_100g": 347}},
        }
    )
    raw = vision_text(
        dishName="Plantain and beans plate",
        calories=250,
        confidence=85,
        ingredients=["plantain", "beans", "palm oil"],
        mainIngredients=["plantain"],
    )

    first = await analyze(raw, off, store)
    requests_after_first = len(off.urls)
    second = await analyze(raw, off, store)

    # (122 + 347) / 2 = 234.5
    assert first.result.calories == 235
    assert sorted(first.result.sources) == ["Open Food Facts", "Open Food Facts"]
    assert second.result == first.result
    # cached ingredients are not requested again; the misses are
    assert len(off.urls) - requests_after_first == 2
