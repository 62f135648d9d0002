"""
Tests for FoodImageAnalysisService.

Uses the stub vision source and the real validator; the food database
is mocked.
"""

import json
from unittest.mock import AsyncMock

import pytest

from nutriscan.application.analysis.service import FoodImageAnalysisService
from nutriscan.application.resolution.orchestrator import ResolutionOrchestrator
from nutriscan.domain.nutrition.models import NutritionRecord, SourceTag
from nutriscan.domain.recognition.validator import VisionEstimateValidator
from nutriscan.domain.shared.errors import MalformedEstimateError
from nutriscan.infrastructure.vision.stub_vision_source import StubVisionEstimateSource


@pytest.fixture
def vision_source() -> StubVisionEstimateSource:
    return StubVisionEstimateSource()


@pytest.fixture
def service(
    vision_source: StubVisionEstimateSource,
    orchestrator: ResolutionOrchestrator,
) -> FoodImageAnalysisService:
    return FoodImageAnalysisService(vision_source, VisionEstimateValidator(), orchestrator)


class TestFoodImageAnalysisService:
    """Test end-to-end analysis flow."""

    async def test_analyze_default_stub_resolves_curated_dish(
        self,
        service: FoodImageAnalysisService,
        vision_source: StubVisionEstimateSource,
    ) -> None:
        analysis = await service.analyze(b"fake-image")

        assert vision_source.calls == [b"fake-image"]
        assert analysis.estimate.dish_name == "Jollof Rice"
        assert analysis.estimate.confidence == 45
        assert analysis.result.sources == ["African Dishes Database (typical recipe)"]
        assert analysis.result.calories == 200

    async def test_analyze_to_dict(self, service: FoodImageAnalysisService) -> None:
        analysis = await service.analyze(b"img")

        data = analysis.to_dict()

        assert data["dish_name"] == "Jollof Rice"
        assert data["estimated_weight_g"] == 300
        assert data["enriched"] is True
        assert data["main_ingredients"] == ["rice", "tomato", "chicken"]

    async def test_analyze_malformed_output_raises(
        self,
        orchestrator: ResolutionOrchestrator,
        food_database: AsyncMock,
    ) -> None:
        service = FoodImageAnalysisService(
            StubVisionEstimateSource("Sorry, I can't see any food."),
            VisionEstimateValidator(),
            orchestrator,
        )

        with pytest.raises(MalformedEstimateError) as exc_info:
            await service.analyze(b"img")

        assert exc_info.value.raw_text == "Sorry, I can't see any food."
        food_database.search_by_name.assert_not_awaited()
        food_database.lookup_by_barcode.assert_not_awaited()

    async def test_resolve_text_with_barcode(
        self,
        service: FoodImageAnalysisService,
        food_database: AsyncMock,
        coke_record: NutritionRecord,
    ) -> None:
        food_database.lookup_by_barcode.return_value = coke_record
        raw = "```json\n" + json.dumps(
            {
                "dishName": "Coca-Cola",
                "calories": 42,
                "protein": 0,
                "carbs": 10.6,
                "fat": 0,
                "fiber": 0,
                "estimatedWeight": 330,
                "confidence": 95,
                "barcode": 5000112637922,
            }
        ) + "\n```"

        result = await service.resolve_text(raw)

        assert result.sources == [SourceTag.OPEN_FOOD_FACTS_BARCODE]
        assert result.calories == 250
        food_database.lookup_by_barcode.assert_awaited_once_with("5000112637922")
