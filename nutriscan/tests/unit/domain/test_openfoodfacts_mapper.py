"""Unit tests for the OpenFoodFacts mapper."""

import json
from typing import Any

import pytest

from nutriscan.domain.nutrition.models import SourceTag
from nutriscan.domain.nutrition.openfoodfacts_mapper import (
    BARCODE_FALLBACK_MACROS,
    SEARCH_FALLBACK_MACROS,
    OpenFoodFactsMapper,
)
from nutriscan.domain.shared.errors import TransientSourceError


@pytest.fixture
def coke_response() -> dict[str, Any]:
    return {
        "status": 1,
        "product": {
            "code": "5000112637922",
            "product_name": "Coca-Cola",
            "brands": "Coca-Cola",
            "nutriments": {
                "energy-kcal_100g": 42,
                "proteins_100g": 0,
                "carbohydrates_100g": 10.6,
                "fat_100g": 0,
            },
        },
    }


class TestParseProductResponse:
    """Test product response parsing."""

    def test_found(self, coke_response: dict[str, Any]) -> None:
        result = OpenFoodFactsMapper.parse_product_response(coke_response)

        assert result.is_found()
        assert result.product is not None
        assert result.product.product_name == "Coca-Cola"
        assert result.product.nutriments.energy_kcal == 42
        assert result.product.nutriments.fiber is None

    def test_not_found(self) -> None:
        result = OpenFoodFactsMapper.parse_product_response(
            {"status": 0, "status_verbose": "product not found"}
        )

        assert not result.is_found()

    def test_not_an_object(self) -> None:
        with pytest.raises(TransientSourceError):
            OpenFoodFactsMapper.parse_product_response(["nope"])

    @pytest.mark.parametrize("value", ["abc", -5, True, None, float("inf"), float("nan"), "inf"])
    def test_junk_nutriment_treated_as_missing(self, value: Any) -> None:
        product = OpenFoodFactsMapper.parse_product(
            {"product_name": "X", "nutriments": {"energy-kcal_100g": value}}
        )

        assert product.nutriments.energy_kcal is None

    def test_overflowing_number_treated_as_missing(self) -> None:
        # 1e400 decodes to inf
        raw = json.loads('{"product_name": "Rice", "nutriments": {"energy-kcal_100g": 1e400}}')

        product = OpenFoodFactsMapper.parse_product(raw)

        assert product.nutriments.energy_kcal is None

    def test_numeric_string_accepted(self) -> None:
        product = OpenFoodFactsMapper.parse_product({"nutriments": {"fat_100g": "3.5"}})

        assert product.nutriments.fat == 3.5

    def test_blank_product_name_is_none(self) -> None:
        product = OpenFoodFactsMapper.parse_product({"product_name": "  "})

        assert product.product_name is None


class TestParseSearchResponse:
    """Test search response parsing."""

    def test_top_product(self) -> None:
        result = OpenFoodFactsMapper.parse_search_response(
            {
                "count": 2,
                "products": [
                    {"product_name": "First", "nutriments": {}},
                    {"product_name": "Second", "nutriments": {}},
                ],
            }
        )

        top = result.top()
        assert top is not None
        assert top.product_name == "First"
        assert result.count == 2

    def test_empty(self) -> None:
        assert OpenFoodFactsMapper.parse_search_response({"products": []}).top() is None

    def test_products_not_a_list(self) -> None:
        with pytest.raises(TransientSourceError):
            OpenFoodFactsMapper.parse_search_response({"products": {"a": 1}})


class TestToNutritionRecord:
    """Test conversion with fallbacks."""

    def test_search_fallback_fills_absent_fields(self) -> None:
        product = OpenFoodFactsMapper.parse_product(
            {"product_name": "Rice", "nutriments": {"energy-kcal_100g": 130, "fat_100g": 0}}
        )

        record = OpenFoodFactsMapper.to_nutrition_record(
            product, name="rice", source=SourceTag.OPEN_FOOD_FACTS, fallback=SEARCH_FALLBACK_MACROS
        )

        assert record.calories == 130
        # present zero is kept
        assert record.fat == 0
        assert record.protein == 15
        assert record.carbs == 30
        assert record.fiber == 3
        assert record.name == "rice"
        assert record.product_name == "Rice"

    def test_search_fallback_when_no_nutriments(self) -> None:
        product = OpenFoodFactsMapper.parse_product({"product_name": "Mystery"})

        record = OpenFoodFactsMapper.to_nutrition_record(
            product, name="mystery", source=SourceTag.OPEN_FOOD_FACTS, fallback=SEARCH_FALLBACK_MACROS
        )

        assert record.macros() == SEARCH_FALLBACK_MACROS

    def test_barcode_fallback_is_zero(self, coke_response: dict[str, Any]) -> None:
        result = OpenFoodFactsMapper.parse_product_response(coke_response)
        assert result.product is not None

        record = OpenFoodFactsMapper.to_nutrition_record(
            result.product,
            name="Coca-Cola",
            source=SourceTag.OPEN_FOOD_FACTS_BARCODE,
            fallback=BARCODE_FALLBACK_MACROS,
        )

        assert record.calories == 42
        assert record.carbs == 10.6
        assert record.fiber == 0
        assert record.source == "Open Food Facts (Barcode)"
