"""
OpenFoodFacts data mapper.

Transforms OpenFoodFacts API payloads to domain models.
"""

import math
from typing import Any, Optional

from nutriscan.domain.nutrition.models import MacroProfile, NutritionRecord
from nutriscan.domain.nutrition.openfoodfacts_models import (
    OFFNutriments,
    OFFProduct,
    OFFProductResponse,
    OFFSearchResponse,
)
from nutriscan.domain.shared.errors import TransientSourceError

# Applied by the search path when a nutriment is absent: an unknown food is
# assumed to have a moderate generic profile rather than zero nutrition.
SEARCH_FALLBACK_MACROS = MacroProfile(calories=200, protein=15, carbs=30, fat=10, fiber=3)

# Barcode products report their own label values; absent fields count as zero.
BARCODE_FALLBACK_MACROS = MacroProfile(calories=0, protein=0, carbs=0, fat=0, fiber=0)


class OpenFoodFactsMapper:
    """Maps OpenFoodFacts API data to domain models."""

    @staticmethod
    def _get_float(nutriments: dict[str, Any], key: str) -> Optional[float]:
        """Extract a finite non-negative float, treating junk values as missing."""
        value = nutriments.get(key)
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) and number >= 0 else None

    @staticmethod
    def parse_product(product_data: Any) -> OFFProduct:
        """Parse one product object.

        Raises:
            TransientSourceError: If the payload is not a JSON object
        """
        if not isinstance(product_data, dict):
            raise TransientSourceError(
                f"Unexpected product payload type: {type(product_data).__name__}"
            )

        raw_nutriments = product_data.get("nutriments") or {}
        if not isinstance(raw_nutriments, dict):
            raw_nutriments = {}

        get = OpenFoodFactsMapper._get_float
        nutriments = OFFNutriments(
            energy_kcal=get(raw_nutriments, "energy-kcal_100g"),
            proteins=get(raw_nutriments, "proteins_100g"),
            carbohydrates=get(raw_nutriments, "carbohydrates_100g"),
            fat=get(raw_nutriments, "fat_100g"),
            fiber=get(raw_nutriments, "fiber_100g"),
        )

        name = product_data.get("product_name")
        brands = product_data.get("brands")
        code = product_data.get("code")

        return OFFProduct(
            code=str(code) if code is not None else None,
            product_name=name.strip() if isinstance(name, str) and name.strip() else None,
            brands=brands if isinstance(brands, str) else None,
            nutriments=nutriments,
        )

    @staticmethod
    def parse_product_response(response_data: Any) -> OFFProductResponse:
        """Parse OpenFoodFacts product API response.

        Args:
            response_data: Raw API response JSON

        Returns:
            Parsed OFFProductResponse

        Raises:
            TransientSourceError: If the payload is not a JSON object

        Example:
            >>> response = {
            ...     "status": 1,
            ...     "product": {
            ...         "code": "5000112637922",
            ...         "product_name": "Coca-Cola",
            ...         "nutriments": {"energy-kcal_100g": 42},
            ...     },
            ... }
            >>> result = OpenFoodFactsMapper.parse_product_response(response)
            >>> assert result.is_found()
        """
        if not isinstance(response_data, dict):
            raise TransientSourceError("Product response is not a JSON object")

        status = response_data.get("status", 0)
        if status != 1 or not response_data.get("product"):
            return OFFProductResponse(status=status if isinstance(status, int) else 0)

        product = OpenFoodFactsMapper.parse_product(response_data["product"])
        return OFFProductResponse(status=status, product=product)

    @staticmethod
    def parse_search_response(response_data: Any) -> OFFSearchResponse:
        """Parse OpenFoodFacts search API response.

        Raises:
            TransientSourceError: If the payload or its product list has
                an unexpected shape
        """
        if not isinstance(response_data, dict):
            raise TransientSourceError("Search response is not a JSON object")

        raw_products = response_data.get("products") or []
        if not isinstance(raw_products, list):
            raise TransientSourceError("Search response 'products' is not a list")

        count = response_data.get("count", len(raw_products))
        products = [OpenFoodFactsMapper.parse_product(p) for p in raw_products]
        return OFFSearchResponse(
            count=count if isinstance(count, int) and count >= 0 else len(products),
            products=products,
        )

    @staticmethod
    def to_nutrition_record(
        product: OFFProduct,
        name: str,
        source: str,
        fallback: MacroProfile,
    ) -> NutritionRecord:
        """Convert an OpenFoodFacts product to a NutritionRecord.

        Args:
            product: Parsed product
            name: Food name the record answers for (its cache key)
            source: Provenance tag
            fallback: Values used for absent nutriments

        Returns:
            Domain NutritionRecord
        """
        n = product.nutriments

        def pick(value: Optional[float], default: float) -> float:
            return value if value is not None else default

        return NutritionRecord(
            name=name,
            calories=pick(n.energy_kcal, fallback.calories),
            protein=pick(n.proteins, fallback.protein),
            carbs=pick(n.carbohydrates, fallback.carbs),
            fat=pick(n.fat, fallback.fat),
            fiber=pick(n.fiber, fallback.fiber),
            source=source,
            product_name=product.product_name,
        )
