"""
Port for the external vision model.

The model itself (prompting, image handling, model choice) lives outside
this package; only its text output is consumed here.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IVisionEstimateSource(Protocol):
    """
    Port for the vision estimate generator.

    Implementations may use different AI models (Gemini, OpenAI, local).
    """

    async def estimate(self, image_bytes: bytes) -> str:
        """
        Describe a food photo.

        Args:
            image_bytes: Encoded image

        Returns:
            Raw model text, expected to contain one JSON object with
            dishName, ingredients, mainIngredients, macros per 100g,
            estimatedWeight, confidence and optional barcode/productBrand
        """
        ...
