"""Stub vision estimate source for testing.

Returns canned model text without calling an external vision model.
"""

import json
from typing import List, Optional

DEFAULT_RESPONSE = json.dumps(
    {
        "dishName": "Jollof Rice",
        "calories": 210,
        "protein": 6,
        "carbs": 38,
        "fat": 5,
        "fiber": 2,
        "ingredients": ["rice", "tomato", "onion"],
        "mainIngredients": ["rice", "tomato"],
        "estimatedWeight": 300,
        "confidence": 45,
    }
)


class StubVisionEstimateSource:
    """
    Stub implementation of IVisionEstimateSource.

    Replies with ``response`` (or a Jollof Rice estimate by default) and
    records the images it was asked about.
    """

    def __init__(self, response: Optional[str] = None) -> None:
        self.response = DEFAULT_RESPONSE if response is None else response
        self.calls: List[bytes] = []

    async def __aenter__(self) -> "StubVisionEstimateSource":
        """Enter async context (no-op for stub)."""
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit async context (no-op for stub)."""
        return None

    async def estimate(self, image_bytes: bytes) -> str:
        """Return the canned model text."""
        self.calls.append(image_bytes)
        return self.response
