"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_BARCODE_PATTERN = r"^\d{8,14}$"


class Barcode(BaseModel):
    """
    Product barcode value object.

    Validates barcode format (EAN-8 up to GTIN-14).
    Used for OpenFoodFacts lookups.

    Example:
        >>> barcode = Barcode(value="5000112637922")
        >>> assert barcode.is_valid()
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=_BARCODE_PATTERN, description="Barcode digits")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    def is_valid(self) -> bool:
        """Check the digits-only format."""
        return bool(re.match(_BARCODE_PATTERN, self.value))

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string, tolerating surrounding whitespace."""
        return cls(value=s.strip())
