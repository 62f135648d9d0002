"""
OpenFoodFacts domain models.

Models for OpenFoodFacts API responses mapped to our domain.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OFFNutriments(BaseModel):
    """OpenFoodFacts nutriments (per 100g).

    Any field may be missing from the API payload; ``None`` means the
    product page has no value for it.

    Example:
        >>> nutriments = OFFNutriments(
        ...     energy_kcal=150.0,
        ...     proteins=3.0,
        ...     carbohydrates=25.0,
        ...     fat=5.0,
        ... )
        >>> assert nutriments.fiber is None
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal per 100g")
    proteins: Optional[float] = Field(None, ge=0, description="Protein in g per 100g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g per 100g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g per 100g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g per 100g")


class OFFProduct(BaseModel):
    """OpenFoodFacts product.

    Example:
        >>> product = OFFProduct(
        ...     code="5000112637922",
        ...     product_name="Coca-Cola",
        ...     nutriments=OFFNutriments(energy_kcal=42.0),
        ... )
        >>> assert product.product_name == "Coca-Cola"
    """

    model_config = ConfigDict(frozen=True)

    code: Optional[str] = Field(None, description="Product barcode")
    product_name: Optional[str] = Field(None, description="Product name")
    brands: Optional[str] = Field(None, description="Brand names")
    nutriments: OFFNutriments = Field(default_factory=OFFNutriments)


class OFFProductResponse(BaseModel):
    """OpenFoodFacts product-by-barcode response.

    Example:
        >>> response = OFFProductResponse(status=0)
        >>> assert not response.is_found()
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(0, description="API status (1=found, 0=not)")
    product: Optional[OFFProduct] = Field(None, description="Product data (if found)")

    def is_found(self) -> bool:
        """Check if product was found.

        Returns:
            True if product exists in database
        """
        return self.status == 1 and self.product is not None


class OFFSearchResponse(BaseModel):
    """OpenFoodFacts free-text search response, ranked best first."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(0, ge=0, description="Total matches reported by the API")
    products: List[OFFProduct] = Field(default_factory=list)

    def top(self) -> Optional[OFFProduct]:
        """Top-ranked product, if any."""
        return self.products[0] if self.products else None
