"""
Domain models for vision estimates.

The vision model reads a food photo and guesses what it shows; these
models hold that guess before any nutrition lookup.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nutriscan.domain.nutrition.models import MacroProfile


class VisualEstimate(BaseModel):
    """
    Structured output of the vision model, pre-merge.

    Accepts the model's camelCase JSON keys (``dishName``,
    ``mainIngredients``, ``estimatedWeight``, ``productBrand``) as well as
    the snake_case field names.

    Attributes:
        dish_name: Recognized dish or product name
        ingredients: Visible/readable ingredients, in model order
        main_ingredients: Most prominent ingredients (subset of ingredients)
        calories/protein/carbs/fat/fiber: Guessed macros per 100g
        estimated_weight_g: Guessed portion weight
        confidence: Model confidence 0-100
        barcode: Barcode read from packaging, if any
        product_brand: Brand read from packaging, if any

    Example:
        >>> estimate = VisualEstimate.model_validate({
        ...     "dishName": "Jollof Rice",
        ...     "ingredients": ["rice", "tomato"],
        ...     "mainIngredients": ["rice"],
        ...     "calories": 210, "protein": 5, "carbs": 40, "fat": 4, "fiber": 2,
        ...     "estimatedWeight": 300,
        ...     "confidence": 45,
        ... })
        >>> assert estimate.barcode is None
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    dish_name: str = Field(..., alias="dishName", min_length=1)
    ingredients: List[str] = Field(default_factory=list)
    main_ingredients: List[str] = Field(default_factory=list, alias="mainIngredients")

    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: float = Field(..., ge=0)

    estimated_weight_g: float = Field(..., alias="estimatedWeight", gt=0)
    confidence: int = Field(..., ge=0, le=100)

    barcode: Optional[str] = None
    product_brand: Optional[str] = Field(None, alias="productBrand")

    @field_validator("dish_name")
    @classmethod
    def dish_name_not_blank(cls, v: str) -> str:
        """Ensure not just whitespace."""
        if not v.strip():
            raise ValueError("dishName cannot be empty or whitespace")
        return v.strip()

    @field_validator("ingredients", "main_ingredients")
    @classmethod
    def strip_ingredients(cls, v: List[str]) -> List[str]:
        """Drop blank entries, trim the rest."""
        return [item.strip() for item in v if item.strip()]

    @field_validator("barcode", "product_brand")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def main_ingredients_are_ingredients(self) -> VisualEstimate:
        """mainIngredients must be a subset of ingredients."""
        missing = [m for m in self.main_ingredients if m not in self.ingredients]
        if missing:
            raise ValueError(f"mainIngredients not listed in ingredients: {missing}")
        return self

    def macros(self) -> MacroProfile:
        """Guessed macro values as a profile."""
        return MacroProfile(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
        )
