"""
Nutrition domain models.

Per-100g macro values, resolved nutrition records, cached entries and
the merged result produced by the resolution pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nutriscan.domain.shared.normalization import normalize

if TYPE_CHECKING:
    from nutriscan.domain.recognition.models import VisualEstimate


class SourceTag:
    """Provenance strings attached to resolved values."""

    OPEN_FOOD_FACTS = "Open Food Facts"
    OPEN_FOOD_FACTS_BARCODE = "Open Food Facts (Barcode)"
    AFRICAN_DISHES_DB = "African Dishes Database"
    AI_ESTIMATE = "AI Estimate"
    TYPICAL_RECIPE_SUFFIX = " (typical recipe)"


class MacroProfile(BaseModel):
    """
    Macronutrients per 100g.

    Example:
        >>> macros = MacroProfile(calories=200, protein=15, carbs=45, fat=10, fiber=2)
        >>> assert macros.calories == 200
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    calories: float = Field(..., ge=0, description="Energy in kcal per 100g")
    protein: float = Field(..., ge=0, description="Protein in g per 100g")
    carbs: float = Field(..., ge=0, description="Carbohydrates in g per 100g")
    fat: float = Field(..., ge=0, description="Fat in g per 100g")
    fiber: float = Field(..., ge=0, description="Fiber in g per 100g")


class NutritionRecord(BaseModel):
    """
    Canonical resolved fact about one food item.

    Produced by the external food database client or read back from the
    nutrition cache. ``name`` is the food name the record answers for and
    determines its cache key; ``product_name`` keeps the external product
    that actually matched, when known.

    Example:
        >>> record = NutritionRecord(
        ...     name="Jollof Rice",
        ...     calories=180, protein=4, carbs=35, fat=3, fiber=1,
        ...     source="Open Food Facts",
        ... )
        >>> record.normalized_name
        'jollof rice'
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str = Field(..., min_length=1, description="Food name")
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: float = Field(..., ge=0)
    source: str = Field(..., min_length=1, description="Provenance tag")
    product_name: Optional[str] = Field(None, description="Matched external product")

    @property
    def normalized_name(self) -> str:
        """Cache key for this record."""
        return normalize(self.name)

    def macros(self) -> MacroProfile:
        """Macro values as a profile."""
        return MacroProfile(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
        )


class CachedNutritionEntry(BaseModel):
    """
    Stored form of a cached nutrition record.

    One entry per normalized food name. ``times_used`` counts writes and
    cache hits.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    food_name: str
    food_name_normalized: str
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: float = Field(..., ge=0)
    data_source: str
    verified: bool = False
    times_used: int = Field(1, ge=0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_record(cls, record: NutritionRecord, times_used: int = 1) -> CachedNutritionEntry:
        """Build the stored form of a freshly resolved record."""
        return cls(
            food_name=record.name,
            food_name_normalized=record.normalized_name,
            calories=record.calories,
            protein=record.protein,
            carbs=record.carbs,
            fat=record.fat,
            fiber=record.fiber,
            data_source=record.source,
            times_used=times_used,
        )

    def to_record(self) -> NutritionRecord:
        """Convert back to a domain record."""
        return NutritionRecord(
            name=self.food_name,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
            source=self.data_source,
        )


class EnrichedResult(BaseModel):
    """
    Output of the resolution pipeline.

    Attributes:
        enriched: True when a barcode, curated, cached or external source
            contributed
        calories/protein/carbs/fat/fiber: Final per-100g values
        sources: One provenance tag per contributing source
        ingredients: Ingredient list, possibly merged with a curated recipe
        main_ingredients: Main ingredients, possibly replaced by a curated recipe
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    enriched: bool
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: float = Field(..., ge=0)
    sources: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    main_ingredients: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def unenriched_comes_from_estimate(self) -> EnrichedResult:
        """An unenriched result carries only the AI estimate tag."""
        if not self.enriched and self.sources != [SourceTag.AI_ESTIMATE]:
            raise ValueError("Unenriched result must have sources == ['AI Estimate']")
        return self

    @classmethod
    def from_record(
        cls,
        record: NutritionRecord,
        ingredients: List[str],
        main_ingredients: List[str],
    ) -> EnrichedResult:
        """Result for a single terminal hit (barcode, cache or search)."""
        return cls(
            enriched=True,
            calories=record.calories,
            protein=record.protein,
            carbs=record.carbs,
            fat=record.fat,
            fiber=record.fiber,
            sources=[record.source],
            ingredients=list(ingredients),
            main_ingredients=list(main_ingredients),
        )

    @classmethod
    def from_estimate(cls, estimate: VisualEstimate) -> EnrichedResult:
        """Unenriched fallback: the visual estimate unchanged."""
        return cls(
            enriched=False,
            calories=estimate.calories,
            protein=estimate.protein,
            carbs=estimate.carbs,
            fat=estimate.fat,
            fiber=estimate.fiber,
            sources=[SourceTag.AI_ESTIMATE],
            ingredients=list(estimate.ingredients),
            main_ingredients=list(estimate.main_ingredients),
        )

    def macros(self) -> MacroProfile:
        """Final macro values as a profile."""
        return MacroProfile(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            fiber=self.fiber,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for handing to the persistence layer."""
        return self.model_dump()
