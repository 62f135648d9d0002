"""
Nutrition Resolution Orchestrator.

Turns a validated visual estimate into the best available nutrition
values by trying ranked sources in a fixed order.

Design Pattern: Service Layer + Dependency Injection + Chain of fallbacks
"""

import asyncio
import math
from typing import List, Optional, Sequence

import structlog

from nutriscan.domain.knowledge.curated_dishes import CuratedDishKnowledgeBase, CuratedRecipe
from nutriscan.domain.nutrition.models import EnrichedResult, NutritionRecord
from nutriscan.domain.nutrition.ports import IFoodDatabaseClient, INutritionCache
from nutriscan.domain.recognition.models import VisualEstimate
from nutriscan.domain.shared.normalization import normalize

logger = structlog.get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def merge_ingredients(visible: Sequence[str], typical: Sequence[str]) -> List[str]:
    """Visible ingredients first, then typical ones not already present."""
    merged: List[str] = []
    for item in (*visible, *typical):
        if item not in merged:
            merged.append(item)
    return merged


class ResolutionOrchestrator:
    """
    Resolves nutrition for one visual estimate.

    Tiers, first success wins:
    1. Barcode lookup (estimate carries a barcode)
    2. Curated dish recipe (confidence below threshold)
    3. a. Cache, then external search, for the dish name
       b. Same for up to N ingredients in parallel, averaged
       c. The visual estimate unchanged

    A barcode miss does not end the chain. The estimate continues through
    the confidence routing as if it had no barcode, so a low-confidence
    read of a curated dish still gets its typical recipe.

    Dependencies (injected via Ports/Interfaces):
    - food_database: IFoodDatabaseClient - barcode + free-text search
    - cache: INutritionCache - best-effort cache of resolved records
    - knowledge_base: CuratedDishKnowledgeBase - typical recipes

    Resolutions share no mutable state besides the cache, so one
    orchestrator can serve concurrent requests.

    Example:
        >>> orchestrator = ResolutionOrchestrator(
        ...     food_database=off_client,
        ...     cache=NutritionCache(InMemoryNutritionCacheStore()),
        ...     knowledge_base=CuratedDishKnowledgeBase(),
        ... )
        >>> result = await orchestrator.resolve(estimate)
        >>> print(result.sources)
    """

    LOW_CONFIDENCE_THRESHOLD = 60
    MAX_INGREDIENT_LOOKUPS = 5

    def __init__(
        self,
        food_database: IFoodDatabaseClient,
        cache: INutritionCache,
        knowledge_base: Optional[CuratedDishKnowledgeBase] = None,
        low_confidence_threshold: int = LOW_CONFIDENCE_THRESHOLD,
        max_ingredient_lookups: int = MAX_INGREDIENT_LOOKUPS,
    ) -> None:
        """
        Initialize orchestrator with dependencies.

        Args:
            food_database: External food database client
            cache: Nutrition cache
            knowledge_base: Curated dishes (default recipes if None)
            low_confidence_threshold: Estimates below this confidence try
                the curated tier
            max_ingredient_lookups: Ingredients resolved when the dish misses
        """
        self.food_database = food_database
        self.cache = cache
        self.knowledge_base = knowledge_base or CuratedDishKnowledgeBase()
        self.low_confidence_threshold = low_confidence_threshold
        self.max_ingredient_lookups = max_ingredient_lookups

    async def resolve(self, estimate: VisualEstimate) -> EnrichedResult:
        """
        Run the tiered resolution for one estimate.

        Never raises for source failures; the worst case is the visual
        estimate returned with ``enriched=False``.

        Args:
            estimate: Validated vision estimate

        Returns:
            EnrichedResult with macros, provenance and ingredient lists
        """
        log = logger.bind(dish_name=estimate.dish_name, confidence=estimate.confidence)

        # 1. Barcode short-circuits everything else
        if estimate.barcode:
            result = await self._resolve_barcode(estimate)
            if result is not None:
                log.info("Resolved via barcode", barcode=estimate.barcode)
                return result
            log.info("Barcode miss, falling through", barcode=estimate.barcode)

        # 2. Low-confidence reads of a known dish use the typical recipe
        if estimate.confidence < self.low_confidence_threshold:
            recipe = self.knowledge_base.lookup(estimate.dish_name)
            if recipe is not None:
                log.info("Resolved via curated recipe", recipe=recipe.key)
                return self._from_recipe(estimate, recipe)
            log.info("No curated recipe, using standard enrichment")

        # 3a. The dish itself
        dish = await self._lookup(estimate.dish_name, brand=estimate.product_brand)
        if dish is not None:
            log.info("Resolved via dish lookup", source=dish.source)
            return EnrichedResult.from_record(
                dish, estimate.ingredients, estimate.main_ingredients
            )

        # 3b. Average over the ingredients that resolve
        resolved = await self._lookup_ingredients(estimate.ingredients)
        if resolved:
            log.info(
                "Resolved via ingredient average",
                resolved=len(resolved),
                attempted=min(len(estimate.ingredients), self.max_ingredient_lookups),
            )
            return self._average(estimate, resolved)

        # 3c. Nothing better than the estimate
        log.info("No enrichment available, keeping AI estimate")
        return EnrichedResult.from_estimate(estimate)

    async def _resolve_barcode(self, estimate: VisualEstimate) -> Optional[EnrichedResult]:
        assert estimate.barcode is not None
        record = await self.food_database.lookup_by_barcode(estimate.barcode)
        if record is None:
            return None

        await self.cache.put(record)
        return EnrichedResult.from_record(
            record, estimate.ingredients, estimate.main_ingredients
        )

    def _from_recipe(self, estimate: VisualEstimate, recipe: CuratedRecipe) -> EnrichedResult:
        n = recipe.nutrition
        return EnrichedResult(
            enriched=True,
            calories=n.calories,
            protein=n.protein,
            carbs=n.carbs,
            fat=n.fat,
            fiber=n.fiber,
            sources=[recipe.tagged_source],
            ingredients=merge_ingredients(estimate.ingredients, recipe.ingredients),
            main_ingredients=list(recipe.main_ingredients),
        )

    async def _lookup(self, name: str, brand: Optional[str] = None) -> Optional[NutritionRecord]:
        """Cache first, then external search; external hits are cached."""
        key = normalize(name)
        if not key:
            return None

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        record = await self.food_database.search_by_name(name, brand=brand)
        if record is None:
            return None

        await self.cache.put(record)
        return record

    async def _lookup_ingredients(self, ingredients: Sequence[str]) -> List[NutritionRecord]:
        candidates = list(ingredients[: self.max_ingredient_lookups])
        if not candidates:
            return []

        outcomes = await asyncio.gather(
            *(self._lookup(name) for name in candidates),
            return_exceptions=True,
        )

        resolved: List[NutritionRecord] = []
        for name, outcome in zip(candidates, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Ingredient lookup failed",
                    ingredient=name,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                continue
            if outcome is not None:
                resolved.append(outcome)
        return resolved

    def _average(
        self, estimate: VisualEstimate, records: Sequence[NutritionRecord]
    ) -> EnrichedResult:
        count = len(records)
        return EnrichedResult(
            enriched=True,
            calories=round_half_up(sum(r.calories for r in records) / count),
            protein=round_half_up(sum(r.protein for r in records) / count),
            carbs=round_half_up(sum(r.carbs for r in records) / count),
            fat=round_half_up(sum(r.fat for r in records) / count),
            fiber=round_half_up(sum(r.fiber for r in records) / count),
            sources=[r.source for r in records],
            ingredients=list(estimate.ingredients),
            main_ingredients=list(estimate.main_ingredients),
        )
