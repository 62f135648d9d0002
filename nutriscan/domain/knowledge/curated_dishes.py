"""
Curated dish knowledge base.

Typical recipes of West African dishes that generic food databases
cover poorly. Used to correct low-confidence vision reads of a
recognizable dish.

Matching contract:
- The query is normalized (lower-cased, trimmed).
- A key matches when the query contains the key or the key contains
  the query (bidirectional substring, not equality).
- Keys are tried longest first; keys of equal length keep declaration
  order. "poulet dg" is therefore checked before any shorter key that
  could also match the same query.
- An empty query matches nothing.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from nutriscan.domain.nutrition.models import MacroProfile, SourceTag
from nutriscan.domain.shared.normalization import normalize

logger = structlog.get_logger(__name__)


class CuratedRecipe(BaseModel):
    """
    Static recipe entry.

    Attributes:
        key: Primary lookup key (already normalized)
        aliases: Extra lookup keys, e.g. accented spellings
        dish_name: Display name
        ingredients: Typical ingredients
        main_ingredients: Most prominent ingredients (subset of ingredients)
        nutrition: Typical macros per 100g
        source: Provenance tag
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    aliases: Tuple[str, ...] = ()
    dish_name: str
    ingredients: Tuple[str, ...]
    main_ingredients: Tuple[str, ...]
    nutrition: MacroProfile
    source: str = SourceTag.AFRICAN_DISHES_DB

    @model_validator(mode="after")
    def check_entry(self) -> CuratedRecipe:
        """Keys must be normalized and main ingredients listed."""
        for k in (self.key, *self.aliases):
            if k != normalize(k) or not k:
                raise ValueError(f"Curated key must be normalized: {k!r}")
        missing = [m for m in self.main_ingredients if m not in self.ingredients]
        if missing:
            raise ValueError(f"{self.key}: main ingredients not in ingredients: {missing}")
        return self

    @property
    def tagged_source(self) -> str:
        """Provenance tag used when the recipe replaces an estimate."""
        return f"{self.source}{SourceTag.TYPICAL_RECIPE_SUFFIX}"


def _recipe(
    key: str,
    dish_name: str,
    ingredients: Iterable[str],
    main_ingredients: Iterable[str],
    calories: float,
    protein: float,
    carbs: float,
    fat: float,
    fiber: float,
    aliases: Iterable[str] = (),
) -> CuratedRecipe:
    return CuratedRecipe(
        key=key,
        aliases=tuple(aliases),
        dish_name=dish_name,
        ingredients=tuple(ingredients),
        main_ingredients=tuple(main_ingredients),
        nutrition=MacroProfile(
            calories=calories, protein=protein, carbs=carbs, fat=fat, fiber=fiber
        ),
    )


DEFAULT_RECIPES: Tuple[CuratedRecipe, ...] = (
    _recipe(
        "attieke",
        "Attiéké",
        ["attieke (cassava couscous)", "fish", "tomato", "onion", "chili pepper"],
        ["attieke (cassava couscous)", "fish"],
        180, 25, 35, 8, 3,
        aliases=["attiéké"],
    ),
    _recipe(
        "jollof rice",
        "Jollof Rice",
        ["rice", "tomato", "onion", "bell pepper", "oil", "spices", "chicken"],
        ["rice", "tomato", "chicken"],
        200, 15, 45, 10, 2,
    ),
    _recipe(
        "fufu",
        "Fufu",
        ["pounded yam", "cassava", "water", "sauce"],
        ["pounded yam", "cassava"],
        150, 2, 38, 1, 3,
    ),
    _recipe(
        "mafe",
        "Mafé",
        ["meat", "peanut paste", "tomato", "onion", "carrot", "cabbage", "sweet potato"],
        ["meat", "peanut paste"],
        250, 20, 25, 18, 4,
        aliases=["mafé"],
    ),
    _recipe(
        "thieboudienne",
        "Thiéboudienne",
        [
            "rice", "fish", "tomato", "onion", "carrot", "cabbage",
            "eggplant", "cassava", "sweet potato",
        ],
        ["rice", "fish"],
        220, 22, 40, 8, 5,
        aliases=["thiéboudienne", "ceebu jen"],
    ),
    _recipe(
        "ndole",
        "Ndolé",
        ["bitterleaf", "peanuts", "meat", "shrimp", "onion", "garlic", "oil"],
        ["bitterleaf", "peanuts", "meat"],
        280, 25, 15, 22, 6,
        aliases=["ndolé"],
    ),
    _recipe(
        "alloco",
        "Alloco",
        ["plantain", "frying oil", "onion", "chili pepper", "tomato"],
        ["plantain"],
        200, 2, 35, 12, 3,
    ),
    _recipe(
        "kedjenou",
        "Kedjenou",
        ["chicken", "onion", "tomato", "eggplant", "chili pepper", "ginger", "garlic"],
        ["chicken"],
        180, 28, 12, 10, 3,
    ),
    _recipe(
        "poulet dg",
        "Poulet DG",
        ["chicken", "plantain", "carrot", "green beans", "onion", "bell pepper", "tomato"],
        ["chicken", "plantain"],
        220, 25, 30, 12, 4,
    ),
    _recipe(
        "garri",
        "Garri",
        ["cassava flakes", "water", "sugar", "peanuts"],
        ["cassava flakes"],
        160, 2, 40, 1, 2,
        aliases=["gari"],
    ),
)


class CuratedDishKnowledgeBase:
    """
    Static mapping from dish key to a known recipe.

    Immutable after construction; lookups are pure.

    Example:
        >>> kb = CuratedDishKnowledgeBase()
        >>> kb.lookup("Spicy Jollof Rice").dish_name
        'Jollof Rice'
        >>> kb.lookup("pizza") is None
        True
    """

    def __init__(self, recipes: Iterable[CuratedRecipe] = DEFAULT_RECIPES) -> None:
        entries: List[Tuple[str, CuratedRecipe]] = []
        seen: set[str] = set()
        for recipe in recipes:
            for key in (recipe.key, *recipe.aliases):
                if key in seen:
                    raise ValueError(f"Duplicate curated key: {key!r}")
                seen.add(key)
                entries.append((key, recipe))

        # sorted() is stable: equal lengths keep declaration order
        self._ranked: Tuple[Tuple[str, CuratedRecipe], ...] = tuple(
            sorted(entries, key=lambda entry: -len(entry[0]))
        )

    def keys(self) -> List[str]:
        """Lookup keys in the order they are tried."""
        return [key for key, _ in self._ranked]

    def lookup(self, dish_name: str) -> Optional[CuratedRecipe]:
        """
        Find the curated recipe for a dish name.

        Args:
            dish_name: Free-text dish name

        Returns:
            First matching recipe in ranked order, or None
        """
        query = normalize(dish_name)
        if not query:
            return None

        for key, recipe in self._ranked:
            if key in query or query in key:
                logger.debug("Curated dish matched", query=query, key=key)
                return recipe

        return None

    def __len__(self) -> int:
        return len({id(recipe) for _, recipe in self._ranked})
