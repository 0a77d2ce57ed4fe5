"""
application.services.recipe_generation - Recipe suggestions with a canned fallback.

Follows the same "always return something" rule as ingredient detection,
but with a single fallback tier: when no generator is configured or the
LLM call fails, one fixed recipe is returned.
"""

from __future__ import annotations

import logging
from typing import Optional

from application.normalizer import normalize
from domain.exceptions import RecipeGenerationError
from domain.models import RECIPE_PLACEHOLDER_IMAGE, NutritionInfo, Recipe, RecipeSuggestions
from domain.ports import RecipeGeneratorPort

logger = logging.getLogger(__name__)

FALLBACK_RECIPES: list[Recipe] = [
    Recipe(
        id="1",
        title="Simple Vegetable Curry",
        description="A quick and easy curry made with available vegetables and basic spices.",
        difficulty="Easy",
        cook_time=25,
        servings=4,
        ingredients=[
            "2 cups mixed vegetables",
            "1 onion, chopped",
            "2 cloves garlic",
            "1 tsp turmeric",
            "1 tsp cumin powder",
            "Salt to taste",
            "2 tbsp oil",
        ],
        instructions=[
            "Heat oil in a pan",
            "Add onions and garlic, sauté until golden",
            "Add spices and cook for 1 minute",
            "Add vegetables and cook until tender",
            "Season with salt and serve hot",
        ],
        nutrition=NutritionInfo(calories=180, protein=6, carbs=25, fat=8),
        image=RECIPE_PLACEHOLDER_IMAGE,
    ),
]


class RecipeGenerationService:
    """Turns an ingredient list into recipe suggestions."""

    def __init__(self, generator: Optional[RecipeGeneratorPort] = None):
        self._generator = generator

    async def generate(self, ingredients: list[str]) -> RecipeSuggestions:
        """Generate recipes; falls back to the canned recipe on any LLM problem.

        Raises:
            ValueError: no usable ingredient was given.
        """
        cleaned = normalize(ingredients)
        if not cleaned:
            raise ValueError("No ingredients provided")

        if self._generator is None:
            logger.warning("No recipe generator configured — returning fallback recipes")
            return RecipeSuggestions(recipes=list(FALLBACK_RECIPES), source="fallback")

        try:
            recipes = await self._generator.generate(cleaned)
        except RecipeGenerationError as e:
            logger.warning("Recipe generation failed (%s) — returning fallback recipes", e)
            return RecipeSuggestions(recipes=list(FALLBACK_RECIPES), source="fallback")

        return RecipeSuggestions(recipes=recipes, source="llm")
