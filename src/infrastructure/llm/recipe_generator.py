"""
infrastructure.llm.recipe_generator - LLM recipe suggestions via LangChain.

Implements RecipeGeneratorPort with a ChatPromptTemplate | chat model |
JsonOutputParser chain. The model is asked for a bare JSON array of recipe
objects; each object is coerced into a domain Recipe, tolerating missing or
mistyped fields.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from uuid import uuid4

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate

from domain.exceptions import RecipeGenerationError
from domain.models import RECIPE_PLACEHOLDER_IMAGE, NutritionInfo, Recipe

logger = logging.getLogger(__name__)

_SYSTEM_INSTRUCTIONS = (
    "You are an expert Indian chef who creates authentic recipes. "
    "Always respond with valid JSON only, no additional text."
)

_USER_PROMPT = """Generate 3-5 authentic Indian recipes using these ingredients: {ingredients}.

For each recipe, provide:
1. A creative and authentic Indian recipe name
2. A brief description (2-3 sentences)
3. Difficulty level (Easy, Medium, or Hard)
4. Cooking time in minutes
5. Number of servings
6. Complete ingredient list with measurements
7. Step-by-step cooking instructions
8. Nutritional information (calories, protein, carbs, fat)

Format the response as a JSON array of recipe objects with these exact fields:
- id (unique string)
- title (string)
- description (string)
- difficulty (string: "Easy", "Medium", or "Hard")
- cookTime (number in minutes)
- servings (number)
- ingredients (array of strings with measurements)
- instructions (array of strings, each step)
- nutrition (object with calories, protein, carbs, fat as numbers)

Make sure the recipes are authentic Indian dishes that can realistically be made with the provided ingredients. Include popular dishes like curries, dal, rice dishes, etc."""

_DIFFICULTIES = ("Easy", "Medium", "Hard")


class LangChainRecipeGenerator:
    """Generate recipes with any LangChain chat model (see llm_builder)."""

    def __init__(self, llm: BaseChatModel, *, timeout: Optional[float] = 60.0):
        self._llm = llm
        self._parser = JsonOutputParser()
        self._timeout = timeout
        self._chain = self._build_chain()

    def _build_chain(self):
        prompt = ChatPromptTemplate.from_messages([
            ("system", _SYSTEM_INSTRUCTIONS),
            ("user", _USER_PROMPT),
        ])
        return prompt | self._llm | self._parser

    async def generate(self, ingredients: list[str]) -> list[Recipe]:
        """Ask the LLM for recipes using the given ingredients.

        Uses the chain's native async path, so the deadline cancels the
        model call itself.

        Raises:
            RecipeGenerationError: LLM failure, timeout, or a reply that is
                not a JSON array of recipe objects.
        """
        try:
            result = await asyncio.wait_for(
                self._chain.ainvoke({"ingredients": ", ".join(ingredients)}),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise RecipeGenerationError(f"Recipe generation timed out after {self._timeout}s")
        except Exception as e:
            logger.error("Recipe generation failed: %s", e)
            raise RecipeGenerationError(f"Failed to generate recipes: {e}") from e

        if not isinstance(result, list):
            raise RecipeGenerationError(
                f"Expected array of recipes, got {type(result).__name__}"
            )

        recipes = [recipe_from_dict(item) for item in result if isinstance(item, dict)]
        recipes = [r for r in recipes if r.title]
        if not recipes:
            raise RecipeGenerationError("LLM returned no usable recipes")

        logger.info("Generated %d recipe(s): %s", len(recipes), ", ".join(r.title for r in recipes))
        return recipes


def recipe_from_dict(data: dict[str, Any]) -> Recipe:
    """Coerce one LLM recipe object into a Recipe."""
    nutrition = data.get("nutrition") if isinstance(data.get("nutrition"), dict) else {}
    difficulty = str(data.get("difficulty", "Easy")).strip().capitalize()
    return Recipe(
        id=str(data.get("id") or uuid4().hex[:8]),
        title=str(data.get("title", "")).strip(),
        description=str(data.get("description", "")).strip(),
        difficulty=difficulty if difficulty in _DIFFICULTIES else "Medium",
        cook_time=_to_int(data.get("cookTime", data.get("cook_time"))),
        servings=_to_int(data.get("servings")),
        ingredients=_to_str_list(data.get("ingredients")),
        instructions=_to_str_list(data.get("instructions")),
        nutrition=NutritionInfo(
            calories=_to_float(nutrition.get("calories")),
            protein=_to_float(nutrition.get("protein")),
            carbs=_to_float(nutrition.get("carbs")),
            fat=_to_float(nutrition.get("fat")),
        ),
        image=str(data.get("image") or RECIPE_PLACEHOLDER_IMAGE),
    )


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]
