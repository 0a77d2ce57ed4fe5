from __future__ import annotations

import asyncio
import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from application.services.recipe_generation import FALLBACK_RECIPES, RecipeGenerationService
from domain.exceptions import RecipeGenerationError
from domain.models import RECIPE_PLACEHOLDER_IMAGE
from infrastructure.llm.recipe_generator import LangChainRecipeGenerator, recipe_from_dict

DAL_TADKA = {
    "id": "dal-1",
    "title": "Dal Tadka",
    "description": "Yellow lentils tempered with cumin and garlic.",
    "difficulty": "easy",
    "cookTime": "35",
    "servings": 4,
    "ingredients": ["1 cup toor dal", "3 cloves garlic", ""],
    "instructions": ["Boil the dal", "Prepare the tadka", "Combine"],
    "nutrition": {"calories": 220, "protein": "12", "carbs": 30.5, "fat": None},
}


def generator_replying(*replies: str) -> LangChainRecipeGenerator:
    return LangChainRecipeGenerator(FakeListChatModel(responses=list(replies)), timeout=5)


def test_generator_parses_json_array():
    generator = generator_replying(json.dumps([DAL_TADKA]))

    [recipe] = asyncio.run(generator.generate(["toor dal", "garlic"]))

    assert recipe.id == "dal-1"
    assert recipe.title == "Dal Tadka"
    assert recipe.difficulty == "Easy"
    assert recipe.cook_time == 35
    assert recipe.ingredients == ["1 cup toor dal", "3 cloves garlic"]
    assert recipe.nutrition.protein == 12.0
    assert recipe.nutrition.fat == 0.0
    assert recipe.image == RECIPE_PLACEHOLDER_IMAGE


def test_generator_accepts_fenced_json():
    generator = generator_replying("```json\n" + json.dumps([DAL_TADKA]) + "\n```")
    assert [r.title for r in asyncio.run(generator.generate(["dal"]))] == ["Dal Tadka"]


@pytest.mark.parametrize(
    "reply",
    [
        "Sorry, I cannot help with that.",
        json.dumps({"title": "Not a list"}),
        json.dumps([{"description": "no title"}, "junk"]),
    ],
)
def test_generator_rejects_unusable_replies(reply):
    with pytest.raises(RecipeGenerationError):
        asyncio.run(generator_replying(reply).generate(["rice"]))


def test_recipe_from_dict_defaults():
    recipe = recipe_from_dict({"title": "Jeera Rice", "difficulty": "impossible", "cook_time": 20})
    assert recipe.difficulty == "Medium"
    assert recipe.cook_time == 20
    assert recipe.servings == 0
    assert recipe.instructions == []
    assert recipe.id


class BrokenGenerator:
    async def generate(self, ingredients):
        raise RecipeGenerationError("model unavailable")


class RecordingGenerator:
    def __init__(self):
        self.received = None

    async def generate(self, ingredients):
        self.received = ingredients
        return [recipe_from_dict(DAL_TADKA)]


def test_service_uses_generator_with_normalized_ingredients():
    generator = RecordingGenerator()
    result = asyncio.run(RecipeGenerationService(generator).generate([" Toor Dal ", "toor dal", "Garlic"]))

    assert generator.received == ["toor dal", "garlic"]
    assert result.source == "llm"
    assert not result.is_fallback


@pytest.mark.parametrize("generator", [None, BrokenGenerator()])
def test_service_falls_back_to_canned_recipe(generator):
    result = asyncio.run(RecipeGenerationService(generator).generate(["potato"]))

    assert result.is_fallback
    assert result.recipes == FALLBACK_RECIPES
    assert result.recipes[0].title == "Simple Vegetable Curry"


@pytest.mark.parametrize("ingredients", [[], ["", " "], ["x"]])
def test_service_rejects_empty_input(ingredients):
    with pytest.raises(ValueError, match="No ingredients provided"):
        asyncio.run(RecipeGenerationService(None).generate(ingredients))
