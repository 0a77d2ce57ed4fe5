"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.models import Recipe


# --- Errors ---

class ErrorOut(BaseModel):
    error: str


# --- Ingredients ---

class IngredientsOut(BaseModel):
    ingredients: list[str]
    message: Optional[str] = None


class ParseIngredientsBody(BaseModel):
    text: str = ""


# --- Recipes ---

class GenerateRecipesBody(BaseModel):
    ingredients: list[str] = Field(default_factory=list)


class NutritionOut(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float


class RecipeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    difficulty: str
    cook_time: int = Field(..., alias="cookTime")
    servings: int
    ingredients: list[str]
    instructions: list[str]
    nutrition: NutritionOut
    image: str

    @classmethod
    def from_domain(cls, recipe: Recipe) -> RecipeOut:
        return cls(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            difficulty=recipe.difficulty,
            cook_time=recipe.cook_time,
            servings=recipe.servings,
            ingredients=list(recipe.ingredients),
            instructions=list(recipe.instructions),
            nutrition=NutritionOut(
                calories=recipe.nutrition.calories,
                protein=recipe.nutrition.protein,
                carbs=recipe.nutrition.carbs,
                fat=recipe.nutrition.fat,
            ),
            image=recipe.image,
        )


# --- Health ---

class HealthOut(BaseModel):
    status: str
    version: str
    providers: dict[str, bool]
