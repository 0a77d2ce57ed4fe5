"""
Shared FastAPI dependencies.

- get_factory(): returns the ServiceFactory (set at startup, or by tests).
- get_detection_service() / get_recipe_service(): per-request services.
"""

from __future__ import annotations

from fastapi import Depends

from application.services.ingredient_detection import IngredientDetectionService
from application.services.recipe_generation import RecipeGenerationService
from factory import ServiceFactory

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


def get_detection_service(
    factory: ServiceFactory = Depends(get_factory),
) -> IngredientDetectionService:
    return factory.create_ingredient_detection_service()


def get_recipe_service(
    factory: ServiceFactory = Depends(get_factory),
) -> RecipeGenerationService:
    return factory.create_recipe_generation_service()
