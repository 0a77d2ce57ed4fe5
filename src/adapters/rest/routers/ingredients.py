"""Ingredient endpoints: photo detection and typed-text parsing."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from adapters.rest.dependencies import get_detection_service
from adapters.rest.schemas import ErrorOut, IngredientsOut, ParseIngredientsBody
from application.services.ingredient_detection import IngredientDetectionService
from domain.models import ImageBlob

router = APIRouter(prefix="/api", tags=["ingredients"])


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@router.post(
    "/detect-ingredients",
    response_model=IngredientsOut,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorOut}},
)
async def detect_ingredients(
    image: Optional[UploadFile] = File(None),
    service: IngredientDetectionService = Depends(get_detection_service),
):
    """Detect ingredients in an uploaded photo.

    Always answers 200 with a non-empty list (canned if every provider
    failed); the only error is a missing image.
    """
    if image is None:
        return _error("No image provided")

    data = await image.read()
    if not data:
        return _error("No image provided")

    blob = ImageBlob(
        data=data,
        mime_type=image.content_type or "image/jpeg",
        filename=image.filename or "",
    )
    outcome = await service.detect(blob)
    return IngredientsOut(ingredients=outcome.ingredients, message=outcome.message or None)


@router.post(
    "/parse-ingredients",
    response_model=IngredientsOut,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorOut}},
)
async def parse_ingredients(
    body: ParseIngredientsBody,
    service: IngredientDetectionService = Depends(get_detection_service),
):
    """Normalize a typed list such as "Tomatoes, onion, rice"."""
    ingredients = service.from_text(body.text)
    if not ingredients:
        return _error("No ingredients provided")
    return IngredientsOut(ingredients=ingredients)
