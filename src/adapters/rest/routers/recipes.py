"""Recipe suggestion endpoint."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from adapters.rest.dependencies import get_recipe_service
from adapters.rest.schemas import ErrorOut, GenerateRecipesBody, RecipeOut
from application.services.recipe_generation import RecipeGenerationService

router = APIRouter(prefix="/api", tags=["recipes"])


@router.post(
    "/generate-recipes",
    response_model=list[RecipeOut],
    responses={400: {"model": ErrorOut}},
)
async def generate_recipes(
    body: GenerateRecipesBody,
    service: RecipeGenerationService = Depends(get_recipe_service),
):
    try:
        suggestions = await service.generate(body.ingredients)
    except ValueError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})
    return [RecipeOut.from_domain(recipe) for recipe in suggestions.recipes]
