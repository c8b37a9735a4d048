"""
RecipeBox Backend: Recipe Route Handlers
========================================

What:  The /api/recipes endpoints (list, detail, create, update, delete)
       and their OPTIONS preflight answers.
How:   Handlers stay thin: they read query, form and path values, delegate
       to RecipeService and wrap results in response models. Errors are
       raised as exceptions and rendered by the global handlers.
Who:   Called by the frontend and by anything else speaking the JSON API.

Endpoints:
    GET     /api/recipes          list, filtered or sorted (200)
    POST    /api/recipes          create from a form, optional image (201)
    GET     /api/recipes/{id}     detail (200 / 404)
    PUT     /api/recipes/{id}     full replace, optional image (200 / 404)
    DELETE  /api/recipes/{id}     remove (200 / 404)
    OPTIONS both paths            empty 200 carrying the CORS headers
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from recipebox.dependencies import get_recipe_service
from recipebox.schemas.recipe import (
    ErrorResponse,
    RecipeDeleteResponse,
    RecipeInput,
    RecipeMutationResponse,
    RecipeQuery,
    RecipeResponse,
)
from recipebox.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Recipes"])

_ERROR_RESPONSES = {
    400: {"description": "Malformed input", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_NOT_FOUND_RESPONSE = {404: {"description": "Recipe not found", "model": ErrorResponse}}


# ── Shared Dependencies ───────────────────────────────────────────────────

def recipe_form(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    protein: Optional[str] = Form(None),
    carbs: Optional[str] = Form(None),
    is_vegan: Optional[str] = Form(None),
    is_vegetarian: Optional[str] = Form(None),
    is_gluten_free: Optional[str] = Form(None),
    cook_time: Optional[str] = Form(None),
    difficulty: Optional[str] = Form(None),
    ingredients: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
) -> RecipeInput:
    """
    Collect the recipe form fields as raw strings and coerce them.

    Fields arrive as strings so that coercion failures surface through
    RecipeInput.from_form as a ValidationError naming the field.
    """
    return RecipeInput.from_form(
        {
            "title": title,
            "description": description,
            "protein": protein,
            "carbs": carbs,
            "is_vegan": is_vegan,
            "is_vegetarian": is_vegetarian,
            "is_gluten_free": is_gluten_free,
            "cook_time": cook_time,
            "difficulty": difficulty,
            "ingredients": ingredients,
            "instructions": instructions,
        }
    )


async def _read_image(image: Optional[UploadFile]):
    """Return (filename, bytes) of an uploaded image, or (None, None)."""
    if image is None or not image.filename:
        return None, None
    try:
        content = await image.read()
    finally:
        await image.close()
    return image.filename, content


# ── Collection ────────────────────────────────────────────────────────────

@router.get(
    "/recipes",
    response_model=List[RecipeResponse],
    responses=_ERROR_RESPONSES,
    summary="List recipes",
    description=(
        "Returns every recipe, newest first. Any of minProtein, maxProtein, "
        "minCarbs, maxCarbs, vegan, vegetarian or glutenFree switches to "
        "filtering (criteria AND together, negative bounds ignored); "
        "otherwise sortBy (cook_time or difficulty) with order asc/desc "
        "switches to sorting. A non-numeric bound is rejected with 400 "
        "rather than ignored."
    ),
)
async def list_recipes(
    min_protein: Optional[float] = Query(None, alias="minProtein"),
    max_protein: Optional[float] = Query(None, alias="maxProtein"),
    min_carbs: Optional[float] = Query(None, alias="minCarbs"),
    max_carbs: Optional[float] = Query(None, alias="maxCarbs"),
    vegan: Optional[str] = Query(None, description="'true' or '1' to keep only vegan recipes"),
    vegetarian: Optional[str] = Query(None),
    gluten_free: Optional[str] = Query(None, alias="glutenFree"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: str = Query("desc", description="'asc' or 'desc'"),
    service: RecipeService = Depends(get_recipe_service),
) -> List[RecipeResponse]:
    query = RecipeQuery(
        min_protein=min_protein,
        max_protein=max_protein,
        min_carbs=min_carbs,
        max_carbs=max_carbs,
        vegan=vegan,
        vegetarian=vegetarian,
        gluten_free=gluten_free,
        sort_by=sort_by,
        order=order,
    )
    recipes = await service.list_recipes(query)
    return [RecipeResponse.model_validate(recipe) for recipe in recipes]


@router.post(
    "/recipes",
    status_code=201,
    response_model=RecipeMutationResponse,
    responses=_ERROR_RESPONSES,
    summary="Create a recipe",
)
async def create_recipe(
    data: RecipeInput = Depends(recipe_form),
    image: Optional[UploadFile] = File(None, description="Optional recipe image"),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeMutationResponse:
    image_name, image_content = await _read_image(image)
    recipe = await service.create_recipe(data, image_name, image_content)
    return RecipeMutationResponse(
        message="Recipe created successfully",
        id=recipe.id,
        recipe=RecipeResponse.model_validate(recipe),
    )


@router.options("/recipes", include_in_schema=False)
async def recipes_preflight() -> Response:
    return Response(status_code=200)


# ── Single Recipe ─────────────────────────────────────────────────────────

@router.get(
    "/recipes/{recipe_id}",
    response_model=RecipeResponse,
    responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
    summary="Get a single recipe by ID",
)
async def get_recipe(
    recipe_id: int,
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    recipe = await service.get_recipe(recipe_id)
    return RecipeResponse.model_validate(recipe)


@router.put(
    "/recipes/{recipe_id}",
    response_model=RecipeMutationResponse,
    responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
    summary="Replace a recipe",
    description=(
        "Replaces every field of the recipe. Without a new image the "
        "current image_url is kept."
    ),
)
async def update_recipe(
    recipe_id: int,
    data: RecipeInput = Depends(recipe_form),
    image: Optional[UploadFile] = File(None, description="Optional replacement image"),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeMutationResponse:
    image_name, image_content = await _read_image(image)
    recipe = await service.update_recipe(recipe_id, data, image_name, image_content)
    return RecipeMutationResponse(
        message="Recipe updated successfully",
        id=recipe.id,
        recipe=RecipeResponse.model_validate(recipe),
    )


@router.delete(
    "/recipes/{recipe_id}",
    response_model=RecipeDeleteResponse,
    responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
    summary="Delete a recipe",
)
async def delete_recipe(
    recipe_id: int,
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeDeleteResponse:
    await service.delete_recipe(recipe_id)
    return RecipeDeleteResponse(id=recipe_id)


@router.options("/recipes/{recipe_id}", include_in_schema=False)
async def recipe_preflight(recipe_id: str) -> Response:
    return Response(status_code=200)
