"""
Recipe endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional
import logging

from app.core.security import get_current_user, get_current_user_optional
from app.core.services import ServiceContainer, get_services
from app.api.v1.schemas.common import PaginationParams
from app.api.v1.schemas.recipe import (
    RecipeCreateRequest,
    RecipeUpdateRequest,
    RecipeFilterRequest,
    RecipeTagsRequest,
    RecipeResponse,
    RecipeListResponse,
    RecipeDeleteResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["Recipes"])


def _viewer_id(current_user: Optional[dict]) -> Optional[str]:
    return current_user["id"] if current_user else None


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe_data: RecipeCreateRequest,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Create a new recipe; tag names are created when unknown"""
    record = await services.recipes.create_recipe(recipe_data.model_dump(mode="json"), current_user["id"])
    return await services.assembler.convert_recipe(record, current_user["id"], track_view=False)


@router.get("/featured", response_model=RecipeListResponse)
async def get_featured_recipes(
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """Newest recipes"""
    return await services.provider.get_featured(
        _viewer_id(current_user), pagination.page, pagination.page_size
    )


@router.post("/filter", response_model=RecipeListResponse)
async def filter_recipes(
    filters: RecipeFilterRequest,
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """
    Search by name, minimum rating and tags at once.
    Without any criterion the featured recipes are returned.
    """
    return await services.provider.filter(
        filters.text,
        filters.rating_min,
        filters.tags,
        _viewer_id(current_user),
        pagination.page,
        pagination.page_size,
    )


@router.get("/search", response_model=RecipeListResponse)
async def search_recipes_by_name(
    name: str = Query(..., min_length=2),
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """Recipes whose name contains the query (case-insensitive)"""
    return await services.provider.get_by_name(
        name, _viewer_id(current_user), pagination.page, pagination.page_size
    )


@router.post("/by-tags", response_model=RecipeListResponse)
async def get_recipes_by_tags(
    request: RecipeTagsRequest,
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    return await services.provider.get_by_tags(
        request.tags, request.intersect, _viewer_id(current_user), pagination.page, pagination.page_size
    )


@router.get("/by-rating", response_model=RecipeListResponse)
async def get_recipes_by_min_rating(
    rating: float = Query(..., ge=0, le=5.0),
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """Recipes with an average rating of at least `rating`"""
    return await services.provider.get_by_min_rating(
        rating, _viewer_id(current_user), pagination.page, pagination.page_size
    )


@router.get("/mine", response_model=RecipeListResponse)
async def get_my_recipes(
    pagination: PaginationParams = Depends(),
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    return await services.provider.get_from_user(
        current_user["id"], current_user["id"], pagination.page, pagination.page_size
    )


@router.get("/user/{user_id}", response_model=RecipeListResponse)
async def get_user_recipes(
    user_id: str,
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """Recipes created by a user"""
    return await services.provider.get_from_user(
        user_id, _viewer_id(current_user), pagination.page, pagination.page_size
    )


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    """Get a recipe; signed-in viewers get it added to their recently viewed recipes"""
    return await services.provider.get_by_id(recipe_id, _viewer_id(current_user))


@router.patch("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: str,
    recipe_data: RecipeUpdateRequest,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Update a recipe (owner only)"""
    record = await services.recipes.update_recipe(
        recipe_id, recipe_data.model_dump(mode="json", exclude_unset=True), current_user["id"]
    )
    return await services.assembler.convert_recipe(record, current_user["id"], track_view=False)


@router.delete("/{recipe_id}", response_model=RecipeDeleteResponse)
async def delete_recipe(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Delete a recipe with its ratings, list entries and picture (owner only)"""
    failed = await services.recipes.delete_recipe(recipe_id, current_user["id"])
    if failed:
        return RecipeDeleteResponse(message="Recipe deleted with incomplete cleanup", failed_cleanups=failed)
    return RecipeDeleteResponse(message="Recipe deleted successfully")
