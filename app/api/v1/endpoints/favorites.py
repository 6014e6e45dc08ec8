"""
Favorites endpoints
"""
from fastapi import APIRouter, Depends
from typing import Optional
import logging

from app.core.security import get_current_user, get_current_user_optional
from app.core.services import ServiceContainer, get_services
from app.api.v1.schemas.common import PaginationParams
from app.api.v1.schemas.recipe import RecipeListResponse
from app.domain.models import ListResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get("", response_model=RecipeListResponse)
async def get_own_favorites(
    pagination: PaginationParams = Depends(),
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Recipes on the user's favorites, in the order they were added"""
    recipe_ids = await services.favorites.recipe_ids(current_user["id"])
    return await services.provider.get_by_ids(
        recipe_ids, current_user["id"], pagination.page, pagination.page_size
    )


@router.get("/user/{user_id}", response_model=RecipeListResponse)
async def get_user_favorites(
    user_id: str,
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    recipe_ids = await services.favorites.recipe_ids(user_id)
    return await services.provider.get_by_ids(
        recipe_ids, current_user["id"] if current_user else None, pagination.page, pagination.page_size
    )


@router.post("/{recipe_id}", response_model=ListResponse)
async def add_to_favorites(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    await services.recipes.get_record(recipe_id)
    return await services.favorites.add(current_user["id"], recipe_id)


@router.delete("/{recipe_id}", response_model=ListResponse)
async def remove_from_favorites(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    return await services.favorites.remove(current_user["id"], recipe_id)
