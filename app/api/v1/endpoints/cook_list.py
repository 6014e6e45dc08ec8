"""
Cook List endpoints
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
router = APIRouter(prefix="/cook-list", tags=["Cook List"])


@router.get("", response_model=RecipeListResponse)
async def get_own_cook_list(
    pagination: PaginationParams = Depends(),
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Recipes on the user's cook list, in the order they were added"""
    recipe_ids = await services.cook_list.recipe_ids(current_user["id"])
    return await services.provider.get_by_ids(
        recipe_ids, current_user["id"], pagination.page, pagination.page_size
    )


@router.get("/user/{user_id}", response_model=RecipeListResponse)
async def get_user_cook_list(
    user_id: str,
    pagination: PaginationParams = Depends(),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    services: ServiceContainer = Depends(get_services)
):
    recipe_ids = await services.cook_list.recipe_ids(user_id)
    return await services.provider.get_by_ids(
        recipe_ids, current_user["id"] if current_user else None, pagination.page, pagination.page_size
    )


@router.post("/{recipe_id}", response_model=ListResponse)
async def add_to_cook_list(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    await services.recipes.get_record(recipe_id)
    return await services.cook_list.add(current_user["id"], recipe_id)


@router.delete("/{recipe_id}", response_model=ListResponse)
async def remove_from_cook_list(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    return await services.cook_list.remove(current_user["id"], recipe_id)
