"""
Recently viewed recipes endpoints
"""
from fastapi import APIRouter, Depends
import logging

from app.core.security import get_current_user
from app.core.services import ServiceContainer, get_services
from app.api.v1.schemas.common import PaginationParams
from app.api.v1.schemas.recipe import RecipeListResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recents", tags=["Recents"])


@router.get("", response_model=RecipeListResponse)
async def get_recents(
    pagination: PaginationParams = Depends(),
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """Recently viewed recipes, newest first"""
    recipe_ids = await services.recents.recipe_ids(current_user["id"])
    return await services.provider.get_by_ids(
        recipe_ids, current_user["id"], pagination.page, pagination.page_size
    )
