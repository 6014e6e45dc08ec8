"""
Rating endpoints
"""
from fastapi import APIRouter, Depends
import logging

from app.core.security import get_current_user
from app.core.services import ServiceContainer, get_services
from app.api.v1.schemas.rating import RatingRequest, MyRatingResponse
from app.domain.models import RatingResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("/{recipe_id}", response_model=RatingResponse)
async def add_rating(
    recipe_id: str,
    rating_data: RatingRequest,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """
    Rate a recipe.

    Rating a recipe again with a different value updates the rating;
    the same value is reported with success=false.
    """
    await services.recipes.get_record(recipe_id)
    return await services.ratings.add_rating(recipe_id, current_user["id"], rating_data.rating)


@router.put("/{recipe_id}", response_model=RatingResponse)
async def update_rating(
    recipe_id: str,
    rating_data: RatingRequest,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    return await services.ratings.update_rating(recipe_id, current_user["id"], rating_data.rating)


@router.delete("/{recipe_id}", response_model=RatingResponse)
async def remove_rating(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    return await services.ratings.remove_rating(recipe_id, current_user["id"])


@router.get("/{recipe_id}/me", response_model=MyRatingResponse)
async def get_my_rating(
    recipe_id: str,
    current_user: dict = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services)
):
    """The user's own rating, 0 when the recipe is not rated by them"""
    rating = await services.ratings.get_rating_for_user(recipe_id, current_user["id"])
    return MyRatingResponse(recipe_id=recipe_id, rating=rating)
