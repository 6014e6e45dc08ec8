"""
Main API v1 router
"""
from fastapi import APIRouter

from app.api.v1.endpoints import recipes, ratings, favorites, cook_list, recents, tags
from app.api.v1.schemas.common import ErrorResponse

# Service errors are rendered as ErrorResponse by the application exception handler
api_router = APIRouter(responses={
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
})

# Include all endpoint routers
api_router.include_router(recipes.router)
api_router.include_router(ratings.router)
api_router.include_router(favorites.router)
api_router.include_router(cook_list.router)
api_router.include_router(recents.router)
api_router.include_router(tags.router)
