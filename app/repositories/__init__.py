"""
Repository layer for database operations
Repositories handle all database interactions using Supabase
"""

from app.repositories.base import BaseRepository
from app.repositories.recipe_repository import RecipeRepository
from app.repositories.rating_repository import RatingRepository
from app.repositories.tag_repository import TagRepository
from app.repositories.user_repository import UserRepository
from app.repositories.user_recipe_list_repository import (
    UserRecipeListRepository,
    FavoriteRepository,
    CookListRepository,
    RecentRepository,
)

__all__ = [
    "BaseRepository",
    "RecipeRepository",
    "RatingRepository",
    "TagRepository",
    "UserRepository",
    "UserRecipeListRepository",
    "FavoriteRepository",
    "CookListRepository",
    "RecentRepository",
]
