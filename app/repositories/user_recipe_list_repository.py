"""
Repositories for per-user recipe id lists (favorites, cook list, recents)
"""
from typing import Optional, List, Dict, Any
from supabase import Client
import logging

from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRecipeListRepository(BaseRepository):
    """
    One document per user: {id, user_id, recipe_ids}.
    Subclasses only choose the table.
    """

    async def get_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """The user's list document, None if the user has none yet"""
        rows = await self.find({"user_id": user_id})
        return rows[0] if rows else None

    async def create_for_user(self, user_id: str, recipe_ids: List[str]) -> Optional[Dict[str, Any]]:
        return await self.create({"user_id": user_id, "recipe_ids": recipe_ids})

    async def set_recipe_ids(self, list_id: str, recipe_ids: List[str]) -> Optional[Dict[str, Any]]:
        return await self.update(list_id, {"recipe_ids": recipe_ids})

    async def find_containing(self, recipe_id: str) -> List[Dict[str, Any]]:
        """Every list document that references the recipe"""
        try:
            response = await self._execute(
                lambda: self.table()
                    .select("*")
                    .contains("recipe_ids", [recipe_id])
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Error fetching {self.table_name} containing recipe {recipe_id}: {str(e)}")
            raise


class FavoriteRepository(UserRecipeListRepository):
    """Repository for favorite recipes"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "favorites")


class CookListRepository(UserRecipeListRepository):
    """Repository for the to-cook list"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "cook_lists")


class RecentRepository(UserRecipeListRepository):
    """Repository for recently viewed recipes"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "recents")
