"""
Recipe repository for database operations
"""
from typing import Optional, List, Dict, Any
from supabase import Client
import logging

from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RecipeRepository(BaseRepository):
    """Repository for recipe operations"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "recipes")

    async def get_by_owner(self, user_id: str) -> List[Dict[str, Any]]:
        """Get recipes created by a user, newest first"""
        return await self.find({"owner": user_id}, order_by="created_at")

    async def search_by_name(
        self,
        name: str,
        recipe_ids: Optional[List[str]] = None,
        tag_ids: Optional[List[str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Case-insensitive name search.

        Args:
            name: Substring the recipe name must contain
            recipe_ids: Restrict the search to these recipes
            tag_ids: Recipes must carry every one of these tags
        """
        def build():
            query = self.table()\
                .select("*")\
                .ilike("name", f"%{name}%")
            if recipe_ids is not None:
                query = query.in_("id", recipe_ids)
            if tag_ids:
                query = query.contains("tags", tag_ids)
            return query.order("created_at", desc=True)

        try:
            response = await self._execute(build)
            return response.data or []
        except Exception as e:
            logger.error(f"Error searching recipes by name: {str(e)}")
            raise

    async def get_by_tags(
        self,
        tag_ids: List[str],
        recipe_ids: Optional[List[str]] = None
    ) -> List[Dict[str, Any]]:
        """Recipes carrying every tag in `tag_ids`"""
        def build():
            query = self.table()\
                .select("*")\
                .contains("tags", tag_ids)
            if recipe_ids is not None:
                query = query.in_("id", recipe_ids)
            return query.order("created_at", desc=True)

        try:
            response = await self._execute(build)
            return response.data or []
        except Exception as e:
            logger.error(f"Error fetching recipes by tags: {str(e)}")
            raise

    async def get_featured(self, limit: int) -> List[Dict[str, Any]]:
        """Newest recipes, capped at `limit`"""
        return await self.find(limit=limit, order_by="created_at")

    async def set_rating_ref(self, recipe_id: str, rating_id: str) -> Optional[Dict[str, Any]]:
        """Link a recipe to its rating collection"""
        return await self.update(recipe_id, {"rating_ref": rating_id})

    async def get_by_any_tag(self, tag_ids: List[str]) -> List[Dict[str, Any]]:
        """Recipes carrying at least one tag in `tag_ids`"""
        try:
            response = await self._execute(
                lambda: self.table()
                    .select("*")
                    .overlaps("tags", tag_ids)
                    .order("created_at", desc=True)
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Error fetching recipes by any tag: {str(e)}")
            raise
