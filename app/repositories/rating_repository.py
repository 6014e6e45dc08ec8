"""
Rating collection repository
"""
from typing import Optional, List, Dict, Any
from supabase import Client
import logging

from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RatingRepository(BaseRepository):
    """Repository for per-recipe rating collections"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "ratings")

    async def find_by_recipe(self, recipe_id: str) -> List[Dict[str, Any]]:
        """All rating collections stored for a recipe (at most one is valid)"""
        return await self.find({"recipe_id": recipe_id})

    async def get_recipe_ids_with_min_average(self, min_rating: float) -> List[str]:
        """Recipe ids whose average rating is at least `min_rating`"""
        try:
            response = await self._execute(
                lambda: self.table()
                    .select("recipe_id")
                    .gte("avg_rating", min_rating)
            )
            return [row["recipe_id"] for row in (response.data or [])]
        except Exception as e:
            logger.error(f"Error fetching recipe ids by rating: {str(e)}")
            raise

    async def save_ratings(
        self,
        rating_id: str,
        ratings: List[Dict[str, Any]],
        avg_rating: Optional[float]
    ) -> Optional[Dict[str, Any]]:
        """Persist the entries and their average in one document update"""
        return await self.update(rating_id, {"ratings": ratings, "avg_rating": avg_rating})
