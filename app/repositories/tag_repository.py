"""
Tag repository
"""
from typing import List, Dict, Any
from supabase import Client
import logging

from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class TagRepository(BaseRepository):
    """Repository for recipe tags"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "tags")

    async def find_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Tags whose name matches exactly"""
        return await self.find({"name": name})

    async def search(self, name: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Case-insensitive substring search on tag names"""
        try:
            response = await self._execute(
                lambda: self.table()
                    .select("*")
                    .ilike("name", f"%{name}%")
                    .limit(limit)
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Error searching tags: {str(e)}")
            raise
