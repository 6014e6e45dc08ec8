"""
Tag service
"""
from typing import List, Optional
from supabase import Client
import logging

from app.domain.enums import ResolutionTarget
from app.domain.exceptions import DataIntegrityError, ResolutionError, StorageError
from app.domain.models import Tag
from app.repositories.tag_repository import TagRepository

logger = logging.getLogger(__name__)


class TagService:
    """Service for recipe tags"""

    def __init__(self, supabase: Client):
        self.tag_repo = TagRepository(supabase)

    async def check_for_tag(self, name: str) -> str:
        """
        Look up a tag by name, creating it when it does not exist yet.

        Returns:
            The tag id

        Raises:
            DataIntegrityError: If more than one tag carries the name
        """
        logger.info(f"Checking if tag {name} exists")
        try:
            tags = await self.tag_repo.find_by_name(name)
            if len(tags) > 1:
                raise DataIntegrityError(f"Tag name {name} is stored {len(tags)} times", "tags")
            if tags:
                return tags[0]["id"]

            logger.info(f"Creating tag: {name}")
            tag = await self.tag_repo.create({"name": name})
        except DataIntegrityError:
            raise
        except Exception as e:
            raise StorageError(str(e) or "Failed to check id for tag", "tags", "check_for_tag") from e

        if not tag:
            raise StorageError(f"Tag {name} was not created", "tags", "create")
        return tag["id"]

    async def find_id(self, name: str) -> Optional[str]:
        """Id of an existing tag, None when no tag has this name"""
        try:
            tags = await self.tag_repo.find_by_name(name)
        except Exception as e:
            raise StorageError(str(e) or "Failed to get tag by name", "tags", "find") from e
        if len(tags) > 1:
            raise DataIntegrityError(f"Tag name {name} is stored {len(tags)} times", "tags")
        return tags[0]["id"] if tags else None

    async def get(self, tag_id: str) -> Tag:
        """Get a tag by id"""
        try:
            row = await self.tag_repo.get_by_id(tag_id)
        except Exception as e:
            raise StorageError(str(e) or "Couldn't load tag by id", "tags", "get") from e
        if not row:
            raise ResolutionError(ResolutionTarget.TAG, f"Tag {tag_id} not found", 404)
        return Tag(**row)

    async def search(self, name: str) -> List[Tag]:
        """Tags whose name contains `name` (case-insensitive)"""
        try:
            rows = await self.tag_repo.search(name)
        except Exception as e:
            raise StorageError(str(e) or "Failed to get possible tags by name", "tags", "search") from e
        return [Tag(**row) for row in rows]
