"""
Photo URL service for Supabase Storage
"""
from typing import Dict, Any
from supabase import Client
import logging

from app.core.events import EventType, NotificationBus
from app.domain.models import NO_PICTURE

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_BUCKET = "recipe-images"


class PhotoService:
    """Resolves stored picture names to URLs and removes pictures"""

    def __init__(self, supabase: Client, bucket: str = DEFAULT_STORAGE_BUCKET):
        self.supabase = supabase
        self.bucket = bucket

    def register_handlers(self, bus: NotificationBus):
        bus.subscribe(EventType.RECIPE_DELETION, self.handle_recipe_deletion)

    async def get_image_url(self, filename: str) -> str:
        """Public URL of a stored picture"""
        return self.supabase.storage.from_(self.bucket).get_public_url(filename)

    async def delete_image(self, filename: str):
        """Remove a picture from storage"""
        logger.info(f"Deleting image {filename} from {self.bucket}")
        self.supabase.storage.from_(self.bucket).remove([filename])

    async def handle_recipe_deletion(self, payload: Dict[str, Any]):
        picture = payload.get("picture") or NO_PICTURE
        if picture != NO_PICTURE:
            await self.delete_image(picture)
