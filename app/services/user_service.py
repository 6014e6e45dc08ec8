"""
User service
"""
from supabase import Client
import logging

from app.domain.enums import ResolutionTarget
from app.domain.exceptions import ResolutionError, StorageError
from app.domain.models import NO_PICTURE, SanitizedUser
from app.repositories.recipe_repository import RecipeRepository
from app.repositories.user_repository import UserRepository
from app.services.photo_service import PhotoService

logger = logging.getLogger(__name__)


class UserService:
    """Service for user profiles"""

    def __init__(self, supabase: Client, photo_service: PhotoService):
        self.user_repo = UserRepository(supabase)
        self.recipe_repo = RecipeRepository(supabase)
        self.photo_service = photo_service

    async def get_sanitized_user(self, user_id: str) -> SanitizedUser:
        """Public view of a user: no email, avatar resolved to a URL"""
        try:
            user = await self.user_repo.get_by_id(user_id)
        except Exception as e:
            raise StorageError(str(e) or "Failed to load user", "users", "get") from e
        if not user:
            raise ResolutionError(ResolutionTarget.USER, f"User {user_id} not found", 404)

        avatar = user.get("avatar") or NO_PICTURE
        return SanitizedUser(
            id=user["id"],
            username=user["username"],
            joined_at=user.get("joined_at"),
            avatar_url=await self.photo_service.get_image_url(avatar) if avatar != NO_PICTURE else "",
            role=user.get("role") or "user",
        )

    async def owns_recipe(self, user_id: str, recipe_id: str) -> bool:
        """Check whether the user created the recipe"""
        try:
            recipe = await self.recipe_repo.get_by_id(recipe_id)
        except Exception as e:
            raise StorageError(str(e) or "Failed to load recipe", "recipes", "get") from e
        if not recipe:
            raise ResolutionError(ResolutionTarget.RECIPE, f"Recipe {recipe_id} not found", 404)
        return recipe["owner"] == user_id
