"""
Recipe service for creation, update and deletion
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from supabase import Client
import logging

from app.core.events import EventType, NotificationBus
from app.domain.enums import ResolutionTarget
from app.domain.exceptions import AuthorizationError, ResolutionError, StorageError
from app.domain.models import NO_PICTURE, UNRATED, RecipeRecord
from app.repositories.recipe_repository import RecipeRepository
from app.services.recipe_assembler import RecipeAssembler
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

# Fields a recipe owner may change
EDITABLE_FIELDS = ("name", "description", "ingredients", "steps", "picture")


class RecipeService:
    """Service for recipe business logic"""

    def __init__(
        self,
        supabase: Client,
        assembler: RecipeAssembler,
        user_service: UserService,
        event_bus: NotificationBus
    ):
        self.recipe_repo = RecipeRepository(supabase)
        self.assembler = assembler
        self.user_service = user_service
        self.event_bus = event_bus

    def register_handlers(self, bus: NotificationBus):
        bus.subscribe(EventType.RECIPE_FIRST_RATING, self.handle_first_rating)
        bus.subscribe(EventType.RECIPE_DELETION, self.handle_recipe_deletion)

    async def get_record(self, recipe_id: str) -> RecipeRecord:
        """Load a persisted recipe; missing recipes raise ResolutionError (404)"""
        try:
            row = await self.recipe_repo.get_by_id(recipe_id)
        except Exception as e:
            raise StorageError(str(e) or "Failed to fetch recipe by id", "recipes", "get") from e
        if not row:
            raise ResolutionError(ResolutionTarget.RECIPE, f"Recipe {recipe_id} not found", 404)
        return RecipeRecord(**row)

    async def create_recipe(self, data: Dict[str, Any], owner_id: str) -> RecipeRecord:
        """
        Store a new recipe owned by `owner_id`.

        Tag names in `data["tags"]` are converted to tag ids (created when new).
        The recipe starts unrated and, unless a picture is given, without picture.
        """
        tag_ids = await self.assembler.convert_tags_to_id(data.get("tags") or [])
        now = datetime.now(timezone.utc).isoformat()

        recipe_data = {
            "name": data["name"],
            "description": data.get("description") or "",
            "ingredients": _dump_ingredients(data.get("ingredients") or []),
            "steps": list(data.get("steps") or []),
            "tags": tag_ids,
            "owner": owner_id,
            "rating_ref": UNRATED,
            "picture": data.get("picture") or NO_PICTURE,
            "created_at": now,
            "updated_at": now,
        }

        try:
            row = await self.recipe_repo.create(recipe_data)
        except Exception as e:
            raise StorageError(str(e) or "Failed to create recipe", "recipes", "create") from e
        if not row:
            raise StorageError("Recipe was not created", "recipes", "create")

        logger.info(f"User[{owner_id}] created recipe {row['id']}")
        return RecipeRecord(**row)

    async def update_recipe(self, recipe_id: str, data: Dict[str, Any], user_id: str) -> RecipeRecord:
        """Apply the owner's changes; tag names are converted again when given"""
        record = await self.get_record(recipe_id)
        await self._check_owner(record, user_id, "update")

        update_data = {key: data[key] for key in EDITABLE_FIELDS if data.get(key) is not None}
        if "ingredients" in update_data:
            update_data["ingredients"] = _dump_ingredients(update_data["ingredients"])
        if data.get("tags") is not None:
            update_data["tags"] = await self.assembler.convert_tags_to_id(data["tags"])
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            row = await self.recipe_repo.update(recipe_id, update_data)
        except Exception as e:
            raise StorageError(str(e) or "Failed to update recipe", "recipes", "update") from e
        if not row:
            raise StorageError(f"Recipe {recipe_id} was not updated", "recipes", "update")

        logger.info(f"User[{user_id}] updated recipe {recipe_id} ({', '.join(update_data)})")
        return RecipeRecord(**row)

    async def delete_recipe(self, recipe_id: str, user_id: str) -> List[str]:
        """
        Delete a recipe and everything that hangs off it.

        The deletion is broadcast so the recipe store, ratings, user lists and
        photos clean up before this returns.

        Returns:
            Names of the cleanup handlers that failed
        """
        record = await self.get_record(recipe_id)
        await self._check_owner(record, user_id, "delete")

        logger.info(f"User[{user_id}] deleting recipe {recipe_id}")
        failed = await self.event_bus.broadcast(
            EventType.RECIPE_DELETION,
            {"recipe_id": recipe_id, "picture": record.picture}
        )
        if failed:
            logger.error(f"Recipe[{recipe_id}] deletion incomplete, failed handlers: {failed}")
        return failed

    # ============= Events =============

    async def handle_first_rating(self, payload: Dict[str, Any]):
        """Link a recipe to its newly created rating collection"""
        recipe_id, rating_id = payload["recipe_id"], payload["rating_id"]
        try:
            await self.recipe_repo.set_rating_ref(recipe_id, rating_id)
        except Exception as e:
            raise StorageError(str(e) or "Failed to link rating collection", "recipes", "update") from e
        logger.info(f"Recipe[{recipe_id}] linked to rating collection {rating_id}")

    async def handle_recipe_deletion(self, payload: Dict[str, Any]):
        recipe_id = payload["recipe_id"]
        try:
            await self.recipe_repo.delete(recipe_id)
        except Exception as e:
            raise StorageError(str(e) or "Failed to delete recipe", "recipes", "remove") from e
        logger.info(f"Recipe[{recipe_id}] removed from store")

    async def _check_owner(self, record: RecipeRecord, user_id: str, action: str):
        if not await self.user_service.owns_recipe(user_id, record.id):
            logger.warning(f"User[{user_id}] tried to {action} recipe {record.id} owned by {record.owner}")
            raise AuthorizationError(f"Not authorized to {action} this recipe")


def _dump_ingredients(ingredients: List[Any]) -> List[Dict[str, Any]]:
    return [
        ingredient.model_dump(mode="json") if hasattr(ingredient, "model_dump") else dict(ingredient)
        for ingredient in ingredients
    ]
