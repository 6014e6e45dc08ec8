"""
Per-user recipe lists: favorites, cook list and recently viewed recipes
"""
from typing import Dict, Any, List, Optional
from supabase import Client
import logging

from app.core.events import EventType, NotificationBus
from app.core.locks import KeyedLock
from app.domain.enums import ListOperation
from app.domain.exceptions import StorageError
from app.domain.models import ListResponse
from app.repositories.user_recipe_list_repository import (
    UserRecipeListRepository,
    FavoriteRepository,
    CookListRepository,
    RecentRepository,
)

logger = logging.getLogger(__name__)


class UserRecipeListService:
    """
    Shared behaviour of the per-user recipe id lists.

    Each user has at most one list document; it is created on the first add.
    Mutations of one user's document are serialized per user.
    """

    list_name = "list"

    def __init__(self, repository: UserRecipeListRepository, locks: Optional[KeyedLock] = None):
        self.repo = repository
        self._locks = locks or KeyedLock()

    def register_handlers(self, bus: NotificationBus):
        bus.subscribe(EventType.RECIPE_DELETION, self.handle_recipe_deletion)

    async def add(self, user_id: str, recipe_id: str) -> ListResponse:
        """Add a recipe to the user's list; adding twice is rejected with success=False"""
        async with self._locks.acquire(user_id):
            document = await self._get_document(user_id)
            if document is None:
                logger.info(f"User[{user_id}] creating {self.list_name} with recipe {recipe_id}")
                await self._store(self.repo.create_for_user(user_id, [recipe_id]), "create")
                return self._response(
                    True, ListOperation.ADD, recipe_id, user_id,
                    f"Created {self.list_name} for user ({user_id}) with recipe ({recipe_id})"
                )

            recipe_ids = list(document.get("recipe_ids") or [])
            if recipe_id in recipe_ids:
                logger.warning(f"User[{user_id}] tried to add recipe ({recipe_id}) which is already present")
                return self._response(
                    False, ListOperation.ADD, recipe_id, user_id,
                    f"Couldn't add recipe ({recipe_id}) already present"
                )

            logger.info(f"User[{user_id}] adding to {self.list_name}: {recipe_id}")
            recipe_ids.append(recipe_id)
            await self._store(self.repo.set_recipe_ids(document["id"], recipe_ids), "update")
            return self._response(
                True, ListOperation.ADD, recipe_id, user_id,
                f"Recipe ({recipe_id}) added to users ({user_id}) {self.list_name}"
            )

    async def remove(self, user_id: str, recipe_id: str) -> ListResponse:
        """Remove a recipe from the user's list; missing entries are rejected with success=False"""
        async with self._locks.acquire(user_id):
            document = await self._get_document(user_id)
            if document is None:
                logger.warning(f"User[{user_id}] has no {self.list_name}")
                return self._response(
                    False, ListOperation.REMOVE, recipe_id, user_id,
                    f"Couldn't remove recipe since user ({user_id}) has no {self.list_name}"
                )

            recipe_ids = list(document.get("recipe_ids") or [])
            if recipe_id not in recipe_ids:
                logger.warning(f"User[{user_id}] can't remove non present recipe: {recipe_id}")
                return self._response(
                    False, ListOperation.REMOVE, recipe_id, user_id,
                    f"Couldn't remove recipe since it isn't in users ({user_id}) {self.list_name}"
                )

            logger.info(f"User[{user_id}] removing recipe {recipe_id} from {self.list_name}")
            recipe_ids.remove(recipe_id)
            await self._store(self.repo.set_recipe_ids(document["id"], recipe_ids), "update")
            return self._response(
                True, ListOperation.REMOVE, recipe_id, user_id,
                f"Removed recipe from users ({user_id}) {self.list_name}"
            )

    async def contains(self, user_id: str, recipe_id: str) -> bool:
        document = await self._get_document(user_id)
        if document is None:
            return False
        return recipe_id in (document.get("recipe_ids") or [])

    async def recipe_ids(self, user_id: str) -> List[str]:
        """Recipe ids in the order they were added"""
        document = await self._get_document(user_id)
        return list(document.get("recipe_ids") or []) if document else []

    async def handle_recipe_deletion(self, payload: Dict[str, Any]):
        """Drop a deleted recipe from every list that references it"""
        recipe_id = payload["recipe_id"]
        documents = await self._store(self.repo.find_containing(recipe_id), "find")
        for document in documents:
            async with self._locks.acquire(document["user_id"]):
                current = await self._get_document(document["user_id"])
                if current is None:
                    continue
                recipe_ids = [rid for rid in (current.get("recipe_ids") or []) if rid != recipe_id]
                await self._store(self.repo.set_recipe_ids(current["id"], recipe_ids), "update")
        if documents:
            logger.info(f"Recipe[{recipe_id}] removed from {len(documents)} {self.list_name} documents")

    async def _get_document(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._store(self.repo.get_by_user(user_id), "find")

    async def _store(self, call, operation: str):
        try:
            return await call
        except Exception as e:
            raise StorageError(
                str(e) or f"Failed to {operation} {self.list_name}",
                self.repo.table_name,
                operation
            ) from e

    @staticmethod
    def _response(
        success: bool,
        method: ListOperation,
        recipe_id: str,
        user_id: str,
        message: str
    ) -> ListResponse:
        return ListResponse(success=success, method=method, recipe_id=recipe_id, user_id=user_id, message=message)


class FavoriteService(UserRecipeListService):
    """Recipes a user marked as favorite"""

    list_name = "favorites"

    def __init__(self, supabase: Client, locks: Optional[KeyedLock] = None):
        super().__init__(FavoriteRepository(supabase), locks)


class CookListService(UserRecipeListService):
    """Recipes a user wants to cook"""

    list_name = "cook list"

    def __init__(self, supabase: Client, locks: Optional[KeyedLock] = None):
        super().__init__(CookListRepository(supabase), locks)


class RecentService(UserRecipeListService):
    """
    Recently viewed recipes, fed by recipe.viewed notifications.
    Stored oldest first and capped at `size` entries.
    """

    list_name = "recents"

    def __init__(self, supabase: Client, size: int = 10, locks: Optional[KeyedLock] = None):
        super().__init__(RecentRepository(supabase), locks)
        self.size = size

    def register_handlers(self, bus: NotificationBus):
        super().register_handlers(bus)
        bus.subscribe(EventType.RECIPE_VIEWED, self.handle_recipe_viewed)

    async def handle_recipe_viewed(self, payload: Dict[str, Any]):
        await self.add_recent(payload["user_id"], payload["recipe_id"])

    async def add_recent(self, user_id: str, recipe_id: str):
        """Move the recipe to the newest position, dropping the oldest entries past `size`"""
        async with self._locks.acquire(user_id):
            document = await self._get_document(user_id)
            if document is None:
                await self._store(self.repo.create_for_user(user_id, [recipe_id]), "create")
                return

            recipe_ids = [rid for rid in (document.get("recipe_ids") or []) if rid != recipe_id]
            recipe_ids.append(recipe_id)
            recipe_ids = recipe_ids[-self.size:]
            logger.debug(f"User[{user_id}] recents now hold {len(recipe_ids)} recipes")
            await self._store(self.repo.set_recipe_ids(document["id"], recipe_ids), "update")

    async def recipe_ids(self, user_id: str) -> List[str]:
        """Recently viewed recipe ids, newest first"""
        return list(reversed(await super().recipe_ids(user_id)))
