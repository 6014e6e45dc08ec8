"""
Rating aggregation service

Keeps one rating collection per recipe and guarantees that its average
matches its entries after every successful mutation.
"""
from typing import Optional, Dict, Any, List
from supabase import Client
import logging

from app.core.events import EventType, NotificationBus
from app.core.locks import KeyedLock
from app.domain.enums import RatingOperation
from app.domain.exceptions import DataIntegrityError, StorageError
from app.domain.models import RatingCollection, RatingEntry, RatingResponse
from app.repositories.rating_repository import RatingRepository

logger = logging.getLogger(__name__)


class RatingService:
    """Service for per-recipe rating collections"""

    def __init__(
        self,
        supabase: Client,
        event_bus: NotificationBus,
        locks: Optional[KeyedLock] = None
    ):
        self.rating_repo = RatingRepository(supabase)
        self.event_bus = event_bus
        # Read-modify-write of a collection is serialized per recipe
        self._locks = locks or KeyedLock()

    def register_handlers(self, bus: NotificationBus):
        bus.subscribe(EventType.RECIPE_DELETION, self.handle_recipe_deletion)

    # ============= Mutations =============

    async def add_rating(self, recipe_id: str, user_id: str, rating: float) -> RatingResponse:
        """
        Add a user's rating, creating the recipe's collection on first use.

        A user who already rated is redirected to an update; resubmitting the
        same value is rejected with success=False.
        """
        async with self._locks.acquire(recipe_id):
            collection = await self._get_by_recipe(recipe_id)
            if collection is None:
                collection = await self._create_collection(recipe_id)

            index = collection.index_of(user_id)
            if index != -1:
                if collection.ratings[index].rating == rating:
                    return self._response(False, RatingOperation.ADD, recipe_id, user_id, "This rating is already present")

                logger.warning(f"Recipe[{recipe_id}] add called but user {user_id} already rated, updating instead")
                return await self._replace_rating(collection, index, rating, user_id)

            logger.debug(f"Recipe[{recipe_id}] adding rating {rating} from user {user_id}")
            collection.ratings.append(RatingEntry(user_id=user_id, rating=rating))
            await self._save(collection.recalculate())
            return self._response(True, RatingOperation.ADD, recipe_id, user_id, "User rated recipe")

    async def update_rating(self, recipe_id: str, user_id: str, rating: float) -> RatingResponse:
        """Replace an existing rating; fails softly when there is nothing to update"""
        async with self._locks.acquire(recipe_id):
            collection = await self._get_by_recipe(recipe_id)
            if collection is None:
                logger.warning(f"Recipe[{recipe_id}] has no ratings yet")
                return self._response(False, RatingOperation.UPDATE, recipe_id, user_id, "The recipe has no ratings yet")

            index = collection.index_of(user_id)
            if index == -1:
                logger.warning(f"Recipe[{recipe_id}] user {user_id} tried to update non existent rating")
                return self._response(
                    False, RatingOperation.UPDATE, recipe_id, user_id,
                    f"The user ({user_id}) hasn't rated the recipe so updating is not possible"
                )

            return await self._replace_rating(collection, index, rating, user_id)

    async def remove_rating(self, recipe_id: str, user_id: str) -> RatingResponse:
        """Remove a user's rating; the average becomes None once no ratings are left"""
        async with self._locks.acquire(recipe_id):
            collection = await self._get_by_recipe(recipe_id)
            if collection is None:
                logger.warning(f"Recipe[{recipe_id}] has no ratings")
                return self._response(False, RatingOperation.REMOVE, recipe_id, user_id, "The recipe has no ratings yet")

            index = collection.index_of(user_id)
            if index == -1:
                logger.warning(f"Recipe[{recipe_id}] user {user_id} tried to remove non existent rating")
                return self._response(
                    False, RatingOperation.REMOVE, recipe_id, user_id,
                    f"The user ({user_id}) hasn't rated the recipe so removing is not possible"
                )

            logger.info(f"Recipe[{recipe_id}] removing rating from user {user_id}")
            del collection.ratings[index]
            await self._save(collection.recalculate())
            return self._response(True, RatingOperation.REMOVE, recipe_id, user_id, "Removed users rating from recipe")

    # ============= Queries =============

    async def get_rating_for_user(self, recipe_id: str, user_id: str) -> float:
        """The user's rating of the recipe, 0 when the user has not rated it"""
        collection = await self._get_by_recipe(recipe_id)
        if collection is None:
            return 0
        index = collection.index_of(user_id)
        if index == -1:
            return 0
        return collection.ratings[index].rating

    async def get_collection(self, rating_id: str) -> Optional[RatingCollection]:
        """Load a rating collection by its own id"""
        try:
            row = await self.rating_repo.get_by_id(rating_id)
        except Exception as e:
            raise StorageError(str(e) or "Error while fetching rating collection", "ratings", "get") from e
        return RatingCollection(**row) if row else None

    async def get_recipe_ids_with_min_rating(self, min_rating: float) -> List[str]:
        try:
            return await self.rating_repo.get_recipe_ids_with_min_average(min_rating)
        except Exception as e:
            raise StorageError(str(e) or "Failed to fetch recipe ids by rating", "ratings", "find") from e

    # ============= Events =============

    async def handle_recipe_deletion(self, payload: Dict[str, Any]):
        """Drop the rating collection of a deleted recipe"""
        recipe_id = payload["recipe_id"]
        async with self._locks.acquire(recipe_id):
            collection = await self._get_by_recipe(recipe_id)
            if collection is None:
                logger.debug(f"Recipe[{recipe_id}] deleted without ratings")
                return
            try:
                await self.rating_repo.delete(collection.id)
            except Exception as e:
                raise StorageError(str(e) or "Failed to delete rating collection", "ratings", "remove") from e
            logger.info(f"Recipe[{recipe_id}] rating collection {collection.id} removed")

    # ============= Internals =============

    async def _replace_rating(
        self,
        collection: RatingCollection,
        index: int,
        rating: float,
        user_id: str
    ) -> RatingResponse:
        logger.info(f"Recipe[{collection.recipe_id}] updating rating for user {user_id}")
        collection.ratings[index].rating = rating
        await self._save(collection.recalculate())
        return self._response(
            True, RatingOperation.UPDATE, collection.recipe_id, user_id,
            f"Updated recipe, new average rating of: {collection.avg_rating}"
        )

    async def _create_collection(self, recipe_id: str) -> RatingCollection:
        logger.info(f"Recipe[{recipe_id}] creating rating collection")
        try:
            row = await self.rating_repo.create({"recipe_id": recipe_id, "ratings": [], "avg_rating": None})
        except Exception as e:
            raise StorageError(str(e) or "Failed to create rating collection", "ratings", "create") from e
        if not row:
            raise StorageError("Rating collection was not created", "ratings", "create")

        collection = RatingCollection(**row)
        self.event_bus.emit(EventType.RECIPE_FIRST_RATING, {"recipe_id": recipe_id, "rating_id": collection.id})
        return collection

    async def _get_by_recipe(self, recipe_id: str) -> Optional[RatingCollection]:
        logger.debug(f"Loading rating collection for recipe {recipe_id}")
        try:
            rows = await self.rating_repo.find_by_recipe(recipe_id)
        except Exception as e:
            raise StorageError(str(e) or "Error while fetching rating collection", "ratings", "find") from e

        if len(rows) > 1:
            raise DataIntegrityError(f"Recipe {recipe_id} has {len(rows)} rating collections", "ratings")
        return RatingCollection(**rows[0]) if rows else None

    async def _save(self, collection: RatingCollection):
        logger.debug(f"[{collection.id}] new average rating of: {collection.avg_rating}")
        try:
            await self.rating_repo.save_ratings(
                collection.id,
                [entry.model_dump() for entry in collection.ratings],
                collection.avg_rating
            )
        except Exception as e:
            raise StorageError(str(e) or "Failed to update rating collection", "ratings", "update") from e

    @staticmethod
    def _response(
        success: bool,
        method: RatingOperation,
        recipe_id: str,
        user_id: str,
        message: str
    ) -> RatingResponse:
        return RatingResponse(success=success, method=method, recipe_id=recipe_id, user_id=user_id, message=message)
