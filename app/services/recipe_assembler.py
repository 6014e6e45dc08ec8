"""
Recipe assembler

Turns persisted recipe records (every reference stored as an id) into the
client-facing shape by resolving tags, owner, rating and picture through
their services, concurrently.
"""
import asyncio
from typing import Any, Awaitable, List, Optional
import logging

from app.core.events import EventType, NotificationBus
from app.domain.enums import ResolutionTarget
from app.domain.exceptions import DataIntegrityError, ResolutionError, ServiceError
from app.domain.models import (
    AssembledRecipe,
    NO_PICTURE,
    RatingInfo,
    RecipeRecord,
    UNRATED,
)
from app.services.photo_service import PhotoService
from app.services.rating_service import RatingService
from app.services.tag_service import TagService
from app.services.user_recipe_list_service import CookListService, FavoriteService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


class RecipeAssembler:
    """Resolves recipe references; every lookup has its own deadline"""

    def __init__(
        self,
        tag_service: TagService,
        user_service: UserService,
        rating_service: RatingService,
        photo_service: PhotoService,
        favorite_service: FavoriteService,
        cook_list_service: CookListService,
        event_bus: NotificationBus,
        timeout: float = 5.0,
        concurrency: int = 4
    ):
        self.tag_service = tag_service
        self.user_service = user_service
        self.rating_service = rating_service
        self.photo_service = photo_service
        self.favorite_service = favorite_service
        self.cook_list_service = cook_list_service
        self.event_bus = event_bus
        self.timeout = timeout
        self.concurrency = concurrency

    # ============= Tags =============

    async def convert_tags_to_id(self, tag_names: List[str]) -> List[str]:
        """
        Look up or create each tag, returning ids in input order.

        Runs one name at a time so that a name listed twice is created once.
        Duplicate tag rows are fatal (DataIntegrityError).
        """
        ids = []
        for name in tag_names:
            ids.append(await self._resolve(ResolutionTarget.TAG, self.tag_service.check_for_tag(name)))
        return ids

    async def convert_tags_to_name(self, tag_ids: List[str]) -> List[str]:
        """Resolve tag ids to names in input order; an unknown id fails the call"""
        tags = await _gather_or_cancel(
            [self._resolve(ResolutionTarget.TAG, self.tag_service.get(tag_id)) for tag_id in tag_ids]
        )
        return [tag.name for tag in tags]

    # ============= Rating =============

    async def convert_rating_ref_to_info(self, rating_ref: str) -> RatingInfo:
        """Average and count of a rating collection; unrated recipes skip the lookup"""
        if rating_ref == UNRATED:
            return RatingInfo(average_rating=0, number_of_ratings=0)

        collection = await self._resolve(ResolutionTarget.RATING, self.rating_service.get_collection(rating_ref))
        if collection is None:
            raise ResolutionError(ResolutionTarget.RATING, f"Rating collection {rating_ref} not found", 404)

        return RatingInfo(
            average_rating=collection.avg_rating if collection.avg_rating is not None else 0,
            number_of_ratings=len(collection.ratings)
        )

    # ============= Recipes =============

    async def convert_recipe(
        self,
        record: RecipeRecord,
        viewer_id: Optional[str] = None,
        track_view: bool = True
    ) -> AssembledRecipe:
        """
        Assemble one recipe.

        Tags, owner, rating and picture are resolved concurrently; with a
        viewer the favorite flag, the viewer's rating and the cook list flag
        join the same fan-out. Any failed lookup fails the whole recipe.

        Args:
            record: Persisted recipe
            viewer_id: User making the request, if any
            track_view: Emit recipe.viewed for the viewer (best effort)
        """
        lookups: List[Awaitable[Any]] = [
            self.convert_tags_to_name(record.tags),
            self._resolve(ResolutionTarget.USER, self.user_service.get_sanitized_user(record.owner)),
            self.convert_rating_ref_to_info(record.rating_ref),
            self._convert_picture(record.picture),
        ]
        if viewer_id:
            lookups += [
                self._resolve(ResolutionTarget.FAVORITE, self.favorite_service.contains(viewer_id, record.id)),
                self._resolve(ResolutionTarget.RATING, self.rating_service.get_rating_for_user(record.id, viewer_id)),
                self._resolve(ResolutionTarget.COOK_LIST, self.cook_list_service.contains(viewer_id, record.id)),
            ]

        try:
            results = await _gather_or_cancel(lookups)
        except ServiceError as e:
            logger.error(f"Recipe[{record.id}] conversion failed: {e}")
            raise

        tags, owner, rating, picture = results[:4]
        recipe = AssembledRecipe(
            id=record.id,
            name=record.name,
            description=record.description,
            ingredients=record.ingredients,
            steps=record.steps,
            tags=tags,
            owner=owner,
            rating=rating,
            picture=picture,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

        if viewer_id:
            recipe.is_favorite, recipe.my_rating, recipe.is_on_cook_list = results[4:]
            if track_view:
                self.event_bus.emit(EventType.RECIPE_VIEWED, {"user_id": viewer_id, "recipe_id": record.id})

        return recipe

    async def convert_recipes(
        self,
        records: List[RecipeRecord],
        viewer_id: Optional[str] = None
    ) -> List[AssembledRecipe]:
        """
        Assemble several recipes concurrently, keeping input order.

        At most `concurrency` recipes are assembled at once; a lookup deadline
        starts only when its recipe holds a slot. One failed recipe fails the
        batch. List views are not recorded as recently viewed.
        """
        slots = asyncio.Semaphore(self.concurrency)

        async def convert(record: RecipeRecord) -> AssembledRecipe:
            async with slots:
                return await self.convert_recipe(record, viewer_id, track_view=False)

        return await _gather_or_cancel([convert(record) for record in records])

    # ============= Internals =============

    async def _convert_picture(self, picture: str) -> str:
        if picture == NO_PICTURE:
            return ""
        return await self._resolve(ResolutionTarget.PHOTO, self.photo_service.get_image_url(picture))

    async def _resolve(self, target: ResolutionTarget, call: Awaitable[Any]) -> Any:
        """Await a lookup under the deadline, reporting failures as ResolutionError"""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except (ResolutionError, DataIntegrityError):
            raise
        except asyncio.TimeoutError as e:
            raise ResolutionError(target, f"Lookup timed out after {self.timeout}s", 504) from e
        except ServiceError as e:
            raise ResolutionError(target, e.message, 502) from e
        except Exception as e:
            raise ResolutionError(target, str(e) or f"Failed to resolve {target.value}") from e


async def _gather_or_cancel(awaitables: List[Awaitable[Any]]) -> List[Any]:
    """Gather in order; the first failure cancels the lookups still running"""
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
