"""
Recipe provider service

Read side of the recipe store: every query returns assembled recipes,
personalised when a viewer id is given.
"""
from typing import Optional, Dict, Any, List, Awaitable
from supabase import Client
import logging

from app.domain.enums import FilterType
from app.domain.exceptions import FilterError, ServiceError
from app.domain.models import AssembledRecipe, RecipePage, RecipeRecord
from app.repositories.recipe_repository import RecipeRepository
from app.services.rating_service import RatingService
from app.services.recipe_assembler import RecipeAssembler
from app.services.recipe_service import RecipeService
from app.services.tag_service import TagService

logger = logging.getLogger(__name__)


class RecipeProviderService:
    """Service for recipe queries"""

    def __init__(
        self,
        supabase: Client,
        assembler: RecipeAssembler,
        recipe_service: RecipeService,
        rating_service: RatingService,
        tag_service: TagService,
        featured_limit: int = 25,
        default_page_size: int = 20,
        max_page_size: int = 100
    ):
        self.recipe_repo = RecipeRepository(supabase)
        self.assembler = assembler
        self.recipe_service = recipe_service
        self.rating_service = rating_service
        self.tag_service = tag_service
        self.featured_limit = featured_limit
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    # ============= Single recipe =============

    async def get_by_id(self, recipe_id: str, viewer_id: Optional[str] = None) -> AssembledRecipe:
        """Assembled recipe; a viewer gets it recorded as recently viewed"""
        logger.info(f"Fetching recipe with ID: {recipe_id}")
        record = await self.recipe_service.get_record(recipe_id)
        return await self.assembler.convert_recipe(record, viewer_id)

    # ============= Lists =============

    async def get_from_user(
        self,
        user_id: str,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        logger.info(f"Fetching recipes for user: {user_id}")
        records = await self._query(FilterType.USER, self.recipe_repo.get_by_owner(user_id))
        return await self.paginate(records, viewer_id, page, page_size)

    async def get_by_name(
        self,
        name: str,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """Recipes whose name contains `name` (case-insensitive)"""
        logger.info(f"Fetching recipes with name which includes: {name}")
        records = await self._by_name(name)
        return await self.paginate(records, viewer_id, page, page_size)

    async def get_by_tags(
        self,
        tags: List[str],
        intersect: bool = False,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """
        Recipes by tag name.

        Args:
            tags: Tag names
            intersect: Require every tag instead of any of them
        """
        logger.info(f"Fetching recipes for multiple tags (intersected={intersect}): {tags}")
        records = await self._by_tags(tags, intersect)
        return await self.paginate(records, viewer_id, page, page_size)

    async def get_by_min_rating(
        self,
        rating: float,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """Recipes whose average rating is at least `rating`"""
        logger.info(f"Fetching recipes with rating over {rating}")
        records = await self._by_min_rating(rating)
        return await self.paginate(records, viewer_id, page, page_size)

    async def get_featured(
        self,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        records = await self._featured()
        return await self.paginate(records, viewer_id, page, page_size)

    async def get_by_ids(
        self,
        recipe_ids: List[str],
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """Recipes in the order of `recipe_ids`; ids that no longer exist are skipped"""
        records = await self._query(FilterType.INTERNAL, self.recipe_repo.get_many(recipe_ids))
        return await self.paginate(records, viewer_id, page, page_size)

    async def filter(
        self,
        text: str = "",
        rating_min: float = 0,
        tags: Optional[List[str]] = None,
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """
        Combined search over name, minimum rating and tags.

        Any criterion may be left empty (text "", rating 0, no tags); tags are
        intersected. With no criterion at all the featured recipes are returned.
        """
        tags = tags or []
        logger.info(f"Filtering with text={text!r} rating_min={rating_min} tags={tags}")

        if not text and not tags and rating_min <= 0:
            records = await self._featured()
        elif not text and not tags:
            records = await self._by_min_rating(rating_min)
        elif not tags and rating_min <= 0:
            records = await self._by_name(text)
        elif not text and rating_min <= 0:
            records = await self._by_tags(tags, intersect=True)
        else:
            records = await self._combined(text, rating_min, tags)

        return await self.paginate(records, viewer_id, page, page_size)

    # ============= Pagination =============

    async def paginate(
        self,
        records: List[RecipeRecord],
        viewer_id: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RecipePage:
        """Slice the records, then assemble only the requested page"""
        page = max(page, 1)
        page_size = min(max(page_size or self.default_page_size, 1), self.max_page_size)
        total = len(records)

        start = (page - 1) * page_size
        items = await self.assembler.convert_recipes(records[start:start + page_size], viewer_id)

        return RecipePage(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size
        )

    # ============= Queries =============

    async def _featured(self) -> List[RecipeRecord]:
        return await self._query(FilterType.FEATURED, self.recipe_repo.get_featured(self.featured_limit))

    async def _by_name(self, name: str) -> List[RecipeRecord]:
        return await self._query(FilterType.NAME, self.recipe_repo.search_by_name(name))

    async def _by_min_rating(self, rating: float) -> List[RecipeRecord]:
        recipe_ids = await self._recipe_ids_for_rating(rating)
        return await self._query(FilterType.RATING, self.recipe_repo.get_many(recipe_ids))

    async def _by_tags(self, tags: List[str], intersect: bool) -> List[RecipeRecord]:
        tag_ids = await self._tag_ids(tags, intersect)
        if not tag_ids:
            return []
        if intersect:
            return await self._query(FilterType.TAG, self.recipe_repo.get_by_tags(tag_ids))
        return await self._query(FilterType.TAG, self.recipe_repo.get_by_any_tag(tag_ids))

    async def _combined(self, text: str, rating_min: float, tags: List[str]) -> List[RecipeRecord]:
        """Name, rating and tag criteria that are set, all applied in one store query"""
        if tags and text and rating_min > 0:
            filter_type = FilterType.RATING_AND_NAME_AND_TAGS
        elif tags and text:
            filter_type = FilterType.NAME_AND_TAGS
        elif tags:
            filter_type = FilterType.RATING_AND_TAGS
        else:
            filter_type = FilterType.RATING_AND_NAME

        tag_ids = None
        if tags:
            tag_ids = await self._tag_ids(tags, intersect=True)
            if not tag_ids:
                return []

        recipe_ids = None
        if rating_min > 0:
            recipe_ids = await self._recipe_ids_for_rating(rating_min)
            if not recipe_ids:
                return []

        logger.debug(f"Fetching recipes ({filter_type.value}) with name: {text!r}, ratings: {rating_min}, tags: {tags}")
        if text:
            query = self.recipe_repo.search_by_name(text, recipe_ids=recipe_ids, tag_ids=tag_ids)
        else:
            query = self.recipe_repo.get_by_tags(tag_ids, recipe_ids=recipe_ids)
        return await self._query(filter_type, query)

    async def _recipe_ids_for_rating(self, rating: float) -> List[str]:
        logger.debug(f"Getting possible ids for rating >= {rating}")
        return await self.rating_service.get_recipe_ids_with_min_rating(rating)

    async def _tag_ids(self, tags: List[str], intersect: bool) -> Optional[List[str]]:
        """
        Ids of existing tags. Unknown names are dropped; when intersecting an
        unknown name means nothing can match and None is returned.
        """
        ids = []
        for name in tags:
            tag_id = await self.tag_service.find_id(name)
            if tag_id is None:
                if intersect:
                    return None
                continue
            ids.append(tag_id)
        return ids

    async def _query(self, filter_type: FilterType, call: Awaitable[List[Dict[str, Any]]]) -> List[RecipeRecord]:
        try:
            rows = await call
        except ServiceError:
            raise
        except Exception as e:
            raise FilterError(str(e) or "Failed to fetch recipes from store", filter_type) from e
        return [RecipeRecord(**row) for row in rows]
