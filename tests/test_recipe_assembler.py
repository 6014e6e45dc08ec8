"""
Tests for recipe assembly (reference resolution)
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.events import EventType, NotificationBus
from app.domain.enums import ResolutionTarget
from app.domain.exceptions import DataIntegrityError, ResolutionError
from app.domain.models import RecipeRecord, SanitizedUser
from app.services.recipe_assembler import RecipeAssembler
from tests.conftest import make_recipe


def _record(recipe_id: str, **kwargs) -> RecipeRecord:
    return RecipeRecord(**make_recipe(recipe_id, **kwargs))


def _mocked_assembler(bus: NotificationBus, timeout: float = 1.0, concurrency: int = 4) -> RecipeAssembler:
    """Assembler whose collaborators are all mocks"""
    user_service = MagicMock()
    user_service.get_sanitized_user = AsyncMock(
        side_effect=lambda user_id: SanitizedUser(id=user_id, username=f"user_{user_id}")
    )
    return RecipeAssembler(
        tag_service=MagicMock(),
        user_service=user_service,
        rating_service=MagicMock(),
        photo_service=MagicMock(),
        favorite_service=MagicMock(),
        cook_list_service=MagicMock(),
        event_bus=bus,
        timeout=timeout,
        concurrency=concurrency,
    )


class TestConvertRecipe:

    @pytest.mark.asyncio
    async def test_without_viewer(self, services, supabase, tags, users):
        record = _record("r1", owner="owner-1", tags=[tags["dessert"], tags["vegan"]])

        recipe = await services.assembler.convert_recipe(record)

        assert recipe.owner.id == "owner-1"
        assert recipe.owner.username == "alice"
        assert recipe.owner.avatar_url == ""
        assert recipe.tags == ["dessert", "vegan"]
        assert recipe.rating.average_rating == 0
        assert recipe.rating.number_of_ratings == 0
        assert recipe.picture == ""
        assert recipe.is_favorite is None
        assert recipe.my_rating is None
        assert recipe.is_on_cook_list is None

        assert supabase.call_count("ratings") == 0
        assert supabase.call_count("favorites") == 0
        assert supabase.call_count("cook_lists") == 0

    @pytest.mark.asyncio
    async def test_sanitized_owner_has_no_email(self, services, users):
        recipe = await services.assembler.convert_recipe(_record("r1", owner="owner-2"))

        assert recipe.owner.avatar_url == "https://storage.test/recipe-images/bob.png"
        assert "email" not in recipe.owner.model_dump()

    @pytest.mark.asyncio
    async def test_rated_recipe_with_picture(self, services, supabase, users):
        await services.ratings.add_rating("r1", "u1", 5)
        await services.ratings.add_rating("r1", "u2", 4)
        rating_id = supabase.rows("ratings")[0]["id"]

        recipe = await services.assembler.convert_recipe(
            _record("r1", rating_ref=rating_id, picture="cake.jpg")
        )

        assert recipe.rating.average_rating == 4.5
        assert recipe.rating.number_of_ratings == 2
        assert recipe.picture == "https://storage.test/recipe-images/cake.jpg"

    @pytest.mark.asyncio
    async def test_with_viewer(self, services, supabase, bus, users):
        await services.favorites.add("viewer-1", "r1")
        await services.ratings.add_rating("r1", "viewer-1", 3.5)
        rating_id = supabase.rows("ratings")[0]["id"]

        recipe = await services.assembler.convert_recipe(_record("r1", rating_ref=rating_id), "viewer-1")
        await bus.drain()

        assert recipe.is_favorite is True
        assert recipe.my_rating == 3.5
        assert recipe.is_on_cook_list is False
        assert await services.recents.recipe_ids("viewer-1") == ["r1"]

    @pytest.mark.asyncio
    async def test_view_can_be_left_untracked(self, services, bus, users):
        await services.assembler.convert_recipe(_record("r1"), "viewer-1", track_view=False)
        await bus.drain()

        assert await services.recents.recipe_ids("viewer-1") == []

    @pytest.mark.asyncio
    async def test_failed_view_notification_does_not_fail_conversion(self, bus):
        assembler = _mocked_assembler(bus)
        assembler.favorite_service.contains = AsyncMock(return_value=False)
        assembler.cook_list_service.contains = AsyncMock(return_value=True)
        assembler.rating_service.get_rating_for_user = AsyncMock(return_value=0)
        bus.subscribe(EventType.RECIPE_VIEWED, AsyncMock(side_effect=RuntimeError("recents down")))

        recipe = await assembler.convert_recipe(_record("r1"), "viewer-1")
        await bus.drain()

        assert recipe.is_on_cook_list is True
        assert recipe.my_rating == 0

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self, bus):
        assembler = _mocked_assembler(bus)

        async def slow(*args):
            await asyncio.sleep(0.2)
            return False

        async def slow_user(user_id):
            await asyncio.sleep(0.2)
            return SanitizedUser(id=user_id, username="slow")

        assembler.user_service.get_sanitized_user = AsyncMock(side_effect=slow_user)
        assembler.favorite_service.contains = AsyncMock(side_effect=slow)
        assembler.cook_list_service.contains = AsyncMock(side_effect=slow)
        assembler.rating_service.get_rating_for_user = AsyncMock(side_effect=slow)

        loop = asyncio.get_running_loop()
        started = loop.time()
        await assembler.convert_recipe(_record("r1"), "viewer-1", track_view=False)

        assert loop.time() - started < 0.6


class TestResolutionFailures:

    @pytest.mark.asyncio
    async def test_unknown_tag(self, services, users):
        with pytest.raises(ResolutionError) as exc_info:
            await services.assembler.convert_recipe(_record("r1", tags=["missing-tag"]))

        assert exc_info.value.target == ResolutionTarget.TAG
        assert exc_info.value.code == 404

    @pytest.mark.asyncio
    async def test_unknown_owner(self, services):
        with pytest.raises(ResolutionError) as exc_info:
            await services.assembler.convert_recipe(_record("r1", owner="ghost"))

        assert exc_info.value.target == ResolutionTarget.USER

    @pytest.mark.asyncio
    async def test_unknown_rating_collection(self, services, users):
        with pytest.raises(ResolutionError) as exc_info:
            await services.assembler.convert_recipe(_record("r1", rating_ref="gone"))

        assert exc_info.value.target == ResolutionTarget.RATING
        assert exc_info.value.code == 404

    @pytest.mark.asyncio
    async def test_store_failure_names_collaborator(self, services, supabase, users):
        supabase.failures[("users", "select")] = RuntimeError("timeout")

        with pytest.raises(ResolutionError) as exc_info:
            await services.assembler.convert_recipe(_record("r1"))

        assert exc_info.value.target == ResolutionTarget.USER
        assert exc_info.value.code == 502

    @pytest.mark.asyncio
    async def test_photo_failure(self, bus):
        assembler = _mocked_assembler(bus)
        assembler.photo_service.get_image_url = AsyncMock(side_effect=RuntimeError("bucket missing"))

        with pytest.raises(ResolutionError) as exc_info:
            await assembler.convert_recipe(_record("r1", picture="cake.jpg"))

        assert exc_info.value.target == ResolutionTarget.PHOTO
        assert exc_info.value.message == "bucket missing"

    @pytest.mark.asyncio
    async def test_lookup_timeout(self, bus):
        assembler = _mocked_assembler(bus, timeout=0.05)

        async def hanging_user(user_id):
            await asyncio.sleep(1)

        assembler.user_service.get_sanitized_user = AsyncMock(side_effect=hanging_user)

        with pytest.raises(ResolutionError) as exc_info:
            await assembler.convert_recipe(_record("r1"))

        assert exc_info.value.target == ResolutionTarget.USER
        assert exc_info.value.code == 504


class TestConvertRecipes:

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, bus):
        assembler = _mocked_assembler(bus)
        delays = {"owner-a": 0.15, "owner-b": 0.0, "owner-c": 0.05}

        async def sanitized(user_id):
            await asyncio.sleep(delays[user_id])
            return SanitizedUser(id=user_id, username=user_id)

        assembler.user_service.get_sanitized_user = AsyncMock(side_effect=sanitized)
        records = [_record("r1", owner="owner-a"), _record("r2", owner="owner-b"), _record("r3", owner="owner-c")]

        recipes = await assembler.convert_recipes(records)

        assert [recipe.id for recipe in recipes] == ["r1", "r2", "r3"]
        assert [recipe.owner.id for recipe in recipes] == ["owner-a", "owner-b", "owner-c"]

    @pytest.mark.asyncio
    async def test_one_failure_fails_the_batch(self, services, tags, users):
        records = [_record("r1", tags=[tags["quick"]]), _record("r2", tags=["missing-tag"])]

        with pytest.raises(ResolutionError):
            await services.assembler.convert_recipes(records)

    @pytest.mark.asyncio
    async def test_list_views_are_not_tracked(self, services, bus, users):
        await services.assembler.convert_recipes([_record("r1"), _record("r2")], "viewer-1")
        await bus.drain()

        assert await services.recents.recipe_ids("viewer-1") == []

    @pytest.mark.asyncio
    async def test_empty_list(self, services):
        assert await services.assembler.convert_recipes([]) == []

    @pytest.mark.asyncio
    async def test_recipes_in_flight_are_bounded(self, bus):
        assembler = _mocked_assembler(bus, concurrency=2)
        in_flight = []
        peak = []

        async def sanitized(user_id):
            in_flight.append(user_id)
            peak.append(len(in_flight))
            await asyncio.sleep(0.01)
            in_flight.remove(user_id)
            return SanitizedUser(id=user_id, username=user_id)

        assembler.user_service.get_sanitized_user = AsyncMock(side_effect=sanitized)
        records = [_record(f"r{i}", owner=f"owner-{i}") for i in range(6)]

        recipes = await assembler.convert_recipes(records)

        assert [recipe.id for recipe in recipes] == [f"r{i}" for i in range(6)]
        assert max(peak) == 2

    @pytest.mark.asyncio
    async def test_full_page_on_slow_store(self, services, supabase, tags, users):
        records = [
            _record(f"r{i}", tags=[tags["dessert"], tags["vegan"], tags["quick"]])
            for i in range(60)
        ]
        supabase.delay = 0.02

        recipes = await services.assembler.convert_recipes(records, "viewer-1")

        assert len(recipes) == 60
        assert recipes[-1].tags == ["dessert", "vegan", "quick"]
        assert recipes[-1].is_favorite is False


class TestTagConversion:

    @pytest.mark.asyncio
    async def test_tags_to_id_creates_missing_tags_in_order(self, services, supabase, tags):
        ids = await services.assembler.convert_tags_to_id(["brunch", "dessert", "brunch"])

        assert ids[1] == tags["dessert"]
        assert ids[0] == ids[2]
        assert [row["name"] for row in supabase.rows("tags")].count("brunch") == 1

    @pytest.mark.asyncio
    async def test_duplicate_tag_rows_are_fatal(self, services, supabase):
        supabase.seed("tags", {"id": "t1", "name": "soup"}, {"id": "t2", "name": "soup"})

        with pytest.raises(DataIntegrityError):
            await services.assembler.convert_tags_to_id(["soup"])

    @pytest.mark.asyncio
    async def test_tags_to_name_keeps_order(self, services, tags):
        names = await services.assembler.convert_tags_to_name([tags["vegan"], tags["quick"], tags["dessert"]])

        assert names == ["vegan", "quick", "dessert"]

    @pytest.mark.asyncio
    async def test_unrated_ref_skips_lookup(self, bus):
        assembler = _mocked_assembler(bus)
        assembler.rating_service.get_collection = AsyncMock()

        info = await assembler.convert_rating_ref_to_info("")

        assert info.average_rating == 0
        assert info.number_of_ratings == 0
        assembler.rating_service.get_collection.assert_not_called()
