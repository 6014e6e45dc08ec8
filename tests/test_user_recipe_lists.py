"""
Tests for favorites, cook list and recently viewed recipes
"""
import asyncio

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.events import EventType
from app.domain.enums import ListOperation
from app.services.user_recipe_list_service import CookListService, FavoriteService, RecentService


class TestFavorites:

    @pytest.mark.asyncio
    async def test_first_add_creates_list(self, supabase):
        service = FavoriteService(supabase)

        result = await service.add("u1", "r1")

        assert result.success is True
        assert result.method == ListOperation.ADD
        assert supabase.rows("favorites")[0]["recipe_ids"] == ["r1"]

    @pytest.mark.asyncio
    async def test_duplicate_add_is_rejected(self, supabase):
        service = FavoriteService(supabase)
        await service.add("u1", "r1")

        result = await service.add("u1", "r1")

        assert result.success is False
        assert "already present" in result.message
        assert await service.recipe_ids("u1") == ["r1"]

    @pytest.mark.asyncio
    async def test_remove(self, supabase):
        service = FavoriteService(supabase)
        await service.add("u1", "r1")
        await service.add("u1", "r2")

        result = await service.remove("u1", "r1")

        assert result.success is True
        assert await service.recipe_ids("u1") == ["r2"]
        assert await service.contains("u1", "r1") is False
        assert await service.contains("u1", "r2") is True

    @pytest.mark.asyncio
    async def test_remove_missing(self, supabase):
        service = FavoriteService(supabase)

        no_list = await service.remove("u1", "r1")
        await service.add("u1", "r2")
        not_listed = await service.remove("u1", "r1")

        assert no_list.success is False
        assert "has no favorites" in no_list.message
        assert not_listed.success is False

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_every_recipe(self, supabase):
        service = FavoriteService(supabase)

        await asyncio.gather(*(service.add("u1", f"r{i}") for i in range(5)))

        assert len(supabase.rows("favorites")) == 1
        assert sorted(await service.recipe_ids("u1")) == [f"r{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_recipe_deletion_cleans_every_list(self, supabase):
        service = FavoriteService(supabase)
        await service.add("u1", "r1")
        await service.add("u1", "r2")
        await service.add("u2", "r1")

        await service.handle_recipe_deletion({"recipe_id": "r1"})

        assert await service.recipe_ids("u1") == ["r2"]
        assert await service.recipe_ids("u2") == []


class TestCookList:

    @pytest.mark.asyncio
    async def test_uses_its_own_table(self, supabase):
        await CookListService(supabase).add("u1", "r1")

        assert supabase.rows("favorites") == []
        assert supabase.rows("cook_lists")[0]["recipe_ids"] == ["r1"]
        assert await FavoriteService(supabase).contains("u1", "r1") is False


class TestRecents:

    @pytest.mark.asyncio
    async def test_newest_first_and_capped(self, supabase):
        service = RecentService(supabase, size=3)

        for recipe_id in ["r1", "r2", "r3", "r4"]:
            await service.add_recent("u1", recipe_id)

        assert await service.recipe_ids("u1") == ["r4", "r3", "r2"]

    @pytest.mark.asyncio
    async def test_revisit_moves_to_front(self, supabase):
        service = RecentService(supabase, size=3)

        for recipe_id in ["r1", "r2", "r1"]:
            await service.add_recent("u1", recipe_id)

        assert await service.recipe_ids("u1") == ["r1", "r2"]

    @pytest.mark.asyncio
    async def test_fed_by_view_notifications(self, supabase, bus):
        service = RecentService(supabase)
        service.register_handlers(bus)

        bus.emit(EventType.RECIPE_VIEWED, {"user_id": "u1", "recipe_id": "r1"})
        await bus.drain()

        assert await service.recipe_ids("u1") == ["r1"]

    @pytest.mark.asyncio
    async def test_recipe_deletion(self, supabase):
        service = RecentService(supabase)
        await service.add_recent("u1", "r1")
        await service.add_recent("u1", "r2")

        await service.handle_recipe_deletion({"recipe_id": "r2"})

        assert await service.recipe_ids("u1") == ["r1"]

    @pytest.mark.parametrize("size", [0, -1])
    def test_size_must_be_positive(self, size):
        with pytest.raises(ValidationError):
            Settings(RECENTS_SIZE=size)
