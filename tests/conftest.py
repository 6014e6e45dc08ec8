"""
Shared fixtures for the test suite.
"""
import os
from typing import Any, Dict, List, Optional

import pytest

# Settings are read from the environment; set them before app modules load
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test_publishable_key")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test_secret_key")

from app.core.config import Settings  # noqa: E402
from app.core.events import NotificationBus  # noqa: E402
from app.core.services import ServiceContainer, build_services  # noqa: E402
from app.domain.models import NO_PICTURE, UNRATED  # noqa: E402
from tests.fakes import FakeSupabase  # noqa: E402


# =============================================================================
# DATA BUILDERS
# =============================================================================

def make_recipe(
    recipe_id: str,
    owner: str = "owner-1",
    tags: Optional[List[str]] = None,
    name: Optional[str] = None,
    rating_ref: str = UNRATED,
    picture: str = NO_PICTURE,
    created_at: str = "2024-01-01T10:00:00+00:00",
) -> Dict[str, Any]:
    return {
        "id": recipe_id,
        "name": name or f"Recipe {recipe_id}",
        "description": "Test recipe",
        "ingredients": [{"name": "flour", "amount": 200, "unit": "g"}],
        "steps": ["Mix", "Bake"],
        "tags": tags or [],
        "owner": owner,
        "rating_ref": rating_ref,
        "picture": picture,
        "created_at": created_at,
        "updated_at": created_at,
    }


def make_user(user_id: str, username: Optional[str] = None, avatar: str = NO_PICTURE) -> Dict[str, Any]:
    return {
        "id": user_id,
        "username": username or f"user_{user_id}",
        "email": f"{user_id}@example.com",
        "joined_at": "2023-06-01T00:00:00+00:00",
        "avatar": avatar,
        "role": "user",
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        SUPABASE_URL="http://supabase.test",
        SUPABASE_PUBLISHABLE_KEY="test_publishable_key",
        SUPABASE_SECRET_KEY="test_secret_key",
        PHOTO_BUCKET="recipe-images",
        RESOLUTION_TIMEOUT_SECONDS=1.0,
        RECENTS_SIZE=3,
        FEATURED_LIMIT=25,
        DEFAULT_PAGE_SIZE=20,
        MAX_PAGE_SIZE=100,
    )


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def bus() -> NotificationBus:
    return NotificationBus()


@pytest.fixture
def services(supabase: FakeSupabase, bus: NotificationBus, settings: Settings) -> ServiceContainer:
    """Fully wired services on top of the in-memory store"""
    return build_services(supabase, bus, settings)


@pytest.fixture
def tags(supabase: FakeSupabase) -> Dict[str, str]:
    """Seeded tags, name -> id"""
    supabase.seed(
        "tags",
        {"id": "tag-dessert", "name": "dessert"},
        {"id": "tag-vegan", "name": "vegan"},
        {"id": "tag-quick", "name": "quick"},
    )
    return {"dessert": "tag-dessert", "vegan": "tag-vegan", "quick": "tag-quick"}


@pytest.fixture
def users(supabase: FakeSupabase) -> List[Dict[str, Any]]:
    return supabase.seed(
        "users",
        make_user("owner-1", "alice"),
        make_user("owner-2", "bob", avatar="bob.png"),
        make_user("viewer-1", "carol"),
    )
