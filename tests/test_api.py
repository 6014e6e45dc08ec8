"""
Gateway tests: routing, auth dependencies and error mapping
"""
import pytest
from fastapi.testclient import TestClient

from app.core.app import create_app
from app.core.security import get_current_user, get_current_user_optional
from tests.conftest import make_recipe


def _client(services, supabase, user_id=None) -> TestClient:
    """App wired to in-memory services; lifespan is not run"""
    app = create_app()
    app.state.services = services
    app.state.supabase = supabase
    if user_id:
        user = {"id": user_id, "email": f"{user_id}@example.com"}
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_current_user_optional] = lambda: user
    return TestClient(app)


@pytest.fixture
def client(services, supabase, users, tags):
    return _client(services, supabase, "owner-1")


@pytest.fixture
def anonymous_client(services, supabase, users, tags):
    return _client(services, supabase)


class TestHealth:

    def test_health(self, anonymous_client):
        response = anonymous_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRecipeEndpoints:

    def test_create_and_get(self, client):
        response = client.post("/api/v1/recipes", json={
            "name": "Brownies",
            "ingredients": [{"name": "cocoa", "amount": 50, "unit": "g"}],
            "steps": ["Mix", "Bake"],
            "tags": ["dessert", "chocolate"],
        })

        assert response.status_code == 201
        body = response.json()
        assert body["tags"] == ["dessert", "chocolate"]
        assert body["owner"]["username"] == "alice"
        assert body["rating"] == {"average_rating": 0, "number_of_ratings": 0}
        assert body["picture"] == ""
        assert body["is_favorite"] is False

        fetched = client.get(f"/api/v1/recipes/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Brownies"

    def test_unknown_recipe(self, client):
        response = client.get("/api/v1/recipes/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "resolution_failed"

    def test_anonymous_view_has_no_viewer_fields(self, anonymous_client, supabase):
        supabase.seed("recipes", make_recipe("r1"))

        body = anonymous_client.get("/api/v1/recipes/r1").json()

        assert body["is_favorite"] is None
        assert body["my_rating"] is None
        assert body["is_on_cook_list"] is None

    def test_create_requires_auth(self, anonymous_client):
        response = anonymous_client.post("/api/v1/recipes", json={"name": "Brownies"})

        assert response.status_code in (401, 403)

    def test_delete_by_other_user(self, services, supabase, users):
        supabase.seed("recipes", make_recipe("r1", owner="owner-2"))
        client = _client(services, supabase, "owner-1")

        response = client.delete("/api/v1/recipes/r1")

        assert response.status_code == 403
        assert response.json()["error_code"] == "not_authorized"
        assert len(supabase.rows("recipes")) == 1

    def test_delete(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1", owner="owner-1"))

        response = client.delete("/api/v1/recipes/r1")

        assert response.status_code == 200
        assert response.json()["failed_cleanups"] == []
        assert supabase.rows("recipes") == []

    def test_filter_without_criteria_returns_featured(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1"), make_recipe("r2", created_at="2024-02-01T10:00:00+00:00"))

        response = client.post("/api/v1/recipes/filter", json={})

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body["items"]] == ["r2", "r1"]
        assert body["total"] == 2


class TestRatingEndpoints:

    def test_rate_recipe(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1"))

        response = client.post("/api/v1/ratings/r1", json={"rating": 4.5})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get("/api/v1/ratings/r1/me").json()["rating"] == 4.5

    def test_same_rating_is_soft_rejection(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1"))
        client.post("/api/v1/ratings/r1", json={"rating": 4})

        response = client.post("/api/v1/ratings/r1", json={"rating": 4})

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["message"] == "This rating is already present"

    @pytest.mark.parametrize("rating", [0, 3.7, 5.5])
    def test_invalid_rating(self, client, supabase, rating):
        supabase.seed("recipes", make_recipe("r1"))

        response = client.post("/api/v1/ratings/r1", json={"rating": rating})

        assert response.status_code == 422

    def test_rate_unknown_recipe(self, client):
        response = client.post("/api/v1/ratings/missing", json={"rating": 4})

        assert response.status_code == 404


class TestListEndpoints:

    def test_favorites(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1"), make_recipe("r2"))

        assert client.post("/api/v1/favorites/r2").json()["success"] is True
        assert client.post("/api/v1/favorites/r1").json()["success"] is True
        assert client.post("/api/v1/favorites/r1").json()["success"] is False

        body = client.get("/api/v1/favorites").json()
        assert [item["id"] for item in body["items"]] == ["r2", "r1"]
        assert all(item["is_favorite"] for item in body["items"])

    def test_cook_list_remove(self, client, supabase):
        supabase.seed("recipes", make_recipe("r1"))
        client.post("/api/v1/cook-list/r1")

        response = client.delete("/api/v1/cook-list/r1")

        assert response.json()["success"] is True
        assert client.get("/api/v1/cook-list").json()["items"] == []

    def test_tag_search(self, client):
        response = client.get("/api/v1/tags/search", params={"name": "des"})

        assert response.json() == {"tags": [{"id": "tag-dessert", "name": "dessert"}]}
