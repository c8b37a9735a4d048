"""
RecipeBox Backend: HTTP API Tests
=================================

What:  End-to-end requests against create_app(test_settings) through httpx.
How:   Real SQLite file and uploads directory under tmp_path.

Scenarios:
    ✅ Oats: create, find through ?vegan=true, read back identical values
    ✅ Images: stored, served from /uploads, kept or replaced on update
    ✅ Not found: GET/PUT/DELETE of unknown ids → 404 {"error": "Recipe not found"}
    ✅ Malformed form, query and path values → 400
    ✅ List precedence: filter parameters win over sortBy
    ✅ CORS headers on every response, OPTIONS preflight, X-Request-ID
    ✅ /health and the frontend mount
"""

import pytest
from httpx import ASGITransport, AsyncClient

from recipebox.main import create_app

RECIPE_FIELDS = (
    "title", "description", "image_url", "protein", "carbs", "is_vegan",
    "is_vegetarian", "is_gluten_free", "cook_time", "difficulty",
    "ingredients", "instructions",
)


async def _create(client, form, **overrides):
    payload = dict(form, **overrides)
    response = await client.post("/api/recipes", data=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateAndRead:
    @pytest.mark.asyncio
    async def test_oats_scenario(self, test_client, sample_form):
        created = await _create(test_client, sample_form)

        assert created["message"] == "Recipe created successfully"
        recipe_id = created["id"]
        assert created["recipe"]["id"] == recipe_id

        vegan = await test_client.get("/api/recipes", params={"vegan": "true"})
        assert vegan.status_code == 200
        assert recipe_id in [r["id"] for r in vegan.json()]

        detail = await test_client.get(f"/api/recipes/{recipe_id}")
        assert detail.status_code == 200
        body = detail.json()
        assert body["title"] == "Oats"
        assert body["protein"] == 20
        assert body["carbs"] == 30
        assert body["is_vegan"] is True
        assert body["is_gluten_free"] is False
        assert body["cook_time"] == 5
        assert body["image_url"] == ""
        assert body["created_at"]
        for field in RECIPE_FIELDS:
            assert body[field] == created["recipe"][field]

    @pytest.mark.asyncio
    async def test_oats_without_description(self, test_client):
        """The bare Oats form (no description) is accepted as-is."""
        form = {"title": "Oats", "protein": "20", "carbs": "30", "is_vegan": "true", "cook_time": "5"}
        response = await test_client.post("/api/recipes", data=form)
        assert response.status_code == 201, response.text
        recipe_id = response.json()["id"]

        vegan = await test_client.get("/api/recipes", params={"vegan": "true"})
        assert recipe_id in [r["id"] for r in vegan.json()]

        body = (await test_client.get(f"/api/recipes/{recipe_id}")).json()
        assert body["title"] == "Oats"
        assert body["description"] == ""
        assert body["protein"] == 20
        assert body["carbs"] == 30
        assert body["is_vegan"] is True
        assert body["cook_time"] == 5

    @pytest.mark.asyncio
    async def test_minimal_form_uses_defaults(self, test_client):
        created = await _create(test_client, {"title": "Toast", "description": "Bread, toasted"})
        recipe = created["recipe"]
        assert recipe["protein"] == 0
        assert recipe["is_vegan"] is False
        assert recipe["difficulty"] == "medium"
        assert recipe["ingredients"] == ""

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, test_client, sample_form):
        first = await _create(test_client, sample_form, title="First")
        second = await _create(test_client, sample_form, title="Second")

        response = await test_client.get("/api/recipes")
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [second["id"], first["id"]]

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client):
        response = await test_client.get("/api/recipes")
        assert response.status_code == 200
        assert response.json() == []


class TestImages:
    @pytest.mark.asyncio
    async def test_uploaded_image_is_served(self, test_client, sample_form, sample_image_bytes):
        response = await test_client.post(
            "/api/recipes",
            data=sample_form,
            files={"image": ("oats.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 201
        image_url = response.json()["recipe"]["image_url"]
        assert image_url.startswith("/uploads/")
        assert image_url.endswith("_oats.jpg")

        served = await test_client.get(image_url)
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_image(self, test_client, sample_form, sample_image_bytes):
        created = await test_client.post(
            "/api/recipes",
            data=sample_form,
            files={"image": ("oats.jpg", sample_image_bytes, "image/jpeg")},
        )
        recipe = created.json()["recipe"]

        updated = await test_client.put(
            f"/api/recipes/{recipe['id']}",
            data=dict(sample_form, title="Oats v2", cook_time="7"),
        )
        assert updated.status_code == 200
        body = updated.json()
        assert body["message"] == "Recipe updated successfully"
        assert body["recipe"]["title"] == "Oats v2"
        assert body["recipe"]["cook_time"] == 7
        assert body["recipe"]["image_url"] == recipe["image_url"]
        assert body["recipe"]["created_at"] == recipe["created_at"]

    @pytest.mark.asyncio
    async def test_update_with_image_replaces_url(self, test_client, sample_form, sample_image_bytes):
        recipe_id = (await _create(test_client, sample_form))["id"]

        updated = await test_client.put(
            f"/api/recipes/{recipe_id}",
            data=sample_form,
            files={"image": ("bowl.png", sample_image_bytes, "image/png")},
        )
        assert updated.status_code == 200
        assert updated.json()["recipe"]["image_url"].endswith("_bowl.png")

        detail = await test_client.get(f"/api/recipes/{recipe_id}")
        assert detail.json()["image_url"].endswith("_bowl.png")

    @pytest.mark.asyncio
    async def test_oversized_image_rejected(self, test_settings, sample_form):
        small = test_settings.model_copy(update={"max_upload_size": 1024})
        app = create_app(small)
        await app.state.database.create_schema()
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post(
                    "/api/recipes",
                    data=sample_form,
                    files={"image": ("big.jpg", b"x" * 2048, "image/jpeg")},
                )
                assert response.status_code == 400
                assert response.json()["details"]["field"] == "image"

                listed = await client.get("/api/recipes")
                assert listed.json() == []
        finally:
            await app.state.database.dispose()


class TestNotFound:
    @pytest.mark.asyncio
    async def test_get_missing(self, test_client):
        response = await test_client.get("/api/recipes/999")
        assert response.status_code == 404
        assert response.json()["error"] == "Recipe not found"

    @pytest.mark.asyncio
    async def test_update_missing(self, test_client, sample_form):
        response = await test_client.put("/api/recipes/999", data=sample_form)
        assert response.status_code == 404
        assert response.json()["error"] == "Recipe not found"

    @pytest.mark.asyncio
    async def test_delete_then_get(self, test_client, sample_form):
        recipe_id = (await _create(test_client, sample_form))["id"]

        deleted = await test_client.delete(f"/api/recipes/{recipe_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Recipe deleted successfully", "id": recipe_id}

        assert (await test_client.get(f"/api/recipes/{recipe_id}")).status_code == 404
        assert (await test_client.delete(f"/api/recipes/{recipe_id}")).status_code == 404


class TestMalformedInput:
    @pytest.mark.asyncio
    async def test_non_numeric_protein(self, test_client, sample_form):
        response = await test_client.post("/api/recipes", data=dict(sample_form, protein="lots"))
        assert response.status_code == 400
        body = response.json()
        assert "protein" in body["error"]
        assert body["details"]["field"] == "protein"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_cook_time_too_large_for_storage(self, test_client, sample_form):
        response = await test_client.post(
            "/api/recipes", data=dict(sample_form, cook_time="100000000000000000000")
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "cook_time"
        assert response.headers["access-control-allow-origin"] == "*"
        assert (await test_client.get("/api/recipes")).json() == []

    @pytest.mark.asyncio
    async def test_missing_title(self, test_client, sample_form):
        form = {k: v for k, v in sample_form.items() if k != "title"}
        response = await test_client.post("/api/recipes", data=form)
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "title"

    @pytest.mark.asyncio
    async def test_non_numeric_query_bound(self, test_client):
        response = await test_client.get("/api/recipes", params={"minProtein": "abc"})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "minProtein"

    @pytest.mark.asyncio
    async def test_non_numeric_id(self, test_client):
        response = await test_client.get("/api/recipes/abc")
        assert response.status_code == 400


class TestListQueries:
    @pytest.mark.asyncio
    async def test_filters(self, test_client, sample_form):
        await _create(test_client, sample_form, title="Shake", protein="40", carbs="10", is_vegan="0")
        await _create(test_client, sample_form, title="Salad", protein="5", carbs="8", is_gluten_free="1")
        await _create(test_client, sample_form, title="Oats")

        high = await test_client.get("/api/recipes", params={"minProtein": "15", "maxCarbs": "20"})
        assert [r["title"] for r in high.json()] == ["Shake"]

        gluten_free = await test_client.get("/api/recipes", params={"glutenFree": "1"})
        assert [r["title"] for r in gluten_free.json()] == ["Salad"]

        ignored = await test_client.get("/api/recipes", params={"minProtein": "-1"})
        assert len(ignored.json()) == 3

    @pytest.mark.asyncio
    async def test_sort(self, test_client, sample_form):
        for title, minutes in (("Slow", "90"), ("Quick", "5"), ("Medium", "30")):
            await _create(test_client, sample_form, title=title, cook_time=minutes)

        asc = await test_client.get("/api/recipes", params={"sortBy": "cook_time", "order": "asc"})
        assert [r["cook_time"] for r in asc.json()] == [5, 30, 90]

        default_order = await test_client.get("/api/recipes", params={"sortBy": "cook_time"})
        assert [r["cook_time"] for r in default_order.json()] == [90, 30, 5]

    @pytest.mark.asyncio
    async def test_filter_takes_precedence_over_sort(self, test_client, sample_form):
        await _create(test_client, sample_form, title="Slow", cook_time="90", protein="30")
        await _create(test_client, sample_form, title="Quick", cook_time="5", protein="30")

        response = await test_client.get(
            "/api/recipes",
            params={"minProtein": "25", "sortBy": "cook_time", "order": "desc"},
        )
        # Filtered results stay newest first; sortBy is ignored
        assert [r["title"] for r in response.json()] == ["Quick", "Slow"]


class TestCrossCutting:
    @pytest.mark.asyncio
    async def test_cors_headers_on_every_response(self, test_client):
        for response in (
            await test_client.get("/api/recipes"),
            await test_client.get("/api/recipes/999"),
        ):
            assert response.headers["access-control-allow-origin"] == "*"
            assert response.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
            assert response.headers["access-control-allow-headers"] == "Content-Type"

    @pytest.mark.asyncio
    async def test_options_preflight(self, test_client):
        for path in ("/api/recipes", "/api/recipes/42"):
            response = await test_client.options(path)
            assert response.status_code == 200
            assert response.content == b""
            assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_request_id(self, test_client):
        generated = await test_client.get("/api/recipes")
        assert generated.headers["x-request-id"]

        echoed = await test_client.get("/api/recipes", headers={"X-Request-ID": "trace-123"})
        assert echoed.headers["x-request-id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/api/recipes/999", headers={"X-Request-ID": "trace-404"})
        assert response.json()["request_id"] == "trace-404"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_frontend_served_at_root(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert "RecipeBox" in response.text
