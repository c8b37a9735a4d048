"""
RecipeBox Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own temporary SQLite file, uploads directory and
       frontend directory; app-level tests build a fresh app with
       create_app(test_settings) and talk to it through httpx.

Fixture Hierarchy (all function-scoped):
    test_settings ──┬── database ── store
                    ├── upload_service
                    └── app ── test_client

    sample_form, sample_image_bytes, recipe_input: plain test data

ASGITransport does not run the lifespan, so fixtures create the schema
themselves.
"""

import os
import tempfile
from typing import AsyncGenerator

# Point the module-level settings at throwaway locations BEFORE any
# recipebox import; importing recipebox.main builds an app from them.
_ENV_ROOT = tempfile.mkdtemp(prefix="recipebox_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_ENV_ROOT}/env.db"
os.environ["UPLOAD_DIR"] = os.path.join(_ENV_ROOT, "uploads")
os.environ["FRONTEND_DIR"] = os.path.join(_ENV_ROOT, "frontend")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from recipebox.config import Settings
from recipebox.database import Database
from recipebox.main import create_app
from recipebox.schemas.recipe import RecipeInput
from recipebox.services.recipe_store import RecipeStore
from recipebox.services.upload_service import UploadService


# ══════════════════════════════════════════════════════════════════════════
# Configuration and Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings rooted in this test's tmp_path, with a one-page frontend."""
    frontend = tmp_path / "frontend"
    frontend.mkdir()
    (frontend / "index.html").write_text("<!DOCTYPE html><title>RecipeBox</title>")
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'recipes.db'}",
        upload_dir=str(tmp_path / "uploads"),
        frontend_dir=str(frontend),
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    db = Database(test_settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def store(database) -> RecipeStore:
    return RecipeStore(database.session_factory)


@pytest.fixture
def upload_service(test_settings) -> UploadService:
    return UploadService(test_settings.upload_dir, test_settings.max_upload_size)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    application = create_app(test_settings)
    await application.state.database.create_schema()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Test Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_form():
    """The Oats recipe as a browser would submit it: every value a string."""
    return {
        "title": "Oats",
        "description": "Overnight oats with berries",
        "protein": "20",
        "carbs": "30",
        "is_vegan": "1",
        "is_vegetarian": "1",
        "is_gluten_free": "0",
        "cook_time": "5",
        "difficulty": "easy",
        "ingredients": "oats\nalmond milk\nberries",
        "instructions": "Mix and refrigerate overnight.",
    }


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def recipe_input():
    """Factory for RecipeInput with sensible defaults."""
    def _make(**overrides) -> RecipeInput:
        fields = {
            "title": "Test recipe",
            "description": "A recipe for tests",
            "protein": 10.0,
            "carbs": 20.0,
            "cook_time": 15,
            "difficulty": "medium",
        }
        fields.update(overrides)
        return RecipeInput(**fields)
    return _make
