"""
RecipeBox Backend: Recipe Service (Business Logic Orchestrator)
===============================================================

What:  Coordinates RecipeStore and UploadService for the recipe endpoints.
How:   Receives both collaborators at construction; route handlers get the
       instance through FastAPI dependency injection.
Who:   Called by the handlers in routes/recipes.py.

Orchestration Flow (POST / PUT):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐
    │  Form    │───▶│  Store      │───▶│  Insert /    │
    │  (Route) │    │  image      │    │  Update (DB) │
    └──────────┘    │  (uploads)  │    └──────────────┘
                    └─────────────┘

    When the database write fails, the image stored for it is removed
    and the original exception propagates.

List Branching (GET /api/recipes), by precedence:
    1. any filter parameter present → RecipeStore.filter
    2. sortBy present               → RecipeStore.sort
    3. otherwise                    → RecipeStore.list_all
"""

import logging
from typing import List, Optional

from recipebox.exceptions import NotFoundError
from recipebox.models.recipe import Recipe
from recipebox.schemas.recipe import RecipeInput, RecipeQuery
from recipebox.services.recipe_store import RecipeStore
from recipebox.services.upload_service import UploadService

logger = logging.getLogger(__name__)


class RecipeService:
    """
    Business logic layer for recipe operations.

    Error Handling Strategy:
        Missing rows become NotFoundError (404). DatabaseError from the
        store and ValidationError / FileStorageError from uploads propagate
        unchanged to the global handlers.
    """

    def __init__(self, store: RecipeStore, uploads: UploadService):
        self.store = store
        self.uploads = uploads

    async def list_recipes(self, query: RecipeQuery) -> List[Recipe]:
        if query.has_filters:
            logger.debug("Listing recipes with filters: %s", query.model_dump(exclude_none=True))
            return await self.store.filter(
                min_protein=query.min_protein,
                max_protein=query.max_protein,
                min_carbs=query.min_carbs,
                max_carbs=query.max_carbs,
                vegan_only=bool(query.vegan),
                vegetarian_only=bool(query.vegetarian),
                gluten_free_only=bool(query.gluten_free),
            )
        if query.has_sorting:
            return await self.store.sort(query.sort_by, query.order)
        return await self.store.list_all()

    async def get_recipe(self, recipe_id: int) -> Recipe:
        """
        Raises:
            NotFoundError: No recipe with this id (→ 404)
        """
        recipe = await self.store.get_by_id(recipe_id)
        if recipe is None:
            raise NotFoundError(resource="Recipe", resource_id=recipe_id)
        return recipe

    async def _store_image(self, image_name: Optional[str], image_content: Optional[bytes]) -> Optional[str]:
        """
        Store the uploaded image if one was sent.

        A file part without a filename is what browsers submit for an
        untouched file input; it counts as no image.
        """
        if not image_name:
            return None
        return await self.uploads.store_upload(image_name, image_content or b"")

    async def create_recipe(
        self,
        data: RecipeInput,
        image_name: Optional[str] = None,
        image_content: Optional[bytes] = None,
    ) -> Recipe:
        """
        Store the optional image, then insert the recipe.

        Returns:
            The stored Recipe with id and created_at assigned
        """
        image_url = await self._store_image(image_name, image_content)
        try:
            return await self.store.insert(data, image_url or "")
        except Exception:
            if image_url:
                await self.uploads.cleanup(image_url)
            raise

    async def update_recipe(
        self,
        recipe_id: int,
        data: RecipeInput,
        image_name: Optional[str] = None,
        image_content: Optional[bytes] = None,
    ) -> Recipe:
        """
        Replace every field of an existing recipe.

        Without a new image the current image_url is kept, which needs a
        read before the write.

        Raises:
            NotFoundError: No recipe with this id (→ 404)
        """
        existing = await self.get_recipe(recipe_id)

        new_image_url = await self._store_image(image_name, image_content)
        image_url = new_image_url if new_image_url is not None else existing.image_url

        try:
            updated = await self.store.update(recipe_id, data, image_url or "")
        except Exception:
            if new_image_url:
                await self.uploads.cleanup(new_image_url)
            raise

        if updated is None:
            # Deleted between the read and the write
            if new_image_url:
                await self.uploads.cleanup(new_image_url)
            raise NotFoundError(resource="Recipe", resource_id=recipe_id)
        return updated

    async def delete_recipe(self, recipe_id: int) -> None:
        """
        Raises:
            NotFoundError: No recipe with this id (→ 404)
        """
        if not await self.store.delete(recipe_id):
            raise NotFoundError(resource="Recipe", resource_id=recipe_id)
