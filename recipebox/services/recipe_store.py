"""
RecipeBox Backend: Recipe Store (Data Access)
=============================================

What:  CRUD and query operations against the `recipes` table.
How:   SQLAlchemy expression language over an async session factory.
       Every value reaches SQLite as a bound parameter; ORDER BY columns
       come only from SORTABLE_COLUMNS.
Who:   Constructed by create_app() and used by RecipeService.

Operations:
    list_all()          newest first
    filter(...)         AND of the supplied bounds and flags, newest first
    sort(by, order)     allow-listed column, asc or desc
    get_by_id(id)       record or None
    insert(data, url)   record with id and created_at assigned
    update(id, ...)     record or None when the id is unknown
    delete(id)          True when a row was removed

Each operation runs in its own session: committed on success, rolled
back on error. Driver errors surface as DatabaseError.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from sqlalchemy import Select, asc, delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipebox.exceptions import DatabaseError
from recipebox.models.recipe import Recipe
from recipebox.schemas.recipe import RecipeInput

logger = logging.getLogger(__name__)

# ── Sorting ───────────────────────────────────────────────────────────────
# Public sort keys → mapped columns. Anything else sorts by created_at.
SORTABLE_COLUMNS = {
    "cook_time": Recipe.cook_time,
    "difficulty": Recipe.difficulty,
}
DEFAULT_SORT_COLUMN = Recipe.created_at

# Fields copied from RecipeInput on insert and update
MUTABLE_FIELDS = tuple(RecipeInput.model_fields)


def _bound_given(value: Optional[float]) -> bool:
    """A numeric bound is active unless it is absent or negative."""
    return value is not None and value >= 0


class RecipeStore:
    """
    Storage accessor for recipes.

    Stateless apart from the session factory, so one instance serves
    every concurrent request.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """
        Session scope for one store operation.

        Commits when the block exits cleanly; rolls back and re-raises
        otherwise, converting driver errors into DatabaseError.
        """
        # One session per operation: no transaction outlives a single store call,
        # so concurrent requests never share uncommitted state
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
                raise DatabaseError(
                    context={"operation": operation, "error_type": type(e).__name__},
                ) from e
            except Exception:
                await session.rollback()
                raise

    async def _fetch(self, query: Select, operation: str) -> List[Recipe]:
        async with self._session(operation) as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_all(self) -> List[Recipe]:
        """All recipes, newest first."""
        query = select(Recipe).order_by(desc(Recipe.created_at), desc(Recipe.id))
        return await self._fetch(query, "list_all")

    async def filter(
        self,
        min_protein: Optional[float] = None,
        max_protein: Optional[float] = None,
        min_carbs: Optional[float] = None,
        max_carbs: Optional[float] = None,
        vegan_only: bool = False,
        vegetarian_only: bool = False,
        gluten_free_only: bool = False,
    ) -> List[Recipe]:
        """
        Recipes matching every supplied criterion, newest first.

        Numeric bounds are inclusive and skipped when None or negative.
        Flags restrict the result only when True.
        """
        query = select(Recipe)

        if _bound_given(min_protein):
            query = query.where(Recipe.protein >= min_protein)
        if _bound_given(max_protein):
            query = query.where(Recipe.protein <= max_protein)
        if _bound_given(min_carbs):
            query = query.where(Recipe.carbs >= min_carbs)
        if _bound_given(max_carbs):
            query = query.where(Recipe.carbs <= max_carbs)
        if vegan_only:
            query = query.where(Recipe.is_vegan)
        if vegetarian_only:
            query = query.where(Recipe.is_vegetarian)
        if gluten_free_only:
            query = query.where(Recipe.is_gluten_free)

        query = query.order_by(desc(Recipe.created_at), desc(Recipe.id))
        return await self._fetch(query, "filter")

    async def sort(self, sort_by: Optional[str], order: Optional[str] = "desc") -> List[Recipe]:
        """
        All recipes ordered by an allow-listed column.

        Args:
            sort_by: "cook_time" or "difficulty"; anything else means created_at
            order:   "asc" for ascending, anything else descending
        """
        column = SORTABLE_COLUMNS.get(sort_by or "", DEFAULT_SORT_COLUMN)
        direction = asc if (order or "").lower() == "asc" else desc

        if column is DEFAULT_SORT_COLUMN:
            query = select(Recipe).order_by(direction(Recipe.created_at), direction(Recipe.id))
        else:
            # Ties on the chosen column fall back to newest first
            query = select(Recipe).order_by(
                direction(column), desc(Recipe.created_at), desc(Recipe.id)
            )
        return await self._fetch(query, "sort")

    async def get_by_id(self, recipe_id: int) -> Optional[Recipe]:
        async with self._session("get_by_id") as session:
            return await session.get(Recipe, recipe_id)

    # ── Writes ────────────────────────────────────────────────────────────

    async def insert(self, data: RecipeInput, image_url: str = "") -> Recipe:
        """
        Persist a new recipe.

        Returns:
            The stored Recipe with id and created_at assigned by the store.
        """
        recipe = Recipe(image_url=image_url or "", **data.model_dump())
        async with self._session("insert") as session:
            session.add(recipe)
            await session.flush()
            await session.refresh(recipe)
        logger.info("Recipe %d inserted", recipe.id)
        return recipe

    async def update(self, recipe_id: int, data: RecipeInput, image_url: str = "") -> Optional[Recipe]:
        """
        Replace every mutable field of an existing recipe.

        id and created_at are left untouched.

        Returns:
            The updated Recipe, or None when no recipe has this id.
        """
        async with self._session("update") as session:
            recipe = await session.get(Recipe, recipe_id)
            if recipe is None:
                return None
            for name in MUTABLE_FIELDS:
                setattr(recipe, name, getattr(data, name))
            recipe.image_url = image_url or ""
            await session.flush()
        logger.info("Recipe %d updated", recipe_id)
        return recipe

    async def delete(self, recipe_id: int) -> bool:
        """Remove a recipe; False when there was nothing to remove."""
        async with self._session("delete") as session:
            result = await session.execute(delete(Recipe).where(Recipe.id == recipe_id))
            removed = result.rowcount > 0
        if removed:
            logger.info("Recipe %d deleted", recipe_id)
        return removed
