"""
RecipeBox Backend: Database Engine and Session Management
=========================================================

What:  Async SQLAlchemy engine, session factory and schema bootstrap.
How:   `Database` wraps one async engine per application. The session
       factory it exposes is handed to `RecipeStore`; nothing else opens
       connections except the health check.
Who:   Constructed by `create_app()`; its lifespan creates the schema on
       startup and disposes the engine on shutdown.

Connection Strategy:
    SQLite through aiosqlite. The engine's pool hands each operation its
    own connection and SQLite's file lock serializes writers; `timeout`
    (settings.db_timeout) is how long a writer waits for that lock.
    No transaction spans more than one store operation.
"""

import logging
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from recipebox.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models register their tables on `Base.metadata`, which
    `Database.create_schema()` uses to create missing tables.
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application.

    Attributes:
        engine:          AsyncEngine bound to settings.database_url
        session_factory: async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url

        engine_kwargs = {
            # Echo SQL only when the operator asked for DEBUG logs
            "echo": settings.log_level == "DEBUG",
        }
        if settings.is_sqlite:
            engine_kwargs["connect_args"] = {"timeout": settings.db_timeout}
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)

        # expire_on_commit=False: store methods return ORM objects that are
        # read after their session has been closed. With the default (True)
        # every attribute access after commit would try to lazy-load through
        # a closed session and raise.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _ensure_sqlite_directory(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        url = make_url(self.url)
        if not url.drivername.startswith("sqlite"):
            return
        if url.database in (None, "", ":memory:"):
            return
        Path(url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

    async def create_schema(self) -> None:
        """
        Create every registered table that does not exist yet.

        What:  Equivalent of CREATE TABLE IF NOT EXISTS for the recipes table.
        When:  Once, from the application lifespan (and from test fixtures).
        Raises: Any driver error; startup treats it as fatal.
        """
        # Model modules must be imported so their tables are on Base.metadata
        import recipebox.models.recipe  # noqa: F401

        self._ensure_sqlite_directory()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready at %s", make_url(self.url).render_as_string(hide_password=True))

    async def ping(self) -> bool:
        """Run SELECT 1; returns False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """
        What:  Gracefully closes all connections in the pool.
        When:  Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()
