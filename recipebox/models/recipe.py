"""
RecipeBox Backend: Recipe SQLAlchemy Model
==========================================

What:  ORM model for the `recipes` table.
How:   Inherits from the DeclarativeBase in recipebox.database; the table is
       created by Database.create_schema() when missing.
Who:   Queried and written exclusively by RecipeStore.

Table Design:
    - Integer autoincrement primary key assigned by SQLite
    - image_url: public URL of the upload ("/uploads/<file>"), "" when none
    - created_at: set once by the Python-side default at insert with
      microsecond precision; UPDATE statements never include it
    - ingredients / instructions: opaque free text
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from recipebox.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Recipe(Base):
    """
    A stored recipe.

    Lifecycle:
        1. Inserted by RecipeStore.insert() (id and created_at assigned)
        2. Replaced field-by-field by RecipeStore.update()
        3. Removed by RecipeStore.delete(); there is no soft delete
    """

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    image_url: Mapped[str] = mapped_column(Text, nullable=True, default="")

    # ── Macros ────────────────────────────────────────────────────────────
    protein: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    carbs: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")

    # ── Dietary Flags ─────────────────────────────────────────────────────
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    is_gluten_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")

    # Minutes
    cook_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    difficulty: Mapped[str] = mapped_column(
        String(50), nullable=False, default="medium", server_default="medium"
    )

    ingredients: Mapped[str] = mapped_column(Text, nullable=False, default="")
    instructions: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # Every list query orders by created_at
    __table_args__ = (
        Index("idx_recipes_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
