"""
RecipeBox Backend: Application Package
======================================

What: Recipe storage service with filtering, sorting and image uploads.
Who:  Imported by uvicorn (`recipebox.main:app`), pytest and `python -m recipebox`.

Architecture Note:
    The backend keeps the same layering from the HTTP edge down to the table:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     RecipeService (Orchestration)   │  ← branching, uploads, not-found
    ├─────────────────────────────────────┤
    │   RecipeStore / UploadService       │  ← SQL and file system access
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy over SQLite
    └─────────────────────────────────────┘

    Each layer is built once per application by `create_app()` and handed
    to the layer above it; nothing below the routes reads global state.
"""

__version__ = "1.0.0"
