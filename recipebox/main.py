"""
RecipeBox Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the database, store, upload and recipe services
       for one Settings object, stores them on app.state, then registers
       middleware, exception handlers, routers and static mounts.
Who:   uvicorn (`uvicorn recipebox.main:app` or `python -m recipebox`) and
       the test suite, which calls create_app() with its own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐        │
    │  │  Req ID  │→│ Logging  │→│ CORS │→│ GZip │        │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌─────────────┐               │
    │  │ /api/recipes[/id]│ │ GET /health │               │
    │  └──────────────────┘ └─────────────┘               │
    │  Static: /uploads, / (frontend)                     │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Storage→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the schema (fatal on failure)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from recipebox import __version__
from recipebox.config import Settings, settings as default_settings
from recipebox.database import Database
from recipebox.exceptions import (
    DatabaseError,
    FileStorageError,
    NotFoundError,
    RecipeBoxError,
    ValidationError,
)
from recipebox.middleware.cors import PermissiveCORSMiddleware
from recipebox.middleware.logging import RequestLoggingMiddleware
from recipebox.middleware.request_id import RequestIDMiddleware, request_id_var
from recipebox.routes import health, recipes
from recipebox.services.recipe_service import RecipeService
from recipebox.services.recipe_store import RecipeStore
from recipebox.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2026-10-19T12:00:00 [INFO] recipebox.services.recipe_store: Recipe 3 inserted
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup creates the recipes table; a failure there is logged and
    re-raised so the server exits instead of serving without storage.
    Shutdown closes pooled connections.
    """
    cfg: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(cfg.log_level)
    logger.info("=" * 60)
    logger.info("RecipeBox Backend %s starting up...", __version__)

    try:
        await database.create_schema()
    except Exception as e:
        logger.critical("Failed to open database %s: %s", cfg.database_url, str(e), exc_info=True)
        await database.dispose()
        raise

    logger.info("Uploads directory: %s", app.state.upload_service.upload_dir)
    logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("RecipeBox Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(message: str, details: Optional[dict] = None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP status codes and the shared error body
    {"error": ..., "details"?: ..., "request_id": ...}.

    Handler hierarchy:
        ValidationError         → 400 (details name the field)
        RequestValidationError  → 400 (malformed path id or query value)
        NotFoundError           → 404
        FileStorageError        → 500
        DatabaseError           → 500 (generic message; context logged only)
        RecipeBoxError (base)   → 500
        Exception (fallback)    → 500 (stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc.message, exc.context))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("query", "path", "body")),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        first = errors[0] if errors else {"field": "", "message": "Invalid request"}
        message = f"Invalid value for '{first['field']}': {first['message']}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body(message, {"field": first["field"], "errors": errors}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body(exc.message))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("An internal error occurred. Please try again later."),
        )

    @app.exception_handler(RecipeBoxError)
    async def handle_recipebox_error(request: Request, exc: RecipeBoxError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("An unexpected error occurred. Please try again."),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def _mount_static(app: FastAPI, cfg: Settings, upload_dir: Path) -> None:
    """
    Serve uploaded images under /uploads and the frontend under /.

    Mounted after the routers: "/" matches every path, so it must come last.
    """
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    frontend = Path(cfg.frontend_dir)
    if frontend.is_dir():
        app.mount("/", StaticFiles(directory=str(frontend), html=True), name="frontend")
    else:
        logger.warning("Frontend directory %s not found; serving the API only", frontend.resolve())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble an application for the given settings.

    Args:
        settings: Configuration to use; the environment-derived module
                  settings when omitted.
    """
    cfg = settings or default_settings

    database = Database(cfg)
    uploads = UploadService(cfg.upload_dir, cfg.max_upload_size)
    store = RecipeStore(database.session_factory)

    app = FastAPI(
        title="RecipeBox API",
        description=(
            "Create, browse, filter and sort recipes with nutrition data, "
            "dietary flags and an optional image."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.database = database
    app.state.upload_service = uploads
    app.state.recipe_store = store
    app.state.recipe_service = RecipeService(store, uploads)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS → GZip → app
    # RequestID is outermost so the access log line and error bodies see the ID;
    # CORS sits inside Logging so 4xx bodies from the handlers get the headers too
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(PermissiveCORSMiddleware, headers=cfg.cors_headers)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(recipes.router)
    app.include_router(health.router)
    _mount_static(app, cfg, uploads.upload_dir)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn imports `recipebox.main:app`
app = create_app()
