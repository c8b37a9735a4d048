"""
RecipeBox Backend: Application Configuration
============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types and ranges, and exposes a default `settings` object.
Who:   `create_app()` receives a Settings instance; tests build their own.
When:  The default instance is loaded at import time and validated before
       the app starts serving.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for running from a checkout:
    a SQLite file, an uploads directory and a frontend directory, all
    relative to the working directory.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Async SQLAlchemy URL. The aiosqlite driver keeps the whole store in
    # one file, created on first start.
    database_url: str = Field(
        default="sqlite+aiosqlite:///./recipes.db",
        description="Async SQLAlchemy database URL",
    )

    # Seconds a connection waits on SQLite's write lock before failing
    db_timeout: float = Field(default=30.0, ge=1.0, le=600.0)

    # ── File Storage ──────────────────────────────────────────────────────
    # Uploaded images land here and are served back under /uploads
    upload_dir: str = Field(default="./uploads")

    # Static frontend assets, mounted at the site root
    frontend_dir: str = Field(default="./frontend")

    # Upper bound for a single uploaded image, in bytes (5MB)
    max_upload_size: int = Field(default=5_242_880, ge=1024, le=104_857_600)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Value of Access-Control-Allow-Origin on every response
    cors_allow_origin: str = Field(default="*")
    cors_allow_methods: str = Field(default="GET, POST, PUT, DELETE, OPTIONS")
    cors_allow_headers: str = Field(default="Content-Type")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def cors_headers(self) -> dict:
        """Headers attached to every response by the CORS middleware."""
        return {
            "Access-Control-Allow-Origin": self.cors_allow_origin,
            "Access-Control-Allow-Methods": self.cors_allow_methods,
            "Access-Control-Allow-Headers": self.cors_allow_headers,
        }

    # SQLite gets a busy timeout, other backends pool_pre_ping (see Database)
    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }


# Default instance used by `recipebox.main:app` and `python -m recipebox`
settings = Settings()
