"""
RecipeBox Backend: Request Dependencies
=======================================

What:  FastAPI dependency providers for the objects create_app() builds.
How:   Each provider reads the instance stored on `app.state`, so handlers
       declare `Depends(get_recipe_service)` instead of importing globals.
       Tests override them through `app.dependency_overrides` or by
       building an app with their own Settings.
"""

from fastapi import Request

from recipebox.config import Settings
from recipebox.database import Database
from recipebox.services.recipe_service import RecipeService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_recipe_service(request: Request) -> RecipeService:
    return request.app.state.recipe_service
