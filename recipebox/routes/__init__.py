"""
RecipeBox Backend: API Routes Package
=====================================

Route Inventory:
    - recipes.py: /api/recipes and /api/recipes/{id}  (CRUD, list queries, OPTIONS)
    - health.py:  GET /health                         (database connectivity)

Routes handle HTTP concerns only; business logic lives in services.
"""
