"""
RecipeBox Backend: Services Layer
=================================

What:  Business logic between routes (HTTP) and the database.
How:   create_app() constructs one instance of each service and stores it
       on app.state; routes receive them through FastAPI dependencies.

Service Inventory:
    - RecipeStore:   SQL access to the recipes table
    - UploadService: image upload storage and cleanup
    - RecipeService: orchestrates store and uploads for the endpoints
"""
