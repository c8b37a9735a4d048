"""
RecipeBox Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error responses with the matching HTTP status code.
Who:   Raised by services and the store; caught by global handlers.

Exception Hierarchy:
    RecipeBoxError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class RecipeBoxError(Exception):
    """
    Base exception for all RecipeBox application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only ValidationError returns it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipeBoxError):
    """
    Raised when client input cannot be coerced to the expected type.

    When:    Non-numeric protein/carbs/cook_time, unknown boolean spelling,
             missing title, oversized upload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "Invalid value for 'protein': Input should be a valid number",
            "details": {"field": "protein", "errors": [...]},
            "request_id": "a1b2c3d4"
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(RecipeBoxError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/recipes/{id} with an unknown id.
    HTTP:    404 Not Found

    The store returns None (or False) for missing rows; RecipeService turns
    that into this exception so routes never branch on it.
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class FileStorageError(RecipeBoxError):
    """
    Raised when writing an upload to disk fails.

    When:    Disk full, permission denied, upload directory missing.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RecipeBoxError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Locked database past the busy timeout, I/O error, broken schema.
    HTTP:    500 Internal Server Error

    The response carries only the message; the driver error is logged
    server-side with the context dict.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
