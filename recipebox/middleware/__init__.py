"""
RecipeBox Backend: Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → [GZip] → Route / Static

    Responses travel back through the same chain in reverse:
    - CORS headers are added to every response, including 4xx bodies
      produced by the exception handlers and files from the static mounts
    - Logging measures duration after the handler returns
    - Request ID echoes X-Request-ID last
"""
