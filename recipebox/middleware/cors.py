"""
RecipeBox Backend: Permissive CORS Middleware
=============================================

What:  Adds a fixed set of Access-Control-* headers to every response.
How:   The headers come from Settings.cors_headers and are set whether or
       not the request carried an Origin header. Preflight OPTIONS requests
       are answered by explicit routes, so this middleware never
       short-circuits a request.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, headers: Dict[str, str]):
        super().__init__(app)
        self.cors_headers = dict(headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.cors_headers.items():
            response.headers[name] = value
        return response
