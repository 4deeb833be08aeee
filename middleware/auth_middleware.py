"""
Logs API requests that arrive without credentials on protected routes.
Actual validation is done by the FastAPI dependencies, which return the 401.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import List, Optional, Tuple

from core.logger import logger

# (method or None for any, path prefix) pairs reachable without a token
PUBLIC_API_ROUTES: List[Tuple[Optional[str], str]] = [
    (None, "/api/auth/login"),
    (None, "/api/auth/register"),
    ("GET", "/api/missing-persons"),
    ("GET", "/api/comments"),
]

# Exact paths
PUBLIC_API_PATHS: List[str] = ["/api"]


def is_public(method: str, path: str, routes: List[Tuple[Optional[str], str]] = None) -> bool:
    """Whether a request may be served without an Authorization header."""
    if not path.startswith("/api") or path in PUBLIC_API_PATHS:
        return True
    if path == "/api/missing-persons/my-reports":
        return False
    for route_method, prefix in routes or PUBLIC_API_ROUTES:
        if route_method is not None and route_method != method:
            continue
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


class AuthRequiredMiddleware(BaseHTTPMiddleware):
    """
    Early check for authentication headers on protected API routes.

    Requests are never blocked here; it exists so unauthenticated calls show
    up in the log with their origin.
    """

    def __init__(self, app, public_routes: List[Tuple[Optional[str], str]] = None):
        """
        Args:
            app: FastAPI application
            public_routes: (method, path prefix) pairs that don't require auth
        """
        super().__init__(app)
        self.public_routes = public_routes or PUBLIC_API_ROUTES

    async def dispatch(self, request: Request, call_next):
        """Process request with authentication check."""
        path = request.url.path

        if request.method == "OPTIONS" or is_public(request.method, path, self.public_routes):
            return await call_next(request)

        if not request.headers.get("authorization"):
            logger.warning(
                f"Request without authentication headers: {request.method} {path} "
                f"from {request.client.host if request.client else 'unknown'}"
            )

        return await call_next(request)
