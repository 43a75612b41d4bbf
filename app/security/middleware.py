"""Security middleware for FastAPI application."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Paths whose responses depend on who is signed in
NO_CACHE_PATHS = ("/auth", "/dashboard", "/api/user")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(
        self,
        app,
        enforce_https: bool = True,
        max_age: int = 31536000,  # 1 year
        include_subdomains: bool = True,
    ) -> None:
        super().__init__(app)
        self.enforce_https = enforce_https
        self.max_age = max_age
        self.include_subdomains = include_subdomains

    async def dispatch(self, request: Request, call_next) -> Response:
        """Add security headers to response."""
        response: Response = await call_next(request)

        # HSTS only makes sense behind TLS
        if self.enforce_https:
            hsts_value = f"max-age={self.max_age}"
            if self.include_subdomains:
                hsts_value += "; includeSubDomains"
            response.headers["Strict-Transport-Security"] = hsts_value

        # Avatars are served from the identity provider's image hosts
        csp_policy = (
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "frame-src 'none'; "
            "object-src 'none'; "
            "base-uri 'self'; "
            "form-action 'self'"
        )
        response.headers["Content-Security-Policy"] = csp_policy

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        path = request.url.path
        if path == "/" or path.startswith(NO_CACHE_PATHS):
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"

        return response
