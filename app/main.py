"""Main FastAPI application module."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth.config import AuthConfig, auth_config
from app.auth.middleware import (
    get_principal_from_session,
    require_authenticated_user,
)
from app.auth.models import Principal
from app.auth.oauth import GoogleOAuth
from app.auth.routes import router as auth_router
from app.auth.serializer import principal_to_api
from app.auth.services import AuthService
from app.auth.session_store import SessionStore
from app.security.cors import cors_config
from app.security.middleware import SecurityHeadersMiddleware
from app.security.rate_limit import RateLimiter, RateLimitMiddleware
from app.security.session import SecureSessionConfig
from app.templates.utils import templates

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app(
    config: AuthConfig = auth_config,
    session_store: Optional[SessionStore] = None,
    oauth_client_kwargs: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SiftPilot",
        description="Email automation platform backend",
        version="1.0.0",
    )

    if session_store is None:
        session_store = SessionStore()
    oauth = GoogleOAuth(
        session_store, config=config, client_kwargs=oauth_client_kwargs
    )
    app.state.config = config
    app.state.session_store = session_store
    app.state.auth_service = AuthService(session_store, oauth)
    app.state.session_config = SecureSessionConfig(config)

    @app.on_event("startup")
    async def startup_event() -> None:
        """Log the effective configuration."""
        logger.info(f"SiftPilot starting on port {config.PORT}")
        logger.info(f"Environment: {config.ENVIRONMENT}")
        if config.google_configured:
            logger.info("Google OAuth: configured")
        else:
            logger.warning("Google OAuth: not configured, /auth/login is disabled")

    # Middleware
    app.add_middleware(
        SecurityHeadersMiddleware,
        enforce_https=config.COOKIE_SECURE,
        max_age=31536000,  # 1 year HSTS
        include_subdomains=True,
    )
    app.add_middleware(CORSMiddleware, **cors_config.get_cors_kwargs())
    app.add_middleware(
        RateLimitMiddleware, limiter=RateLimiter(), path_prefix="/api/"
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Render HTTP errors as {"error": detail}."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Hide internal failures behind a generic 500."""
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    # Routes
    app.include_router(auth_router)

    @app.get("/", response_class=HTMLResponse)
    async def root(
        request: Request,
        current_user: Optional[Principal] = Depends(get_principal_from_session),
    ) -> HTMLResponse:
        """Render the home page."""
        return templates.TemplateResponse(
            request,
            "pages/home.html",
            {
                "title": "SiftPilot",
                "user": current_user,
                "environment": config.ENVIRONMENT,
            },
        )

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        """Liveness endpoint; does not depend on OAuth configuration."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "env": config.ENVIRONMENT,
        }

    @app.get("/test")
    async def test_endpoint(
        current_user: Optional[Principal] = Depends(get_principal_from_session),
    ) -> Dict[str, Any]:
        """Report which integrations are configured."""
        return {
            "message": "SiftPilot backend is working!",
            "oauth": {
                "google": (
                    "configured" if config.google_configured else "not configured"
                ),
            },
            "session": "active" if current_user else "not active",
            "user": current_user.email if current_user else "not logged in",
        }

    @app.get("/login-failed", response_class=HTMLResponse)
    async def login_failed(request: Request) -> HTMLResponse:
        """Generic login failure page."""
        return templates.TemplateResponse(
            request, "pages/login_failed.html", {"title": "Login Failed"}
        )

    @app.get("/dashboard", response_class=HTMLResponse)
    async def dashboard(
        request: Request,
        current_user: Principal = Depends(require_authenticated_user),
    ) -> HTMLResponse:
        """Render the signed-in user's dashboard."""
        return templates.TemplateResponse(
            request,
            "pages/dashboard.html",
            {"title": "Dashboard", "user": current_user},
        )

    @app.get("/api/user")
    async def current_user_api(
        current_user: Principal = Depends(require_authenticated_user),
    ) -> Dict[str, Any]:
        """Return the signed-in user."""
        return principal_to_api(current_user)

    return app


app = create_app()
handler = Mangum(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=auth_config.PORT)
