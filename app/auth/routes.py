"""Authentication routes."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from app.auth.errors import AuthenticationError, ConfigurationError
from app.auth.middleware import (
    get_auth_service,
    get_session_config,
    get_session_id,
)
from app.auth.services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.get("/login")
@router.get("/google")
async def login(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> Response:
    """Initiate Google OAuth login."""
    try:
        auth_service.oauth.config.validate_config()
        session, url = auth_service.start_login(get_session_id(request))
    except ConfigurationError as e:
        logger.error(f"Login attempted without OAuth configuration: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Google OAuth not configured"},
        )

    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    cookie_config = get_session_config(request)
    response.set_cookie(**cookie_config.get_cookie_kwargs(session.session_id))
    return response


@router.get("/callback")
@router.get("/google/callback")
async def callback(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    """Handle Google OAuth callback."""
    try:
        session = await auth_service.finish_login(
            get_session_id(request), dict(request.query_params)
        )
    except AuthenticationError as e:
        logger.warning(f"Authentication failed: {e}")
        return RedirectResponse(
            url="/login-failed", status_code=status.HTTP_302_FOUND
        )

    response = RedirectResponse(url="/dashboard", status_code=status.HTTP_302_FOUND)
    cookie_config = get_session_config(request)
    response.set_cookie(**cookie_config.get_cookie_kwargs(session.session_id))
    return response


@router.get("/logout")
async def logout(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    """Logout user and clear session."""
    auth_service.logout(get_session_id(request))
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    cookie_config = get_session_config(request)
    response.delete_cookie(**cookie_config.get_delete_cookie_kwargs())
    return response
