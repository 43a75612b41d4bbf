"""Authentication middleware and dependencies."""

from typing import Optional

from fastapi import HTTPException, Request, status

from app.auth.errors import SessionNotFoundError
from app.auth.models import Principal
from app.auth.services import AuthService
from app.auth.session_store import SessionStore
from app.security.session import SecureSessionConfig


class AccessGuard:
    """Decides whether a session id belongs to a signed-in user."""

    def __init__(self, session_store: SessionStore) -> None:
        self.session_store = session_store

    def authorize(self, session_id: Optional[str]) -> Optional[Principal]:
        """Return the session's principal, or None when unauthenticated."""
        if not session_id:
            return None
        try:
            session = self.session_store.get(session_id)
        except SessionNotFoundError:
            return None
        return session.principal


def get_session_store(request: Request) -> SessionStore:
    """Get the application's session store."""
    return request.app.state.session_store


def get_auth_service(request: Request) -> AuthService:
    """Get the application's auth service."""
    return request.app.state.auth_service


def get_session_config(request: Request) -> SecureSessionConfig:
    """Get the application's session cookie configuration."""
    return request.app.state.session_config


def get_session_id(request: Request) -> Optional[str]:
    """Get the verified session id from the session cookie."""
    cookie_config = get_session_config(request)
    cookie = request.cookies.get(cookie_config.SESSION_COOKIE_NAME)
    return cookie_config.unsign_session_id(cookie)


async def get_principal_from_session(request: Request) -> Optional[Principal]:
    """Get the signed-in principal for this request, if any."""
    guard = AccessGuard(get_session_store(request))
    return guard.authorize(get_session_id(request))


async def require_authenticated_user(request: Request) -> Principal:
    """Dependency that requires an authenticated user."""
    principal = await get_principal_from_session(request)
    if not principal:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return principal
