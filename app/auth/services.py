"""Login and logout orchestration."""

import logging
from typing import Mapping, Optional, Tuple

from app.auth.errors import SessionNotFoundError
from app.auth.models import Session
from app.auth.oauth import GoogleOAuth
from app.auth.session_store import SessionStore

logger = logging.getLogger(__name__)


class AuthService:
    """Drives the login flow and session rotation on top of the store."""

    def __init__(self, session_store: SessionStore, oauth: GoogleOAuth) -> None:
        self.session_store = session_store
        self.oauth = oauth

    def get_or_create_session(self, session_id: Optional[str]) -> Session:
        """Return the caller's live session, creating one if needed."""
        if session_id:
            try:
                return self.session_store.get(session_id)
            except SessionNotFoundError:
                pass
        return self.session_store.create()

    def start_login(self, session_id: Optional[str]) -> Tuple[Session, str]:
        """Bind a new login attempt to a session and return the redirect URL."""
        session = self.get_or_create_session(session_id)
        url = self.oauth.begin_login(session.session_id)
        return session, url

    async def finish_login(
        self, session_id: Optional[str], params: Mapping[str, str]
    ) -> Session:
        """Verify the provider callback and return a new authenticated session.

        The pre-login session is destroyed so the authenticated session never
        reuses an id the client held before login.
        """
        principal = await self.oauth.complete_login(session_id, params)

        if session_id:
            self.session_store.destroy(session_id)
        session = self.session_store.create()
        session = self.session_store.attach(session.session_id, principal)
        logger.info(
            f"User {principal.external_id} signed in via {principal.provider.value}"
        )
        return session

    def logout(self, session_id: Optional[str]) -> None:
        """Destroy the session. Never fails from the caller's point of view."""
        if not session_id:
            return
        try:
            self.session_store.destroy(session_id)
        except Exception as e:
            logger.error(f"Failed to destroy session during logout: {e}")
