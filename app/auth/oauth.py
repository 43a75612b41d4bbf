"""OAuth handlers for Google authentication."""

import asyncio
import hmac
import secrets
from typing import Any, Dict, Mapping, Optional

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from app.auth.config import AuthConfig, auth_config
from app.auth.errors import AuthenticationError
from app.auth.models import Principal, Provider
from app.auth.serializer import principal_from_profile
from app.auth.session_store import SessionStore


def generate_state() -> str:
    """Generate an unguessable anti-forgery state token."""
    return secrets.token_urlsafe(32)


class GoogleOAuth:
    """Google OAuth handler.

    Login is a two-step exchange. ``begin_login`` issues a state token,
    binds it to the caller's session and returns the Google authorization
    URL. ``complete_login`` checks the echoed state, trades the code for
    an access token over a direct channel and maps the userinfo profile to
    a ``Principal``.
    """

    def __init__(
        self,
        session_store: SessionStore,
        config: AuthConfig = auth_config,
        client_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize OAuth handler.

        Args:
            session_store: Store holding the in-flight login state
            config: Authentication settings
            client_kwargs: Extra keyword arguments for the httpx client
        """
        self.session_store = session_store
        self.config = config
        self.client_kwargs = client_kwargs or {}

    @property
    def timeout(self) -> float:
        return self.config.OAUTH_TIMEOUT_SECONDS

    def get_client(self) -> AsyncOAuth2Client:
        """Get a fresh OAuth client."""
        return AsyncOAuth2Client(
            client_id=self.config.GOOGLE_CLIENT_ID,
            client_secret=self.config.GOOGLE_CLIENT_SECRET,
            scope=self.config.GOOGLE_SCOPES,
            redirect_uri=self.config.GOOGLE_CALLBACK_URL,
            timeout=self.timeout,
            **self.client_kwargs,
        )

    def begin_login(self, session_id: str) -> str:
        """Start a login and return the provider authorization URL.

        Raises:
            ConfigurationError: if Google credentials are not set
            SessionNotFoundError: if the session does not exist
        """
        self.config.validate_config()

        state = generate_state()
        self.session_store.set_login_state(session_id, state)

        return prepare_grant_uri(
            self.config.GOOGLE_AUTHORIZE_URL,
            client_id=self.config.GOOGLE_CLIENT_ID,
            response_type="code",
            redirect_uri=self.config.GOOGLE_CALLBACK_URL,
            scope=self.config.GOOGLE_SCOPES,
            state=state,
        )

    async def complete_login(
        self, session_id: Optional[str], params: Mapping[str, str]
    ) -> Principal:
        """Verify a provider callback and return the signed-in principal.

        Raises:
            AuthenticationError: on state mismatch, provider error, failed
                exchange, timeout or an unusable profile
        """
        if params.get("error"):
            raise AuthenticationError(f"Provider returned error: {params['error']}")

        # State must be checked before any token exchange
        expected_state = (
            self.session_store.pop_login_state(session_id) if session_id else None
        )
        returned_state = params.get("state")
        if not expected_state or not returned_state:
            raise AuthenticationError("Missing OAuth state")
        if not hmac.compare_digest(
            expected_state.encode("utf-8"), returned_state.encode("utf-8")
        ):
            raise AuthenticationError("OAuth state mismatch")

        code = params.get("code")
        if not code:
            raise AuthenticationError("Authorization code missing")

        try:
            profile = await asyncio.wait_for(
                self._fetch_profile(code), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise AuthenticationError("Timed out talking to Google") from e

        return principal_from_profile(profile, Provider.GOOGLE)

    async def _fetch_profile(self, code: str) -> Dict[str, Any]:
        """Exchange the authorization code and fetch the userinfo profile."""
        try:
            async with self.get_client() as client:
                token = await client.fetch_token(
                    self.config.GOOGLE_TOKEN_URL, code=code
                )
                if not token or not token.get("access_token"):
                    raise AuthenticationError("Token response has no access token")

                response = await client.get(self.config.GOOGLE_USERINFO_URL)
                response.raise_for_status()
                return response.json()
        except (AuthlibBaseError, httpx.HTTPError, ValueError, KeyError) as e:
            raise AuthenticationError(f"Token exchange failed: {e}") from e
